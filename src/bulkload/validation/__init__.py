"""Pre-flight validation of source files."""

from bulkload.validation.core import ValidationResult, ValidationRunner
from bulkload.validation.reporter import ConsoleReporter

__all__ = ["ConsoleReporter", "ValidationResult", "ValidationRunner"]
