"""
Configuration management with typed Pydantic models.

Provides environment-aware configuration loading for the
reset-and-load run.
"""

from bulkload.config.loader import load_config
from bulkload.config.settings import (
    BulkLoadConfig,
    DatabaseConfig,
    DatasetConfig,
    LoaderConfig,
    LoggingConfig,
    SourceConfig,
)

__all__ = [
    "BulkLoadConfig",
    "DatabaseConfig",
    "DatasetConfig",
    "LoaderConfig",
    "LoggingConfig",
    "SourceConfig",
    "load_config",
]
