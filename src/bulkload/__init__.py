"""
bulkload: Database Reset and Delimited-File Bulk Loading.

This package provides fixed table schemas, a provisioning step that
recreates the target database, and a bulk loader that streams CSV files
into the created tables with per-table error reporting.
"""

from importlib.metadata import version

__version__ = version("bulkload")

__all__ = ["__version__"]
