"""
Bulk loading of delimited files into the schema tables.

The loader handles one (table, file) pair; the batch driver runs the
configured list and counts the tables afterwards.
"""

from bulkload.loading.batch import BatchLoader, run_batch
from bulkload.loading.loader import BulkFileLoader
from bulkload.loading.results import (
    BatchResult,
    ErrorKind,
    LoadError,
    LoadResult,
    TableCount,
)

__all__ = [
    "BatchLoader",
    "BatchResult",
    "BulkFileLoader",
    "ErrorKind",
    "LoadError",
    "LoadResult",
    "TableCount",
    "run_batch",
]
