"""
Result values returned by the loader and the batch driver.

Nothing in the loading package prints: callers render these values.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

# Severity levels on the SQL Server scale
SEVERITY_USER = 16
SEVERITY_FATAL = 20


class ErrorKind(str, Enum):
    """Classification of load failures."""

    FILE_ACCESS = "file_access"  # Missing file, permission denied
    FORMAT = "format"  # Field count, conversion, truncation
    SCHEMA = "schema"  # Unknown, missing or altered table
    DATABASE = "database"  # Errors raised by the engine itself


@dataclass(frozen=True)
class LoadError:
    """Diagnostic for a failed load."""

    kind: ErrorKind
    code: str
    message: str
    severity: int = SEVERITY_USER
    line: int | None = None
    column: str | None = None

    def describe(self) -> str:
        """One-line description for operators."""
        where = ""
        if self.line is not None:
            where = f" at line {self.line}"
            if self.column is not None:
                where += f", column {self.column}"
        return (
            f"{self.kind.value} error {self.code} "
            f"(severity {self.severity}){where}: {self.message}"
        )


@dataclass
class LoadResult:
    """Outcome of loading one file into one table."""

    table: str
    source: Path
    rows_loaded: int = 0
    row_count: int | None = None
    error: LoadError | None = None
    elapsed_seconds: float = 0.0

    @property
    def succeeded(self) -> bool:
        """Whether the load completed."""
        return self.error is None


@dataclass(frozen=True)
class TableCount:
    """Row count of a table; None when it could not be counted."""

    table: str
    rows: int | None


@dataclass
class BatchResult:
    """Outcome of a batch: one result per dataset plus final table counts."""

    results: list[LoadResult] = field(default_factory=list)
    counts: list[TableCount] = field(default_factory=list)

    @property
    def failures(self) -> list[LoadResult]:
        """Loads that failed."""
        return [r for r in self.results if not r.succeeded]

    @property
    def errors(self) -> list[LoadError]:
        """Errors reported by failed loads."""
        return [r.error for r in self.results if r.error is not None]

    @property
    def total_rows(self) -> int:
        """Sum of all countable table rows."""
        return sum(c.rows for c in self.counts if c.rows is not None)
