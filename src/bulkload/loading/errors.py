"""Exceptions raised inside a load and converted to LoadError at its boundary."""

from bulkload.loading.results import SEVERITY_USER, ErrorKind, LoadError


class LoadFailure(Exception):
    """Base class for failures detected by the loader itself."""

    kind: ErrorKind = ErrorKind.DATABASE

    def __init__(
        self,
        code: str,
        message: str,
        *,
        line: int | None = None,
        column: str | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.line = line
        self.column = column

    def to_error(self) -> LoadError:
        """Convert to a reportable LoadError."""
        return LoadError(
            kind=self.kind,
            code=self.code,
            message=self.message,
            severity=SEVERITY_USER,
            line=self.line,
            column=self.column,
        )


class FormatFailure(LoadFailure):
    """A source record does not fit the destination table."""

    kind = ErrorKind.FORMAT


class TableSchemaFailure(LoadFailure):
    """The destination table is unknown, missing, or differs from its definition."""

    kind = ErrorKind.SCHEMA
