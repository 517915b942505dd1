"""
Pre-flight validation of source files.

Reads each configured file with the loader's record reader into a DataFrame
of raw fields and validates it against the pandera schema of its
destination table. Nothing is written to the database.
"""

from dataclasses import dataclass
from pathlib import Path

import pandas as pd
from pandera.errors import SchemaErrors

from bulkload.config.settings import BulkLoadConfig, DatasetConfig
from bulkload.loading.errors import FormatFailure
from bulkload.loading.records import read_records
from bulkload.schemas.frames import frame_schema
from bulkload.schemas.registry import SchemaRegistry
from bulkload.utils.logging import get_logger

log = get_logger(__name__)

# Failure cases shown per dataset
MAX_REPORTED_FAILURES = 5


@dataclass
class ValidationResult:
    """Result of validating a single source file."""

    table: str
    file_path: Path
    exists: bool
    schema_valid: bool | None
    row_count: int | None
    error_message: str | None


class ValidationRunner:
    """
    Runs validation for all configured datasets.

    Validates source files against their tables' schemas and reports results.
    """

    def __init__(self, config: BulkLoadConfig) -> None:
        """
        Initialize validation runner.

        Args:
            config: Load configuration containing datasets and CSV dialect.
        """
        self.config = config

    def run(self) -> list[ValidationResult]:
        """
        Run validation for all datasets in config.

        Returns:
            List of validation results, one per dataset.
        """
        return [self._validate_dataset(dataset) for dataset in self.config.datasets]

    def _validate_dataset(self, dataset: DatasetConfig) -> ValidationResult:
        """
        Validate a single dataset.

        Args:
            dataset: Configured (table, file) pair.

        Returns:
            ValidationResult for the dataset.
        """
        file_path = self.config.resolve_source(dataset)

        try:
            table = SchemaRegistry.table(self.config.variant, dataset.table)
        except KeyError as e:
            log.warning("Unknown table", table=dataset.table)
            return ValidationResult(
                table=dataset.table,
                file_path=file_path,
                exists=file_path.exists(),
                schema_valid=None,
                row_count=None,
                error_message=e.args[0],
            )

        if not file_path.exists():
            log.warning("Source file not found", table=dataset.table, path=str(file_path))
            return ValidationResult(
                table=dataset.table,
                file_path=file_path,
                exists=False,
                schema_valid=None,
                row_count=None,
                error_message="File not found",
            )

        df: pd.DataFrame | None = None
        try:
            df = self._read_fields(
                file_path,
                self.config.delimiter_for(dataset),
                [c.name for c in table.columns],
            )

            schema = frame_schema(
                table,
                keep_nulls=self.config.loader.keep_nulls,
                count_bytes=self.config.database.backend == "mssql",
            )
            schema.validate(df, lazy=True)

            log.info("Validation passed", table=dataset.table, rows=len(df))
            return ValidationResult(
                table=dataset.table,
                file_path=file_path,
                exists=True,
                schema_valid=True,
                row_count=len(df),
                error_message=None,
            )

        except SchemaErrors as e:
            error_msg = self._format_schema_errors(e)
            log.error("Schema validation failed", table=dataset.table, error=error_msg)
            return ValidationResult(
                table=dataset.table,
                file_path=file_path,
                exists=True,
                schema_valid=False,
                row_count=len(df) if df is not None else None,
                error_message=error_msg,
            )

        except FormatFailure as e:
            error_msg = e.to_error().describe()
            log.error("Malformed source file", table=dataset.table, error=error_msg)
            return ValidationResult(
                table=dataset.table,
                file_path=file_path,
                exists=True,
                schema_valid=False,
                row_count=None,
                error_message=error_msg,
            )

        except (OSError, ValueError) as e:
            error_msg = f"{type(e).__name__}: {e!s}"
            log.error("Validation error", table=dataset.table, error=error_msg)
            return ValidationResult(
                table=dataset.table,
                file_path=file_path,
                exists=True,
                schema_valid=False,
                row_count=len(df) if df is not None else None,
                error_message=error_msg,
            )

    def _read_fields(
        self, file_path: Path, delimiter: str, columns: list[str]
    ) -> pd.DataFrame:
        """
        Read a source file as raw text fields, indexed by line number.

        Records are read exactly as the loader reads them. Empty fields
        become nulls when keep_nulls is enabled and stay empty strings
        otherwise.

        Raises:
            FormatFailure: If a record is malformed or has the wrong number
                of fields.
        """
        source = self.config.source
        with file_path.open(encoding=source.reader_encoding, newline="") as f:
            records = list(read_records(f, source, delimiter))

        for line, fields in records:
            if len(fields) != len(columns):
                msg = f"Expected {len(columns)} fields per record, found {len(fields)}"
                raise FormatFailure("field_count", msg, line=line)

        df = pd.DataFrame(
            [fields for _, fields in records],
            columns=columns,
            index=pd.Index([line for line, _ in records], name="line"),
            dtype=object,
        )
        if self.config.loader.keep_nulls:
            df = df.mask(df.eq(""))
        return df

    def _format_schema_errors(self, error: SchemaErrors) -> str:
        """
        Format schema errors for display, with source line numbers.

        Args:
            error: Pandera SchemaErrors from lazy validation.

        Returns:
            Formatted error message (first few violations).
        """
        failures = error.failure_cases
        if not isinstance(failures, pd.DataFrame) or failures.empty:
            return str(error).split("\n")[0][:200]

        lines = []
        for _, case in failures.head(MAX_REPORTED_FAILURES).iterrows():
            index = case.get("index")
            where = f"line {int(index)}" if pd.notna(index) else "file"
            lines.append(
                f"{where}, column {case.get('column')}: "
                f"{case.get('failure_case')!r} ({case.get('check')})"
            )

        n_failures = len(failures)
        if n_failures > MAX_REPORTED_FAILURES:
            header = f"{n_failures} validation errors (showing first {MAX_REPORTED_FAILURES}):"
        else:
            header = f"{n_failures} validation error(s):"
        return "\n".join([header, *lines])
