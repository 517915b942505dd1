"""
Bulk file loader.

Loads one delimited file into one allow-listed table inside a single
transaction and reports the outcome as a LoadResult. Every failure is
caught at this boundary; nothing propagates to the batch.
"""

import errno
import time
from collections.abc import Iterator
from pathlib import Path
from typing import Any, TextIO

from sqlalchemy import Insert, Table, func, inspect, select, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import DBAPIError, OperationalError, SQLAlchemyError

from bulkload.config.settings import BulkLoadConfig, DatasetConfig
from bulkload.loading.codec import RowConverter
from bulkload.loading.errors import LoadFailure, TableSchemaFailure
from bulkload.loading.records import read_records
from bulkload.loading.results import (
    SEVERITY_FATAL,
    SEVERITY_USER,
    ErrorKind,
    LoadError,
    LoadResult,
)
from bulkload.schemas.registry import SchemaRegistry
from bulkload.utils.logging import get_logger, log_context

log = get_logger(__name__)


class BulkFileLoader:
    """
    Loads delimited files into the tables of one schema variant.

    Fields map to columns strictly by position. Each file is all-or-nothing:
    the first bad record rolls back everything inserted from that file.
    """

    def __init__(self, engine: Engine, config: BulkLoadConfig) -> None:
        """
        Initialize bulk file loader.

        Args:
            engine: Engine connected to the target database.
            config: Load configuration (variant, source dialect, loader options).
        """
        self.engine = engine
        self.config = config

    def load_dataset(self, dataset: DatasetConfig) -> LoadResult:
        """Load a configured (table, file) pair."""
        return self.load(
            dataset.table,
            self.config.resolve_source(dataset),
            delimiter=self.config.delimiter_for(dataset),
        )

    def load(
        self,
        table_name: str,
        source: Path,
        *,
        delimiter: str | None = None,
    ) -> LoadResult:
        """
        Load a file into a table.

        Args:
            table_name: Destination table; must belong to the configured variant.
            source: Path of the delimited file.
            delimiter: Field delimiter (defaults to source/variant delimiter).

        Returns:
            LoadResult with the number of rows inserted and the table's row
            count on success, or the error on failure.
        """
        source = Path(source)
        if delimiter is None:
            delimiter = self.config.delimiter_for(
                DatasetConfig(table=table_name, file=source)
            )

        result = LoadResult(table=table_name, source=source)
        started = time.perf_counter()

        with log_context(table=table_name, source=str(source)):
            log.info("Starting bulk load", delimiter=delimiter)
            try:
                table = self._resolve_table(table_name)
                self._check_table(table)
                result.rows_loaded = self._copy(table, source, delimiter)
                result.row_count = self.count_rows(table)
            except LoadFailure as e:
                result.error = e.to_error()
            except OSError as e:
                result.error = _file_access_error(e, source)
            except SQLAlchemyError as e:
                result.error = _database_error(e)

            result.elapsed_seconds = time.perf_counter() - started

            if result.error is None:
                log.info(
                    "Bulk load succeeded",
                    rows_loaded=result.rows_loaded,
                    row_count=result.row_count,
                    seconds=round(result.elapsed_seconds, 3),
                )
            else:
                log.error(
                    "Bulk load failed",
                    kind=result.error.kind.value,
                    code=result.error.code,
                    line=result.error.line,
                    error=result.error.message,
                )

        return result

    def count_rows(self, table: Table) -> int:
        """Count the rows currently in a table."""
        with self.engine.connect() as conn:
            return conn.execute(select(func.count()).select_from(table)).scalar_one()

    def _resolve_table(self, table_name: str) -> Table:
        """Resolve the table against the variant's allow-list."""
        try:
            return SchemaRegistry.table(self.config.variant, table_name)
        except KeyError as e:
            raise TableSchemaFailure("unknown_table", e.args[0]) from e

    def _check_table(self, table: Table) -> None:
        """Ensure the table exists with its declared column order."""
        with self.engine.connect() as conn:
            inspector = inspect(conn)
            if not inspector.has_table(table.name, schema=table.schema):
                msg = f"Table '{table.name}' does not exist"
                raise TableSchemaFailure("missing_table", msg)
            live = [c["name"] for c in inspector.get_columns(table.name, schema=table.schema)]

        expected = [c.name for c in table.columns]
        if [n.lower() for n in live] != [n.lower() for n in expected]:
            msg = f"Table '{table.name}' has columns {live}, expected {expected}"
            raise TableSchemaFailure("column_mismatch", msg)

    def _copy(self, table: Table, source: Path, delimiter: str) -> int:
        """
        Stream the file into the table in one transaction.

        Returns:
            Number of rows inserted.
        """
        options = self.config.loader
        converter = RowConverter(
            table,
            keep_nulls=options.keep_nulls,
            count_bytes=self.engine.dialect.name == "mssql",
        )
        statement = self._insert_statement(table)

        loaded = 0
        encoding = self.config.source.reader_encoding
        with source.open(encoding=encoding, newline="") as f, self.engine.begin() as conn:
            self._lock_table(conn, table)
            for chunk in self._read_chunks(f, converter, delimiter, options.chunk_size):
                conn.execute(statement, chunk)
                loaded += len(chunk)
                log.debug("Inserted chunk", rows=len(chunk), total=loaded)
        return loaded

    def _read_chunks(
        self,
        f: TextIO,
        converter: RowConverter,
        delimiter: str,
        chunk_size: int,
    ) -> Iterator[list[dict[str, Any]]]:
        """Yield converted records in chunks."""
        chunk: list[dict[str, Any]] = []
        for line, fields in read_records(f, self.config.source, delimiter):
            chunk.append(converter(fields, line))
            if len(chunk) >= chunk_size:
                yield chunk
                chunk = []
        if chunk:
            yield chunk

    def _insert_statement(self, table: Table) -> Insert:
        """Insert statement for the table, with a table lock hint where supported."""
        statement = table.insert()
        if self.config.loader.table_lock:
            statement = statement.with_hint("WITH (TABLOCKX)", dialect_name="mssql")
        return statement

    def _lock_table(self, conn: Connection, table: Table) -> None:
        """Take an exclusive lock for the transaction on dialects that need a statement."""
        if not self.config.loader.table_lock:
            return
        if conn.dialect.name == "postgresql":
            name = conn.dialect.identifier_preparer.format_table(table)
            conn.execute(text(f"LOCK TABLE {name} IN ACCESS EXCLUSIVE MODE"))


def _file_access_error(error: OSError, source: Path) -> LoadError:
    """Convert an OSError raised while opening the source file."""
    code = errno.errorcode.get(error.errno or 0, error.__class__.__name__)
    return LoadError(
        kind=ErrorKind.FILE_ACCESS,
        code=code,
        message=f"Cannot open {source}: {error.strerror or error}",
        severity=SEVERITY_USER,
    )


def _database_error(error: SQLAlchemyError) -> LoadError:
    """Convert an error raised by the engine."""
    severity = SEVERITY_FATAL if isinstance(error, OperationalError) else SEVERITY_USER
    if isinstance(error, DBAPIError) and error.orig is not None:
        orig = error.orig
        code = (
            getattr(orig, "sqlstate", None)
            or getattr(orig, "sqlite_errorname", None)
            or (str(orig.args[0]) if orig.args and isinstance(orig.args[0], int) else None)
            or orig.__class__.__name__
        )
        message = str(orig)
    else:
        code = error.__class__.__name__
        message = str(error)
    return LoadError(
        kind=ErrorKind.DATABASE,
        code=str(code),
        message=message,
        severity=severity,
    )
