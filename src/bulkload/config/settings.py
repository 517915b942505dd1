"""
Typed configuration models using Pydantic.

All configuration is defined here with explicit typing and validation.
Connection targets, file locations and CSV dialect are never hard-coded
in the loading code.
"""

import re
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

from bulkload.schemas.registry import SchemaRegistry

# Hexadecimal terminator notation as used by BULK INSERT, e.g. 0x0a
_HEX_TERMINATOR = re.compile(r"^0x((?:[0-9a-fA-F]{2})+)$")

_ESCAPED_TERMINATORS = {"\\n": "\n", "\\r": "\r", "\\r\\n": "\r\n"}

ROW_TERMINATORS = ("\n", "\r\n", "\r")


def _single_char(value: str, field: str) -> str:
    if len(value) != 1:
        msg = f"{field} must be a single character, got: {value!r}"
        raise ValueError(msg)
    return value


class DatabaseConfig(BaseModel):
    """Destination database configuration."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(description="SQLAlchemy database URL of the target database")
    admin_database: str | None = Field(
        default=None,
        description="Database to connect to when dropping/creating the target "
        "(defaults to master on SQL Server, postgres on PostgreSQL)",
    )
    echo: bool = Field(default=False, description="Echo SQL statements")

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Ensure the URL parses."""
        try:
            make_url(v)
        except ArgumentError as e:
            msg = f"Invalid database URL: {e}"
            raise ValueError(msg) from e
        return v

    @property
    def backend(self) -> str:
        """Backend name of the URL (sqlite, mssql, postgresql, ...)."""
        return make_url(self.url).get_backend_name()

    @property
    def database_name(self) -> str | None:
        """Database (or SQLite file) named in the URL."""
        return make_url(self.url).database


class SourceConfig(BaseModel):
    """Source file location and CSV dialect."""

    model_config = ConfigDict(frozen=True)

    root: Path = Field(
        default=Path("./data"), description="Base directory of the source files"
    )
    delimiter: str | None = Field(
        default=None,
        description="Field delimiter (defaults to the variant's delimiter)",
    )
    row_terminator: str = Field(
        default="\n", description="Terminator every record must end with"
    )
    quote_char: str = Field(default='"', description="Quote character")
    encoding: str = Field(default="utf-8", description="File encoding")
    header_rows: int = Field(
        default=1, ge=0, description="Leading header records to skip"
    )

    @property
    def reader_encoding(self) -> str:
        """Encoding used to open files; UTF-8 also strips a byte order mark."""
        if self.encoding.lower() in ("utf-8", "utf8"):
            return "utf-8-sig"
        return self.encoding

    @field_validator("delimiter")
    @classmethod
    def validate_delimiter(cls, v: str | None) -> str | None:
        """Ensure delimiter is a single character."""
        if v is None:
            return v
        return _single_char(v, "delimiter")

    @field_validator("quote_char")
    @classmethod
    def validate_quote_char(cls, v: str) -> str:
        """Ensure quote character is a single character."""
        return _single_char(v, "quote_char")

    @field_validator("row_terminator")
    @classmethod
    def validate_row_terminator(cls, v: str) -> str:
        """Accept a literal line ending, an escape like '\\n', or hex like '0x0a'."""
        match = _HEX_TERMINATOR.match(v)
        if match:
            v = bytes.fromhex(match.group(1)).decode("ascii")
        v = _ESCAPED_TERMINATORS.get(v, v)
        if v not in ROW_TERMINATORS:
            msg = f"row_terminator must be LF, CRLF or CR, got: {v!r}"
            raise ValueError(msg)
        return v


class LoaderConfig(BaseModel):
    """Bulk load behaviour."""

    model_config = ConfigDict(frozen=True)

    keep_nulls: bool = Field(
        default=True,
        description="Load empty fields as NULL instead of empty strings",
    )
    table_lock: bool = Field(
        default=True,
        description="Hold an exclusive table lock for the duration of each load",
    )
    chunk_size: int = Field(
        default=10_000, ge=1, description="Records read and inserted per chunk"
    )


class DatasetConfig(BaseModel):
    """One (table, file) pair of the batch."""

    model_config = ConfigDict(frozen=True)

    table: str = Field(description="Destination table name")
    file: Path = Field(description="Source file, relative to source.root")
    delimiter: str | None = Field(
        default=None, description="Per-table delimiter override"
    )

    @field_validator("delimiter")
    @classmethod
    def validate_delimiter(cls, v: str | None) -> str | None:
        """Ensure delimiter is a single character."""
        if v is None:
            return v
        return _single_char(v, "delimiter")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(frozen=True)

    level: str = Field(default="INFO", description="Log level")
    json_output: bool = Field(default=False, description="Render logs as JSON")


class BulkLoadConfig(BaseModel):
    """Complete configuration of a reset-and-load run."""

    model_config = ConfigDict(frozen=True)

    project: str = Field(description="Project identifier (e.g., 'cricket-2024')")
    variant: str = Field(description="Registered schema variant")

    database: DatabaseConfig
    source: SourceConfig = Field(default_factory=SourceConfig)
    loader: LoaderConfig = Field(default_factory=LoaderConfig)
    datasets: list[DatasetConfig] = Field(description="Ordered (table, file) pairs")
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("variant")
    @classmethod
    def validate_variant(cls, v: str) -> str:
        """Ensure the variant is registered."""
        if v not in SchemaRegistry.list_variants():
            available = ", ".join(SchemaRegistry.list_variants())
            msg = f"Unknown variant '{v}'. Available: {available}"
            raise ValueError(msg)
        return v

    def delimiter_for(self, dataset: DatasetConfig) -> str:
        """Effective delimiter: dataset override, then source, then variant."""
        if dataset.delimiter is not None:
            return dataset.delimiter
        if self.source.delimiter is not None:
            return self.source.delimiter
        return SchemaRegistry.get(self.variant).delimiter

    def resolve_source(self, dataset: DatasetConfig) -> Path:
        """Resolve a dataset file against the source root."""
        if dataset.file.is_absolute():
            return dataset.file
        return self.source.root / dataset.file

    @property
    def table_names(self) -> list[str]:
        """Destination tables in load order."""
        return [dataset.table for dataset in self.datasets]
