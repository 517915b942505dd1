"""
Field conversion from delimited text to column values.

Each destination column gets a converter built from its declared SQLAlchemy
type. Converters never coerce silently: a value that does not fit its column
raises FormatFailure, which aborts the load of the whole file.
"""

import math
import re
from collections.abc import Callable, Sequence
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from sqlalchemy import Column, Date, Float, Integer, Numeric, String, Table

from bulkload.loading.errors import FormatFailure
from bulkload.schemas.types import integer_range

Converter = Callable[[str], Any]

_INTEGER = re.compile(r"^[+-]?\d+$")
# ISO date, optionally followed by a midnight time part
_DATE = re.compile(r"^(\d{4}-\d{2}-\d{2})(?:[ T]00:00(?::00(?:\.0+)?)?)?$")


def _convert_text(column: Column[Any], *, count_bytes: bool) -> Converter:
    length = getattr(column.type, "length", None)
    unit = "bytes" if count_bytes else "characters"

    def convert(value: str) -> str:
        size = len(value.encode("utf-8")) if count_bytes else len(value)
        if length is not None and size > length:
            msg = f"Value of {size} {unit} would be truncated to {length} {unit}"
            raise FormatFailure("truncation", msg)
        return value

    return convert


def _convert_integer(column: Column[Any]) -> Converter:
    bounds = integer_range(column)

    def convert(value: str) -> int:
        text = value.strip()
        if not _INTEGER.match(text):
            msg = f"Cannot convert {value!r} to an integer"
            raise FormatFailure("type_conversion", msg)
        number = int(text)
        if bounds is not None and not bounds[0] <= number <= bounds[1]:
            msg = f"Value {number} is out of range {bounds[0]}..{bounds[1]}"
            raise FormatFailure("arithmetic_overflow", msg)
        return number

    return convert


def _convert_decimal(column: Column[Any]) -> Converter:
    precision = getattr(column.type, "precision", None)
    scale = getattr(column.type, "scale", None)
    quantum = Decimal(1).scaleb(-scale) if scale is not None else None
    limit = (
        Decimal(10) ** (precision - (scale or 0)) if precision is not None else None
    )

    def convert(value: str) -> Decimal:
        try:
            number = Decimal(value.strip())
        except InvalidOperation as e:
            msg = f"Cannot convert {value!r} to a decimal"
            raise FormatFailure("type_conversion", msg) from e
        if not number.is_finite():
            msg = f"Cannot convert {value!r} to a decimal"
            raise FormatFailure("type_conversion", msg)
        try:
            if quantum is not None:
                number = number.quantize(quantum, rounding=ROUND_HALF_UP)
        except InvalidOperation as e:
            msg = f"Value {value!r} overflows DECIMAL({precision}, {scale})"
            raise FormatFailure("arithmetic_overflow", msg) from e
        if limit is not None and abs(number) >= limit:
            msg = f"Value {value!r} overflows DECIMAL({precision}, {scale or 0})"
            raise FormatFailure("arithmetic_overflow", msg)
        return number

    return convert


def _convert_float(column: Column[Any]) -> Converter:
    def convert(value: str) -> float:
        try:
            number = float(value.strip())
        except ValueError as e:
            msg = f"Cannot convert {value!r} to a float"
            raise FormatFailure("type_conversion", msg) from e
        if not math.isfinite(number):
            msg = f"Cannot convert {value!r} to a finite float"
            raise FormatFailure("type_conversion", msg)
        return number

    return convert


def _convert_date(column: Column[Any]) -> Converter:
    def convert(value: str) -> date:
        match = _DATE.match(value.strip())
        if match is None:
            msg = f"Cannot convert {value!r} to a date (expected YYYY-MM-DD)"
            raise FormatFailure("type_conversion", msg)
        try:
            return date.fromisoformat(match.group(1))
        except ValueError as e:
            msg = f"Invalid date {value!r}: {e}"
            raise FormatFailure("type_conversion", msg) from e

    return convert


def is_text(column: Column[Any]) -> bool:
    """Whether the column stores text."""
    return isinstance(column.type, String)


def build_converter(
    column: Column[Any],
    *,
    keep_nulls: bool,
    count_bytes: bool = False,
) -> Converter:
    """
    Build the converter for one column.

    Empty fields become NULL when keep_nulls is set. Otherwise text columns
    receive an empty string and all other columns NULL.

    Text lengths are counted in characters, or in UTF-8 bytes when
    count_bytes is set. SQL Server limits VARCHAR(n) in bytes, so loads into
    SQL Server count bytes; a multi-byte value is then rejected here instead
    of being truncated by the engine.

    Args:
        column: Destination column.
        keep_nulls: Load empty fields as NULL.
        count_bytes: Measure text length in UTF-8 bytes.

    Returns:
        Callable turning a field into a value for the column.

    Raises:
        ValueError: If the column type is not supported.
    """
    col_type = column.type
    if isinstance(col_type, String):
        convert = _convert_text(column, count_bytes=count_bytes)
    elif isinstance(col_type, Integer):
        convert = _convert_integer(column)
    elif isinstance(col_type, Float):
        convert = _convert_float(column)
    elif isinstance(col_type, Numeric):
        convert = _convert_decimal(column)
    elif isinstance(col_type, Date):
        convert = _convert_date(column)
    else:
        msg = f"Unsupported type {col_type!r} for column '{column.name}'"
        raise ValueError(msg)

    empty_value = "" if is_text(column) and not keep_nulls else None
    nullable = column.nullable

    def convert_field(value: str) -> Any:
        if value == "":
            if empty_value is None and not nullable:
                msg = "Cannot insert NULL into a NOT NULL column"
                raise FormatFailure("null_violation", msg)
            return empty_value
        return convert(value)

    return convert_field


class RowConverter:
    """
    Maps the fields of one record to the table's columns by position.

    The header is never consulted: field N goes to column N.
    """

    def __init__(
        self, table: Table, *, keep_nulls: bool, count_bytes: bool = False
    ) -> None:
        """
        Initialize row converter.

        Args:
            table: Destination table.
            keep_nulls: Load empty fields as NULL.
            count_bytes: Measure text length in UTF-8 bytes.
        """
        self.table = table
        self.columns = list(table.columns)
        self._converters = [
            build_converter(column, keep_nulls=keep_nulls, count_bytes=count_bytes)
            for column in self.columns
        ]

    def __call__(self, fields: Sequence[str], line: int) -> dict[str, Any]:
        """
        Convert one record.

        Args:
            fields: Field values of the record.
            line: Line number of the record in the source file.

        Returns:
            Mapping of column key to value.

        Raises:
            FormatFailure: If the record does not fit the table.
        """
        if len(fields) != len(self.columns):
            msg = (
                f"Expected {len(self.columns)} fields for table "
                f"'{self.table.name}', found {len(fields)}"
            )
            raise FormatFailure("field_count", msg, line=line)

        record: dict[str, Any] = {}
        for column, convert, value in zip(
            self.columns, self._converters, fields, strict=True
        ):
            try:
                record[column.key] = convert(value)
            except FormatFailure as e:
                e.line = line
                e.column = column.name
                raise
        return record
