"""
Pandera schemas derived from the table definitions.

Used to validate a source file read into a DataFrame of raw text fields
before anything is written. Every check delegates to the same field
converters the loader uses, so a frame that validates also converts; field
counts and record framing are checked while reading the file.
"""

from collections.abc import Callable
from typing import Any

import pandera.pandas as pa
from sqlalchemy import Table

from bulkload.loading.codec import build_converter
from bulkload.loading.errors import FormatFailure


def _accepts(convert: Callable[[str], Any]) -> Callable[[Any], bool]:
    """Element-wise predicate: does the converter accept the field?"""

    def check(value: Any) -> bool:
        try:
            convert(str(value))
        except FormatFailure:
            return False
        return True

    return check


def frame_schema(
    table: Table,
    *,
    keep_nulls: bool = True,
    count_bytes: bool = False,
) -> pa.DataFrameSchema:
    """
    Build a DataFrameSchema for the raw fields of a table's source file.

    Columns are positional: the frame must have exactly the table's columns,
    in order. Values stay text; each is checked with the column's converter.

    Args:
        table: Destination table.
        keep_nulls: Whether empty fields are read as nulls.
        count_bytes: Measure text length in UTF-8 bytes.

    Returns:
        Pandera DataFrameSchema.
    """
    columns = {}
    for column in table.columns:
        convert = build_converter(
            column, keep_nulls=keep_nulls, count_bytes=count_bytes
        )
        columns[column.name] = pa.Column(
            None,
            checks=pa.Check(
                _accepts(convert),
                element_wise=True,
                error=f"fits {column.type.compile()}",
            ),
            nullable=column.nullable,
        )
    return pa.DataFrameSchema(columns, name=table.name, strict=True, ordered=True)
