"""
Portable column types shared by the table definitions.

SQL Server's TINYINT has no generic SQLAlchemy counterpart, so it is
declared as SMALLINT with a TINYINT variant and an explicit value range
that the loader enforces on every dialect.
"""

from typing import Any

from sqlalchemy import BigInteger, Column, Integer, SmallInteger
from sqlalchemy.dialects import mssql
from sqlalchemy.types import TypeEngine

TINYINT_RANGE = (0, 255)

# Inclusive value ranges by integer type, checked narrowest first
INTEGER_RANGES: list[tuple[type[TypeEngine[Any]], tuple[int, int]]] = [
    (SmallInteger, (-(2**15), 2**15 - 1)),
    (BigInteger, (-(2**63), 2**63 - 1)),
    (Integer, (-(2**31), 2**31 - 1)),
]


def tinyint() -> TypeEngine[int]:
    """SMALLINT everywhere, TINYINT on SQL Server."""
    return SmallInteger().with_variant(mssql.TINYINT(), "mssql")


def tinyint_column(name: str, **kwargs: Any) -> Column[int]:
    """Column of type TINYINT carrying its 0..255 range."""
    info = kwargs.pop("info", {})
    info["range"] = TINYINT_RANGE
    return Column(name, tinyint(), info=info, **kwargs)


def integer_range(column: Column[Any]) -> tuple[int, int] | None:
    """
    Inclusive range of values accepted by an integer column.

    Args:
        column: Table column.

    Returns:
        (min, max) tuple, or None for non-integer columns.
    """
    declared = column.info.get("range")
    if declared is not None:
        return declared
    for type_, bounds in INTEGER_RANGES:
        if isinstance(column.type, type_):
            return bounds
    return None
