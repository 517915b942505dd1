"""
Table definitions and the variant registry.

Each variant owns one SQLAlchemy MetaData holding its fixed tables.
"""

from bulkload.schemas.registry import SchemaRegistry, VariantInfo
from bulkload.schemas.types import integer_range, tinyint, tinyint_column

__all__ = [
    "SchemaRegistry",
    "VariantInfo",
    "integer_range",
    "tinyint",
    "tinyint_column",
]
