"""
Schema registry for variants and their tables.

The registry is the allow-list of destination tables: every table name that
reaches the loader is resolved here to a SQLAlchemy ``Table`` object, so no
identifier from configuration is ever spliced into SQL text.
"""

from dataclasses import dataclass
from typing import ClassVar

from sqlalchemy import MetaData, Table

from bulkload.schemas import cricket, loan


@dataclass(frozen=True)
class VariantInfo:
    """Metadata about a registered schema variant."""

    name: str
    metadata: MetaData
    datasets: tuple[tuple[str, str], ...]
    delimiter: str
    description: str

    @property
    def table_names(self) -> list[str]:
        """Table names in declaration order."""
        return list(self.metadata.tables.keys())


class SchemaRegistry:
    """
    Centralized registry for all table schemas.

    Provides variant discovery and allow-listed table lookup.
    """

    _variants: ClassVar[dict[str, VariantInfo]] = {
        "cricket": VariantInfo(
            name="cricket",
            metadata=cricket.metadata,
            datasets=tuple(cricket.DATASETS),
            delimiter=cricket.DELIMITER,
            description="Cricket match data (players, matches, deliveries, ...)",
        ),
        "loan": VariantInfo(
            name="loan",
            metadata=loan.metadata,
            datasets=tuple(loan.DATASETS),
            delimiter=loan.DELIMITER,
            description="Loan default records keyed by loan id",
        ),
    }

    @classmethod
    def get(cls, variant: str) -> VariantInfo:
        """
        Get a variant by name.

        Args:
            variant: Variant identifier.

        Returns:
            VariantInfo with metadata and default datasets.

        Raises:
            KeyError: If variant not found.
        """
        if variant not in cls._variants:
            available = ", ".join(cls._variants.keys())
            msg = f"Unknown variant '{variant}'. Available: {available}"
            raise KeyError(msg)
        return cls._variants[variant]

    @classmethod
    def table(cls, variant: str, name: str) -> Table:
        """
        Resolve a table name against the variant's allow-list.

        Args:
            variant: Variant identifier.
            name: Table name as written in configuration.

        Returns:
            The SQLAlchemy Table.

        Raises:
            KeyError: If the variant or table is unknown.
        """
        tables = cls.get(variant).metadata.tables
        if name not in tables:
            available = ", ".join(tables.keys())
            msg = f"Unknown table '{name}' for variant '{variant}'. Available: {available}"
            raise KeyError(msg)
        return tables[name]

    @classmethod
    def list_variants(cls) -> list[str]:
        """List all registered variant names."""
        return list(cls._variants.keys())
