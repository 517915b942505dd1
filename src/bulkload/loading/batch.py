"""
Batch driver for the bulk loader.

Runs the configured (table, file) pairs in order, one at a time, and keeps
going after failures. Afterwards every table of the batch is counted.
"""

from collections.abc import Callable, Sequence

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from bulkload.config.settings import BulkLoadConfig, DatasetConfig
from bulkload.loading.loader import BulkFileLoader
from bulkload.loading.results import BatchResult, LoadResult, TableCount
from bulkload.schemas.registry import SchemaRegistry
from bulkload.utils.logging import get_logger

log = get_logger(__name__)


class BatchLoader:
    """Sequential driver over the configured datasets."""

    def __init__(
        self,
        engine: Engine,
        config: BulkLoadConfig,
        loader: BulkFileLoader | None = None,
    ) -> None:
        """
        Initialize batch loader.

        Args:
            engine: Engine connected to the target database.
            config: Load configuration with the ordered datasets.
            loader: Loader to use (built from engine and config if omitted).
        """
        self.engine = engine
        self.config = config
        self.loader = loader or BulkFileLoader(engine, config)

    def select(self, tables: Sequence[str] | None = None) -> list[DatasetConfig]:
        """
        Datasets to run, optionally restricted to some tables.

        Args:
            tables: Table names to keep; None keeps all.

        Returns:
            Datasets in configured order.

        Raises:
            ValueError: If a requested table is not configured.
        """
        if not tables:
            return list(self.config.datasets)
        unknown = [t for t in tables if t not in self.config.table_names]
        if unknown:
            msg = f"Tables not in configured datasets: {', '.join(unknown)}"
            raise ValueError(msg)
        return [d for d in self.config.datasets if d.table in tables]

    def run(
        self,
        tables: Sequence[str] | None = None,
        *,
        on_start: Callable[[DatasetConfig], None] | None = None,
        on_result: Callable[[LoadResult], None] | None = None,
    ) -> BatchResult:
        """
        Load every selected dataset, then count the tables.

        Args:
            tables: Restrict the batch to these tables.
            on_start: Called before each load.
            on_result: Called with each load's result.

        Returns:
            BatchResult with per-load results and final table counts.
        """
        datasets = self.select(tables)
        log.info(
            "Starting batch",
            project=self.config.project,
            variant=self.config.variant,
            datasets=len(datasets),
        )

        batch = BatchResult()
        for dataset in datasets:
            if on_start is not None:
                on_start(dataset)
            result = self.loader.load_dataset(dataset)
            batch.results.append(result)
            if on_result is not None:
                on_result(result)

        batch.counts = self.count_tables([d.table for d in datasets])
        log.info(
            "Batch completed",
            loaded=len(batch.results) - len(batch.failures),
            failed=len(batch.failures),
            total_rows=batch.total_rows,
        )
        return batch

    def count_tables(self, table_names: Sequence[str]) -> list[TableCount]:
        """
        Count rows per table, in order, each table once.

        Tables that are unknown or cannot be queried are reported with
        rows=None.
        """
        counts: list[TableCount] = []
        for name in dict.fromkeys(table_names):
            try:
                table = SchemaRegistry.table(self.config.variant, name)
                rows: int | None = self.loader.count_rows(table)
            except (KeyError, SQLAlchemyError) as e:
                log.warning("Cannot count table", table=name, error=str(e))
                rows = None
            counts.append(TableCount(table=name, rows=rows))
        return counts


def run_batch(
    config: BulkLoadConfig,
    engine: Engine,
    tables: Sequence[str] | None = None,
    *,
    on_start: Callable[[DatasetConfig], None] | None = None,
    on_result: Callable[[LoadResult], None] | None = None,
) -> BatchResult:
    """
    Convenience function to run the configured batch.

    Args:
        config: Load configuration.
        engine: Engine connected to the target database.
        tables: Restrict the batch to these tables.
        on_start: Called before each load.
        on_result: Called with each load's result.

    Returns:
        BatchResult.
    """
    return BatchLoader(engine, config).run(
        tables, on_start=on_start, on_result=on_result
    )
