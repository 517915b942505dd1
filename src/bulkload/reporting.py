"""
Console rendering of load progress and batch summaries.

The loader returns values; this module is the only place that turns them
into operator-facing output.
"""

from rich.console import Console
from rich.markup import escape
from rich.rule import Rule
from rich.table import Table

from bulkload.config.settings import DatasetConfig
from bulkload.loading.results import BatchResult, LoadResult, TableCount


class LoadReporter:
    """Prints per-load progress and the final table summary."""

    def __init__(self, console: Console) -> None:
        """
        Initialize load reporter.

        Args:
            console: Rich Console instance for output.
        """
        self.console = console

    def print_start(self, dataset: DatasetConfig) -> None:
        """Announce the start of a load."""
        self.console.print(Rule(style="dim"))
        self.console.print(
            f"Starting bulk load for: [cyan]{escape(dataset.table)}[/cyan] "
            f"from {escape(str(dataset.file))}"
        )

    def print_result(self, result: LoadResult) -> None:
        """Print the outcome of one load."""
        table = escape(result.table)
        if result.error is None:
            self.console.print(
                f"[green]-> SUCCESS:[/green] Loaded {result.rows_loaded} records "
                f"into [cyan]{table}[/cyan] ({result.row_count} rows in table, "
                f"{result.elapsed_seconds:.2f}s)."
            )
        else:
            self.console.print(
                f"[red]-> ERROR on {table}:[/red] {escape(result.error.describe())}"
            )

    def print_summary(self, batch: BatchResult, database: str | None = None) -> None:
        """
        Print the completion banner, per-table counts and the total.

        Args:
            batch: Result of the batch.
            database: Database name shown in the header.
        """
        self.console.print()
        self.console.print(Rule("[bold]Bulk loading process completed[/bold]"))
        self.print_counts(batch.counts, database)

        n_failed = len(batch.failures)
        if n_failed:
            self.console.print(
                f"[red]{n_failed} of {len(batch.results)} loads failed:[/red]"
            )
            for result in batch.results:
                if result.error is None:
                    continue
                self.console.print(
                    f"  [bold]{escape(result.table)}[/bold]: "
                    f"{escape(result.error.describe())}"
                )
        else:
            self.console.print(f"[green]All {len(batch.results)} loads succeeded.[/green]")

    def print_counts(self, counts: list[TableCount], database: str | None = None) -> None:
        """Print a table of row counts with their total."""
        title = f"Table Summary ({database})" if database else "Table Summary"
        table = Table(title=title, show_header=True)
        table.add_column("Table", style="cyan", no_wrap=True)
        table.add_column("Records", justify="right")

        total = 0
        for count in counts:
            if count.rows is None:
                table.add_row(count.table, "[yellow]n/a[/yellow]")
            else:
                table.add_row(count.table, str(count.rows))
                total += count.rows

        table.add_section()
        table.add_row("[bold]Total[/bold]", f"[bold]{total}[/bold]")
        self.console.print(table)
