"""
Console reporter for validation results.

Formats validation results using Rich for clear, colored output.
"""

from rich.console import Console
from rich.table import Table

from bulkload.validation.core import ValidationResult


class ConsoleReporter:
    """Formats and displays validation results to the console."""

    def __init__(self, console: Console) -> None:
        """
        Initialize console reporter.

        Args:
            console: Rich Console instance for output.
        """
        self.console = console

    def print_results(self, results: list[ValidationResult]) -> None:
        """
        Print validation results as a formatted table.

        Args:
            results: List of validation results to display.
        """
        table = Table(title="Source File Validation", show_header=True)
        table.add_column("Table", style="cyan", no_wrap=True)
        table.add_column("File", style="blue")
        table.add_column("Status", justify="center")
        table.add_column("Rows", justify="right")
        table.add_column("Details", style="dim")

        for result in results:
            row_count = str(result.row_count) if result.row_count is not None else "-"
            table.add_row(
                result.table,
                result.file_path.name,
                self._format_status(result),
                row_count,
                self._format_details(result),
            )

        self.console.print(table)
        self._print_summary(results)
        self._print_detailed_errors(results)

    def _format_status(self, result: ValidationResult) -> str:
        if not result.exists:
            return "[yellow]Missing[/yellow]"
        if result.schema_valid is None:
            return "[yellow]Skipped[/yellow]"
        if result.schema_valid:
            return "[green]Pass[/green]"
        return "[red]Fail[/red]"

    def _format_details(self, result: ValidationResult) -> str:
        if not result.exists:
            return "File not found"
        if result.schema_valid is None:
            return result.error_message or "No schema"
        if result.schema_valid:
            return "OK"
        return "See errors below"

    def _print_summary(self, results: list[ValidationResult]) -> None:
        total = len(results)
        passed = sum(1 for r in results if r.schema_valid is True)
        failed = sum(1 for r in results if r.schema_valid is False)
        skipped = sum(1 for r in results if r.schema_valid is None)

        self.console.print()
        self.console.print("[bold]Summary:[/bold]")
        self.console.print(f"  Total files: {total}")
        self.console.print(f"  [green]Passed: {passed}[/green]")
        self.console.print(f"  [red]Failed: {failed}[/red]")
        self.console.print(f"  [yellow]Skipped: {skipped}[/yellow]")

    def _print_detailed_errors(self, results: list[ValidationResult]) -> None:
        failed = [r for r in results if r.schema_valid is False]
        if not failed:
            return

        self.console.print()
        self.console.print("[bold red]Validation Errors:[/bold red]")
        for result in failed:
            self.console.print()
            self.console.print(f"[bold]{result.table}[/bold]:")
            self.console.print(f"  File: {result.file_path}")
            if result.error_message:
                for line in result.error_message.split("\n"):
                    self.console.print(f"  {line}", markup=False)
