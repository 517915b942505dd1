"""Command-line interface for resetting the database and bulk loading files."""

from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
import yaml
from rich.console import Console
from rich.table import Table
from sqlalchemy.exc import SQLAlchemyError

if TYPE_CHECKING:
    from bulkload.config.settings import BulkLoadConfig

app = typer.Typer(
    name="bulkload",
    help="Reset a database and bulk-load delimited files into its tables.",
    no_args_is_help=True,
)

console = Console()

ConfigOption = Annotated[
    Path,
    typer.Option(
        "--config",
        "-c",
        help="Path to configuration YAML file.",
        exists=True,
        dir_okay=False,
    ),
]


def _load_config(config: Path) -> "BulkLoadConfig":
    """Load configuration and set up logging, exiting on invalid config."""
    from bulkload.config.loader import load_config
    from bulkload.utils.logging import configure_logging

    try:
        bulk_config = load_config(config)
    except (ValueError, yaml.YAMLError) as e:
        console.print(f"[red]Invalid configuration in {config}: {e}[/red]")
        raise typer.Exit(code=1) from e

    configure_logging(bulk_config.logging)
    return bulk_config


def _confirm_reset(bulk_config: "BulkLoadConfig", yes: bool) -> None:
    """Ask before destroying the target database."""
    if yes:
        return
    target = bulk_config.database.database_name or bulk_config.database.url
    typer.confirm(
        f"This drops database '{target}' and everything in it. Continue?",
        abort=True,
    )


@app.command()
def load(
    config: ConfigOption,
    reset: Annotated[
        bool,
        typer.Option(
            "--reset",
            help="Drop and recreate the database and its tables before loading.",
        ),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Do not ask for confirmation on --reset."),
    ] = False,
    table: Annotated[
        list[str] | None,
        typer.Option(
            "--table",
            "-t",
            help="Only load this table (repeatable). Loads all datasets if omitted.",
        ),
    ] = None,
    fail_on_error: Annotated[
        bool,
        typer.Option(
            "--fail-on-error",
            help="Exit with code 1 if any load failed.",
        ),
    ] = False,
) -> None:
    """Bulk-load the configured files, one table at a time."""
    from bulkload.database import get_engine
    from bulkload.loading import run_batch
    from bulkload.provisioning import DatabaseProvisioner
    from bulkload.reporting import LoadReporter

    bulk_config = _load_config(config)
    if reset:
        _confirm_reset(bulk_config, yes)

    console.print(
        f"[blue]Project {bulk_config.project} "
        f"({bulk_config.variant}, {len(bulk_config.datasets)} datasets)[/blue]"
    )
    console.print(f"[dim]Source: {bulk_config.source.root}[/dim]")

    engine = get_engine(bulk_config.database)
    reporter = LoadReporter(console)
    try:
        if reset:
            created = DatabaseProvisioner(bulk_config, engine).provision()
            console.print(f"[green]Database reset, created {len(created)} tables[/green]")

        batch = run_batch(
            bulk_config,
            engine,
            table,
            on_start=reporter.print_start,
            on_result=reporter.print_result,
        )
        reporter.print_summary(batch, bulk_config.database.database_name)

    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from e
    except SQLAlchemyError as e:
        console.print(f"[red]Database error: {e}[/red]")
        raise typer.Exit(code=1) from e
    finally:
        engine.dispose()

    if fail_on_error and batch.failures:
        raise typer.Exit(code=1)


@app.command()
def reset(
    config: ConfigOption,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Do not ask for confirmation."),
    ] = False,
) -> None:
    """Drop and recreate the database, then create all tables."""
    from bulkload.database import get_engine
    from bulkload.provisioning import DatabaseProvisioner

    bulk_config = _load_config(config)
    _confirm_reset(bulk_config, yes)

    engine = get_engine(bulk_config.database)
    try:
        created = DatabaseProvisioner(bulk_config, engine).provision()
    except (ValueError, SQLAlchemyError, OSError) as e:
        console.print(f"[red]Reset failed: {e}[/red]")
        raise typer.Exit(code=1) from e
    finally:
        engine.dispose()

    console.print(f"[green]Database reset, created {len(created)} tables:[/green]")
    for name in created:
        console.print(f"  {name}")


@app.command()
def summary(config: ConfigOption) -> None:
    """Show the row count of every configured table."""
    from bulkload.database import get_engine
    from bulkload.loading import BatchLoader
    from bulkload.reporting import LoadReporter

    bulk_config = _load_config(config)
    engine = get_engine(bulk_config.database)
    try:
        counts = BatchLoader(engine, bulk_config).count_tables(bulk_config.table_names)
    finally:
        engine.dispose()

    LoadReporter(console).print_counts(counts, bulk_config.database.database_name)


@app.command()
def validate(config: ConfigOption) -> None:
    """Validate the configured source files without loading them."""
    from bulkload.validation import ConsoleReporter, ValidationRunner

    bulk_config = _load_config(config)
    console.print(f"[blue]Validating source files in {bulk_config.source.root}[/blue]")

    results = ValidationRunner(bulk_config).run()
    ConsoleReporter(console).print_results(results)

    if any(r.schema_valid is False or not r.exists for r in results):
        raise typer.Exit(code=1)


@app.command()
def tables(
    variant: Annotated[
        str | None,
        typer.Option("--variant", "-v", help="Show the columns of this variant's tables."),
    ] = None,
) -> None:
    """List schema variants, or the tables and columns of one variant."""
    from bulkload.schemas import SchemaRegistry

    if variant is None:
        table = Table(title="Schema Variants")
        table.add_column("Variant", style="cyan")
        table.add_column("Delimiter", justify="center")
        table.add_column("Tables")
        table.add_column("Description", style="dim")
        for name in SchemaRegistry.list_variants():
            info = SchemaRegistry.get(name)
            table.add_row(
                name, repr(info.delimiter), ", ".join(info.table_names), info.description
            )
        console.print(table)
        return

    try:
        info = SchemaRegistry.get(variant)
    except KeyError as e:
        console.print(f"[red]Error: {e.args[0]}[/red]")
        raise typer.Exit(code=1) from e

    files = dict(info.datasets)
    for sa_table in info.metadata.tables.values():
        table = Table(title=f"{sa_table.name} ← {files.get(sa_table.name, '-')}")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Column", style="cyan")
        table.add_column("Type")
        table.add_column("Nullable", justify="center")
        for position, column in enumerate(sa_table.columns, start=1):
            table.add_row(
                str(position),
                column.name,
                str(column.type.compile()),
                "yes" if column.nullable else "no",
            )
        console.print(table)


if __name__ == "__main__":
    app()
