"""Pytest configuration and shared fixtures."""

from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest
from sqlalchemy import select
from sqlalchemy.engine import Engine

from bulkload.config import (
    BulkLoadConfig,
    DatabaseConfig,
    DatasetConfig,
    LoaderConfig,
    SourceConfig,
)
from bulkload.database import get_engine
from bulkload.provisioning import DatabaseProvisioner
from bulkload.schemas import SchemaRegistry


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    """Directory holding the source files of a test."""
    path = tmp_path / "csv"
    path.mkdir()
    return path


@pytest.fixture
def write_csv(source_dir: Path) -> Callable[..., Path]:
    """Write lines to a file in the source directory, LF-terminated by default."""

    def _write(
        name: str,
        lines: list[str],
        *,
        newline: str = "\n",
        bom: bool = False,
    ) -> Path:
        path = source_dir / name
        content = "".join(line + newline for line in lines)
        data = content.encode("utf-8")
        if bom:
            data = b"\xef\xbb\xbf" + data
        path.write_bytes(data)
        return path

    return _write


@pytest.fixture
def make_config(tmp_path: Path, source_dir: Path) -> Callable[..., BulkLoadConfig]:
    """Build a config for a SQLite database in the test directory."""

    def _make(
        variant: str = "cricket",
        datasets: list[tuple[str, str]] | None = None,
        delimiter: str | None = ",",
        header_rows: int = 1,
        row_terminator: str = "\n",
        **loader: Any,
    ) -> BulkLoadConfig:
        pairs = datasets if datasets is not None else SchemaRegistry.get(variant).datasets
        return BulkLoadConfig(
            project="test",
            variant=variant,
            database=DatabaseConfig(url=f"sqlite:///{tmp_path / 'test.sqlite'}"),
            source=SourceConfig(
                root=source_dir,
                delimiter=delimiter,
                header_rows=header_rows,
                row_terminator=row_terminator,
            ),
            loader=LoaderConfig(**loader),
            datasets=[DatasetConfig(table=t, file=Path(f)) for t, f in pairs],
        )

    return _make


@pytest.fixture
def cricket_config(make_config: Callable[..., BulkLoadConfig]) -> BulkLoadConfig:
    """Cricket config with comma-delimited sources."""
    return make_config()


@pytest.fixture
def engine(cricket_config: BulkLoadConfig) -> Iterator[Engine]:
    """Engine on a freshly provisioned cricket database."""
    engine = get_engine(cricket_config.database)
    DatabaseProvisioner(cricket_config, engine).provision()
    yield engine
    engine.dispose()


@pytest.fixture
def fetch_rows() -> Callable[[Engine, str, str], list[tuple[Any, ...]]]:
    """Read all rows of a variant's table."""

    def _fetch(engine: Engine, table_name: str, variant: str = "cricket") -> list[tuple[Any, ...]]:
        table = SchemaRegistry.table(variant, table_name)
        with engine.connect() as conn:
            return [tuple(row) for row in conn.execute(select(table))]

    return _fetch


@pytest.fixture
def players_lines() -> list[str]:
    """Header plus two player records."""
    return [
        "player_id,match_id,player_name,team",
        "P1,100,Alice,TeamA",
        "P2,100,Bob,TeamB",
    ]
