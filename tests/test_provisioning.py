"""Tests for database provisioning."""

from collections.abc import Callable
from pathlib import Path

import pytest
from sqlalchemy import create_engine, inspect, text

from bulkload.config import BulkLoadConfig, DatabaseConfig
from bulkload.database import get_engine, sqlite_path
from bulkload.provisioning import DatabaseProvisioner


def _with_url(config: BulkLoadConfig, url: str) -> BulkLoadConfig:
    return config.model_copy(update={"database": DatabaseConfig(url=url)})


class TestSqliteProvisioning:
    """Provisioning against SQLite files."""

    def test_provision_creates_all_tables(self, cricket_config: BulkLoadConfig) -> None:
        """Test that every cricket table exists after provisioning."""
        engine = get_engine(cricket_config.database)

        created = DatabaseProvisioner(cricket_config, engine).provision()

        assert set(inspect(engine).get_table_names()) == set(created)
        assert len(created) == 8
        engine.dispose()

    def test_reset_discards_existing_data(self, cricket_config: BulkLoadConfig) -> None:
        """Test that resetting an existing database drops its contents."""
        engine = get_engine(cricket_config.database)
        with engine.begin() as conn:
            conn.execute(text("CREATE TABLE leftover (x INTEGER)"))

        DatabaseProvisioner(cricket_config, engine).provision()

        assert "leftover" not in inspect(engine).get_table_names()
        engine.dispose()

    def test_reset_creates_parent_directory(
        self, cricket_config: BulkLoadConfig, tmp_path: Path
    ) -> None:
        """Test that a missing directory for the database file is created."""
        config = _with_url(cricket_config, f"sqlite:///{tmp_path / 'out' / 'db.sqlite'}")

        DatabaseProvisioner(config).reset_database()

        assert (tmp_path / "out").is_dir()

    def test_in_memory_database(self, cricket_config: BulkLoadConfig) -> None:
        """Test provisioning an in-memory database."""
        config = _with_url(cricket_config, "sqlite://")
        assert sqlite_path(config.database) is None

        engine = get_engine(config.database)
        provisioner = DatabaseProvisioner(config, engine)
        provisioner.create_tables()
        provisioner.drop_tables()

        assert inspect(engine).get_table_names() == []

    def test_loan_variant(self, make_config: Callable[..., BulkLoadConfig]) -> None:
        """Test that only the variant's tables are created."""
        config = make_config(variant="loan")

        created = DatabaseProvisioner(config).provision()

        assert created == ["loan_default"]


class TestServerProvisioning:
    """Guards for server databases; no server connection is made."""

    def test_refuses_unsafe_database_name(self, cricket_config: BulkLoadConfig) -> None:
        """Test that database names are checked before any SQL is built."""
        config = _with_url(cricket_config, "postgresql://user@localhost/bad-name")
        provisioner = DatabaseProvisioner(config, create_engine("sqlite://"))

        with pytest.raises(ValueError, match="Refusing to reset"):
            provisioner.reset_database()

    def test_unsupported_backend(self, cricket_config: BulkLoadConfig) -> None:
        """Test that backends without a reset strategy raise error."""
        config = _with_url(cricket_config, "oracle://user@localhost/cricket")
        provisioner = DatabaseProvisioner(config, create_engine("sqlite://"))

        with pytest.raises(ValueError, match="not supported"):
            provisioner.reset_database()
