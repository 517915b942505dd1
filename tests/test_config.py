"""Tests for configuration system."""

from pathlib import Path

import pytest

from bulkload.config import (
    BulkLoadConfig,
    DatabaseConfig,
    DatasetConfig,
    LoaderConfig,
    SourceConfig,
    load_config,
)


class TestDatabaseConfig:
    """Tests for DatabaseConfig."""

    def test_valid_config(self) -> None:
        """Test backend and database name extraction."""
        config = DatabaseConfig(url="postgresql+psycopg2://user@localhost/cricket_db")
        assert config.backend == "postgresql"
        assert config.database_name == "cricket_db"
        assert config.admin_database is None

    def test_sqlite_database_name(self) -> None:
        """Test that the SQLite file is the database name."""
        config = DatabaseConfig(url="sqlite:///./output/cricket.sqlite")
        assert config.backend == "sqlite"
        assert config.database_name == "./output/cricket.sqlite"

    def test_invalid_url(self) -> None:
        """Test that an unparseable URL raises error."""
        with pytest.raises(ValueError, match="Invalid database URL"):
            DatabaseConfig(url="not a url")


class TestSourceConfig:
    """Tests for SourceConfig."""

    def test_defaults(self) -> None:
        """Test default CSV dialect."""
        config = SourceConfig()
        assert config.delimiter is None
        assert config.row_terminator == "\n"
        assert config.quote_char == '"'
        assert config.header_rows == 1

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("0x0a", "\n"),
            ("0x0d0a", "\r\n"),
            ("\\n", "\n"),
            ("\\r\\n", "\r\n"),
            ("\r", "\r"),
        ],
    )
    def test_row_terminator_notations(self, value: str, expected: str) -> None:
        """Test hex, escaped and literal row terminators."""
        assert SourceConfig(row_terminator=value).row_terminator == expected

    def test_unsupported_row_terminator(self) -> None:
        """Test that terminators other than line endings are rejected."""
        with pytest.raises(ValueError, match="LF, CRLF or CR"):
            SourceConfig(row_terminator=";;")

    def test_delimiter_must_be_single_character(self) -> None:
        """Test that multi-character delimiters are rejected."""
        with pytest.raises(ValueError, match="single character"):
            SourceConfig(delimiter="||")

    def test_negative_header_rows(self) -> None:
        """Test that header_rows cannot be negative."""
        with pytest.raises(ValueError):
            SourceConfig(header_rows=-1)

    def test_reader_encoding_strips_bom_for_utf8(self) -> None:
        """Test that UTF-8 sources are read with BOM handling."""
        assert SourceConfig(encoding="utf-8").reader_encoding == "utf-8-sig"
        assert SourceConfig(encoding="latin-1").reader_encoding == "latin-1"


class TestLoaderConfig:
    """Tests for LoaderConfig."""

    def test_defaults(self) -> None:
        """Test that NULLs are kept and tables locked by default."""
        config = LoaderConfig()
        assert config.keep_nulls is True
        assert config.table_lock is True
        assert config.chunk_size == 10_000

    def test_chunk_size_positive(self) -> None:
        """Test that chunk_size must be at least 1."""
        with pytest.raises(ValueError):
            LoaderConfig(chunk_size=0)


class TestBulkLoadConfig:
    """Tests for BulkLoadConfig."""

    @staticmethod
    def _config(**overrides: object) -> BulkLoadConfig:
        values: dict[str, object] = {
            "project": "test",
            "variant": "cricket",
            "database": DatabaseConfig(url="sqlite://"),
            "source": SourceConfig(root=Path("/data")),
            "datasets": [
                DatasetConfig(table="players", file=Path("players.csv")),
                DatasetConfig(table="teams", file=Path("/abs/teams.csv"), delimiter=";"),
            ],
        }
        values.update(overrides)
        return BulkLoadConfig(**values)  # type: ignore[arg-type]

    def test_unknown_variant(self) -> None:
        """Test that unregistered variants are rejected."""
        with pytest.raises(ValueError, match="Unknown variant"):
            self._config(variant="football")

    def test_delimiter_precedence(self) -> None:
        """Test dataset override, then source delimiter, then variant default."""
        config = self._config()
        players, teams = config.datasets
        assert config.delimiter_for(teams) == ";"
        assert config.delimiter_for(players) == "|"

        config = self._config(source=SourceConfig(delimiter=","))
        assert config.delimiter_for(config.datasets[0]) == ","

    def test_resolve_source(self) -> None:
        """Test that relative files resolve against source.root."""
        config = self._config()
        players, teams = config.datasets
        assert config.resolve_source(players) == Path("/data/players.csv")
        assert config.resolve_source(teams) == Path("/abs/teams.csv")

    def test_table_names_in_order(self) -> None:
        """Test table_names follows dataset order."""
        assert self._config().table_names == ["players", "teams"]

    def test_config_is_frozen(self) -> None:
        """Test that configs cannot be mutated."""
        config = self._config()
        with pytest.raises(ValueError):
            config.project = "other"  # type: ignore[misc]


class TestConfigLoading:
    """Tests for YAML config loading."""

    def test_load_minimal_config(self, tmp_path: Path) -> None:
        """Test loading minimal config falls back to the variant's datasets."""
        config_path = tmp_path / "loan.yaml"
        config_path.write_text(
            "project: loan-test\n"
            "variant: loan\n"
            "database:\n"
            "  url: sqlite:///loan.sqlite\n"
        )

        config = load_config(config_path)

        assert config.project == "loan-test"
        assert config.variant == "loan"
        assert config.table_names == ["loan_default"]
        assert config.datasets[0].file == Path("Loan_default.csv")
        assert config.loader.keep_nulls is True

    def test_base_config_is_merged(self, tmp_path: Path) -> None:
        """Test that base.yaml next to the config provides defaults."""
        (tmp_path / "base.yaml").write_text(
            "source:\n"
            "  row_terminator: '0x0a'\n"
            "  header_rows: 2\n"
            "loader:\n"
            "  keep_nulls: false\n"
            "  chunk_size: 50\n"
        )
        config_path = tmp_path / "cricket.yaml"
        config_path.write_text(
            "project: cricket\n"
            "variant: cricket\n"
            "database:\n"
            "  url: sqlite://\n"
            "loader:\n"
            "  chunk_size: 500\n"
        )

        config = load_config(config_path)

        assert config.source.header_rows == 2
        assert config.loader.keep_nulls is False
        assert config.loader.chunk_size == 500

    def test_env_interpolation(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test ${VAR} and ${VAR:default} interpolation."""
        monkeypatch.setenv("BULKLOAD_TEST_URL", "sqlite:///from-env.sqlite")
        monkeypatch.delenv("BULKLOAD_TEST_ROOT", raising=False)
        config_path = tmp_path / "config.yaml"
        config_path.write_text(
            "project: cricket\n"
            "variant: cricket\n"
            "database:\n"
            "  url: ${BULKLOAD_TEST_URL}\n"
            "source:\n"
            "  root: ${BULKLOAD_TEST_ROOT:./fallback}\n"
        )

        config = load_config(config_path)

        assert config.database.url == "sqlite:///from-env.sqlite"
        assert config.source.root == Path("./fallback")

    def test_dataset_entry_forms(self, tmp_path: Path) -> None:
        """Test mapping and 'table: file' dataset entries."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text(
            "project: cricket\n"
            "variant: cricket\n"
            "database:\n"
            "  url: sqlite://\n"
            "datasets:\n"
            "  - table: teams\n"
            "    file: teams.psv\n"
            "    delimiter: '|'\n"
            "  - players: players.csv\n"
        )

        config = load_config(config_path)

        assert config.table_names == ["teams", "players"]
        assert config.datasets[0].delimiter == "|"
        assert config.datasets[1].file == Path("players.csv")

    def test_invalid_dataset_entry(self, tmp_path: Path) -> None:
        """Test that non-mapping dataset entries raise error."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text(
            "project: cricket\n"
            "variant: cricket\n"
            "database:\n"
            "  url: sqlite://\n"
            "datasets:\n"
            "  - players.csv\n"
        )

        with pytest.raises(ValueError, match="must be mappings"):
            load_config(config_path)

    @pytest.mark.parametrize(
        ("content", "message"),
        [
            ("variant: cricket\ndatabase:\n  url: sqlite://\n", "project"),
            ("project: p\ndatabase:\n  url: sqlite://\n", "variant"),
            ("project: p\nvariant: football\ndatabase:\n  url: sqlite://\n", "Unknown variant"),
            ("project: p\nvariant: cricket\n", "database.url"),
        ],
    )
    def test_missing_required_fields(
        self, tmp_path: Path, content: str, message: str
    ) -> None:
        """Test that missing required fields raise error."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text(content)

        with pytest.raises(ValueError, match=message):
            load_config(config_path)

    def test_shipped_configs_load(self, project_root: Path) -> None:
        """Test that the configs in configs/ are valid."""
        cricket = load_config(project_root / "configs" / "cricket.yaml")
        loan = load_config(project_root / "configs" / "loan.yaml")

        assert cricket.table_names[0] == "players"
        assert len(cricket.datasets) == 8
        assert cricket.source.delimiter == "|"
        assert cricket.source.row_terminator == "\n"
        assert loan.table_names == ["loan_default"]
