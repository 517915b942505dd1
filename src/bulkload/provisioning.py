"""
Database provisioning: drop and recreate the target, create the tables.

This is an irreversible operational step. It runs before loading when
asked for explicitly and is never called by the loader.
"""

import re

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection, Engine, make_url

from bulkload.config.settings import BulkLoadConfig
from bulkload.database import get_engine, sqlite_path
from bulkload.schemas.registry import SchemaRegistry, VariantInfo
from bulkload.utils.logging import get_logger

log = get_logger(__name__)

_DATABASE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Databases to connect to while the target is dropped
DEFAULT_ADMIN_DATABASES: dict[str, str | None] = {
    "mssql": "master",
    "postgresql": "postgres",
    "mysql": None,
    "mariadb": None,
}


class DatabaseProvisioner:
    """
    Recreates the target database and the variant's tables.

    SQLite databases are reset by deleting the file; server databases are
    dropped and created through an administrative connection.
    """

    def __init__(self, config: BulkLoadConfig, engine: Engine | None = None) -> None:
        """
        Initialize provisioner.

        Args:
            config: Load configuration (database URL and variant).
            engine: Engine for the target database (created if omitted).
        """
        self.config = config
        self.engine = engine or get_engine(config.database)

    @property
    def variant(self) -> VariantInfo:
        """Schema variant being provisioned."""
        return SchemaRegistry.get(self.config.variant)

    def provision(self) -> list[str]:
        """
        Reset the database and create all tables.

        Returns:
            Names of the created tables.
        """
        self.reset_database()
        return self.create_tables()

    def reset_database(self) -> None:
        """Drop the target database if it exists and create it empty."""
        # Pooled connections would keep the old database open
        self.engine.dispose()

        backend = self.config.database.backend
        if backend == "sqlite":
            self._reset_sqlite()
            return

        name = self.config.database.database_name
        if not name or not _DATABASE_NAME.match(name):
            msg = f"Refusing to reset database with name {name!r}"
            raise ValueError(msg)

        admin = self._admin_engine(backend)
        try:
            with admin.connect() as conn:
                quoted = conn.dialect.identifier_preparer.quote_identifier(name)
                if backend == "mssql":
                    self._reset_mssql(conn, name, quoted)
                elif backend == "postgresql":
                    self._reset_postgresql(conn, name, quoted)
                else:
                    self._reset_mysql(conn, name, quoted)
        finally:
            admin.dispose()
        log.info("Database created", database=name)

    def create_tables(self) -> list[str]:
        """
        Create every table of the variant.

        Returns:
            Names of the created tables.
        """
        self.variant.metadata.create_all(self.engine)
        names = self.variant.table_names
        log.info("Tables created", variant=self.variant.name, tables=names)
        return names

    def drop_tables(self) -> None:
        """Drop every table of the variant that exists."""
        self.variant.metadata.drop_all(self.engine)
        log.info("Tables dropped", variant=self.variant.name)

    def _reset_sqlite(self) -> None:
        path = sqlite_path(self.config.database)
        if path is None:
            # In-memory database: nothing persists, drop whatever exists
            self.drop_tables()
            return
        if path.exists():
            log.info("Database exists - dropping it", database=str(path))
            path.unlink()
        else:
            log.info("Database does not exist, will create it", database=str(path))
        path.parent.mkdir(parents=True, exist_ok=True)
        log.info("Database created", database=str(path))

    def _admin_engine(self, backend: str) -> Engine:
        if backend not in DEFAULT_ADMIN_DATABASES:
            msg = f"Resetting {backend} databases is not supported"
            raise ValueError(msg)
        admin_database = (
            self.config.database.admin_database or DEFAULT_ADMIN_DATABASES[backend]
        )
        url = make_url(self.config.database.url).set(database=admin_database)
        # DROP/CREATE DATABASE cannot run inside a transaction
        return create_engine(url, isolation_level="AUTOCOMMIT")

    def _reset_mssql(self, conn: Connection, name: str, quoted: str) -> None:
        exists = conn.execute(text("SELECT DB_ID(:name)"), {"name": name}).scalar()
        if exists is not None:
            log.info("Database exists - dropping it", database=name)
            conn.execute(
                text(f"ALTER DATABASE {quoted} SET SINGLE_USER WITH ROLLBACK IMMEDIATE")
            )
            conn.execute(text(f"DROP DATABASE {quoted}"))
        else:
            log.info("Database does not exist, will create it", database=name)
        conn.execute(text(f"CREATE DATABASE {quoted}"))

    def _reset_postgresql(self, conn: Connection, name: str, quoted: str) -> None:
        exists = conn.execute(
            text("SELECT 1 FROM pg_database WHERE datname = :name"), {"name": name}
        ).scalar()
        if exists is not None:
            log.info("Database exists - dropping it", database=name)
            conn.execute(text(f"DROP DATABASE {quoted} WITH (FORCE)"))
        else:
            log.info("Database does not exist, will create it", database=name)
        conn.execute(text(f"CREATE DATABASE {quoted}"))

    def _reset_mysql(self, conn: Connection, name: str, quoted: str) -> None:
        log.info("Dropping database if it exists", database=name)
        conn.execute(text(f"DROP DATABASE IF EXISTS {quoted}"))
        conn.execute(
            text(
                f"CREATE DATABASE {quoted} "
                "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
            )
        )
