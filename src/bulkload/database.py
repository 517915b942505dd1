"""Engine construction for the configured target database."""

from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url

from bulkload.config.settings import DatabaseConfig


def get_engine(config: DatabaseConfig) -> Engine:
    """
    Create an engine for the target database.

    SQL Server connections through pyodbc use fast_executemany so that the
    chunked inserts are sent as parameter arrays.

    Args:
        config: Database configuration.

    Returns:
        SQLAlchemy engine (not yet connected).
    """
    url = make_url(config.url)
    kwargs: dict[str, object] = {"echo": config.echo}
    if url.get_backend_name() == "mssql" and url.get_driver_name() == "pyodbc":
        kwargs["fast_executemany"] = True
    return create_engine(url, **kwargs)


def sqlite_path(config: DatabaseConfig) -> Path | None:
    """
    File backing a SQLite URL.

    Returns:
        Path of the database file, or None for in-memory and non-SQLite URLs.
    """
    url = make_url(config.url)
    if url.get_backend_name() != "sqlite":
        return None
    if not url.database or url.database == ":memory:":
        return None
    return Path(url.database)
