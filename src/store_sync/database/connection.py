"""
Database engine construction.
"""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import QueuePool, StaticPool

from store_sync.utils.logger import get_logger

logger = get_logger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(
    database_url: str,
    pool_size: int = 20,
    max_overflow: int = 10,
    echo: bool = False,
) -> Engine:
    """
    Create a SQLAlchemy engine with connection pooling.

    PostgreSQL uses a pre-pinged QueuePool shared by all request workers.
    SQLite (tests and local runs) shares one connection for in-memory
    databases and enforces foreign keys.

    Args:
        database_url: SQLAlchemy database URL
        pool_size: Number of pooled connections
        max_overflow: Connections allowed above pool_size
        echo: Log SQL statements

    Returns:
        Engine: Configured engine
    """
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url.rstrip("/") == "sqlite:":
            kwargs["poolclass"] = StaticPool

        engine = create_engine(database_url, echo=echo, **kwargs)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        logger.debug(f"Created SQLite engine for {database_url}")
        return engine

    engine = create_engine(
        database_url,
        poolclass=QueuePool,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_pre_ping=True,  # Verify connections before using
        echo=echo,
    )
    logger.debug(f"Created pooled engine (pool_size={pool_size}, max_overflow={max_overflow})")
    return engine
