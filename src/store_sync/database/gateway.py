"""
Persistence gateway - the only component that touches durable storage.

Provides:
- Atomic upsert by natural key (INSERT ... ON CONFLICT DO UPDATE)
- Request-scoped sessions that are always released
- Transaction scoping with rollback on every failure path
- Translation of driver faults into ErrorKind categories
"""

import uuid
from contextlib import contextmanager
from typing import Any, Dict, Generator, Optional, Sequence

from sqlalchemy import text
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Engine
from sqlalchemy.exc import (
    DataError,
    DBAPIError,
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
    StatementError,
    TimeoutError as PoolTimeoutError,
)
from sqlalchemy.orm import Session, sessionmaker

from store_sync.database.connection import create_db_engine
from store_sync.utils.exceptions import (
    ConfigurationError,
    ErrorKind,
    StoreError,
    TransientStoreError,
)
from store_sync.utils.logger import get_logger

logger = get_logger(__name__)

_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def classify_error(exc: SQLAlchemyError) -> ErrorKind:
    """
    Map a SQLAlchemy/driver exception onto an ErrorKind.

    Connectivity, lock and pool exhaustion faults are transient. Constraint
    and data faults are not: the same statement would fail again.
    """
    if isinstance(exc, (OperationalError, InterfaceError, DisconnectionError, PoolTimeoutError)):
        return ErrorKind.TRANSIENT
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return ErrorKind.TRANSIENT
    if isinstance(exc, IntegrityError):
        return ErrorKind.CONSTRAINT
    if isinstance(exc, (DataError, StatementError)):
        return ErrorKind.INVALID_DATA
    return ErrorKind.UNKNOWN


def translate_error(exc: SQLAlchemyError, operation: str,
                    table: Optional[str] = None) -> StoreError:
    """Build the gateway-level error for a storage fault."""
    kind = classify_error(exc)
    message = f"Storage {operation} failed: {exc.__class__.__name__}"

    if kind is ErrorKind.TRANSIENT:
        return TransientStoreError(message, operation=operation, table=table)
    return StoreError(message, kind=kind, operation=operation, table=table)


class PersistenceGateway:
    """
    Owns the engine and session factory for the process.

    Created once at startup and injected wherever storage is needed;
    `dispose()` releases the pool on shutdown.
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self._session_factory = sessionmaker(
            bind=engine,
            autoflush=False,
            expire_on_commit=False,
        )

        insert = _DIALECT_INSERTS.get(engine.dialect.name)
        if insert is None:
            raise ConfigurationError(
                f"Unsupported database dialect for atomic upsert: {engine.dialect.name}"
            )
        self._insert = insert

    @classmethod
    def from_config(cls, config) -> "PersistenceGateway":
        """Create a gateway from application configuration."""
        engine = create_db_engine(
            config.database_url,
            pool_size=config.db_pool_size,
            max_overflow=config.db_max_overflow,
            echo=config.db_echo,
        )
        return cls(engine)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def create_all(self) -> None:
        """Create all tables."""
        from store_sync.database.models import Base

        logger.info("Creating database tables...")
        Base.metadata.create_all(bind=self.engine)
        logger.info("Database tables created successfully")

    def drop_all(self) -> None:
        """Drop all tables (use with caution!)."""
        from store_sync.database.models import Base

        logger.warning("Dropping all database tables...")
        Base.metadata.drop_all(bind=self.engine)
        logger.warning("All database tables dropped")

    def dispose(self) -> None:
        """Release every pooled connection."""
        self.engine.dispose()
        logger.info("Database connection pool disposed")

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.error(f"Database ping failed: {e}")
            return False

    # ------------------------------------------------------------------
    # Scopes
    # ------------------------------------------------------------------

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """
        Request-scoped session.

        Uncommitted work is rolled back and the session is closed on every
        exit path. Storage faults escaping the block are translated.

        Usage:
            with gateway.session() as session:
                tenant = directory.resolve(session, "shop.example.com")
        """
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            session.rollback()
            raise translate_error(e, "session") from e
        finally:
            session.close()

    @contextmanager
    def transaction(self, session: Session) -> Generator[Session, None, None]:
        """
        Unit of work: commits on success, rolls back on any error.

        Usage:
            with gateway.transaction(session):
                gateway.upsert(session, Customer, ...)
                gateway.upsert(session, Order, ...)
        """
        try:
            yield session
            session.commit()
            logger.debug("Transaction committed successfully")
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Transaction rolled back due to storage error: {e.__class__.__name__}")
            raise translate_error(e, "transaction") from e
        except Exception as e:
            session.rollback()
            logger.error(f"Transaction rolled back due to error: {e}")
            raise

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def upsert(
        self,
        session: Session,
        model,
        key: Sequence[str],
        values: Dict[str, Any],
        update: Sequence[str],
    ) -> uuid.UUID:
        """
        Insert a row, or update it when its unique key already exists.

        Runs as one statement so concurrent duplicates resolve inside the
        database; the losing writer updates instead of failing.

        Args:
            session: Active session (the caller owns the transaction)
            model: Mapped class with an `id` primary key
            key: Column names of the unique constraint
            values: Column values for the insert
            update: Column names overwritten on conflict

        Returns:
            The internal id of the inserted or updated row
        """
        table = model.__table__
        stmt = self._insert(table).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=list(key),
            set_={name: stmt.excluded[name] for name in update},
        ).returning(table.c.id)

        try:
            return session.execute(stmt).scalar_one()
        except SQLAlchemyError as e:
            raise translate_error(e, "upsert", table.name) from e
