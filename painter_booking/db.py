"""
Database engine and session lifecycle.

The engine is built once at startup with ``init_engine`` and torn down at
shutdown with ``dispose_engine``. Stores receive the session factory
explicitly; nothing creates a connection lazily behind their back.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from painter_booking.config import settings
from painter_booking.errors import StoreError

logger = logging.getLogger(__name__)

# Base class for models
Base = declarative_base()

_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def _is_sqlite_memory(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url


def _enable_sqlite_immediate_transactions(engine: Engine) -> None:
    """Make pysqlite open every transaction with BEGIN IMMEDIATE.

    pysqlite defers BEGIN until the first DML statement, so a read-check
    followed by a write is not atomic. Taking the write lock at BEGIN
    serializes writers the way a row lock does on server databases.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(url: Optional[str] = None, echo: Optional[bool] = None) -> Engine:
    """Create an engine for ``url`` with SQLite-specific connection settings."""
    url = url or settings.storage.database_url
    echo = settings.storage.echo if echo is None else echo
    if not _is_sqlite(url):
        return create_engine(url, echo=echo, pool_pre_ping=True)

    kwargs: dict = {
        "connect_args": {
            "check_same_thread": False,
            "timeout": settings.storage.sqlite_busy_timeout,
        },
    }
    if _is_sqlite_memory(url):
        kwargs["poolclass"] = StaticPool
    engine = create_engine(url, echo=echo, **kwargs)
    _enable_sqlite_immediate_transactions(engine)
    return engine


def init_engine(url: Optional[str] = None, echo: Optional[bool] = None) -> Engine:
    """Build the process-wide engine and session factory. Call once at startup."""
    global _engine, _session_factory
    if _engine is not None:
        dispose_engine()
    _engine = build_engine(url, echo)
    _session_factory = sessionmaker(
        bind=_engine, autoflush=False, expire_on_commit=False
    )
    logger.info("Database engine initialised (%s)", _engine.url.render_as_string(hide_password=True))
    return _engine


def get_engine() -> Engine:
    if _engine is None:
        raise StoreError("Database engine not initialised; call init_engine() at startup")
    return _engine


def get_session_factory() -> sessionmaker:
    if _session_factory is None:
        raise StoreError("Database engine not initialised; call init_engine() at startup")
    return _session_factory


def create_schema(engine: Optional[Engine] = None) -> None:
    """Create all tables. Schema migrations are handled outside this package."""
    from painter_booking.stores import sql  # noqa: F401  registers the table models

    Base.metadata.create_all(bind=engine or get_engine())


def dispose_engine() -> None:
    """Close pooled connections. Call once at shutdown."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
        logger.info("Database engine disposed")
    _engine = None
    _session_factory = None


@contextmanager
def session_scope(factory: sessionmaker) -> Iterator[Session]:
    """Provide a transactional scope: commit on success, roll back on error."""
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
