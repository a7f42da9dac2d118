"""Database engine factory and session management."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from papershelf.config import AppConfig

logger = logging.getLogger(__name__)

_engine: Engine | None = None
_session_factory: sessionmaker | None = None


def _enable_sqlite_pragmas(dbapi_conn, _connection_record):
    """Enable WAL mode and foreign-key enforcement on every connection."""
    # Let SQLAlchemy emit BEGIN itself so SAVEPOINTs nest inside a real transaction.
    dbapi_conn.isolation_level = None
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _emit_begin(conn):
    conn.exec_driver_sql("BEGIN")


def configure_sqlite(engine: Engine) -> Engine:
    """Install the per-connection pragmas and explicit transaction handling."""
    event.listen(engine, "connect", _enable_sqlite_pragmas)
    event.listen(engine, "begin", _emit_begin)
    return engine


def init_engine(config: AppConfig) -> Engine:
    """Create and return the SQLAlchemy engine based on configuration."""
    global _engine, _session_factory

    dispose_engine()
    if config.database.path != ":memory:":
        Path(config.database.path).expanduser().parent.mkdir(parents=True, exist_ok=True)

    _engine = create_engine(
        config.database.url,
        echo=False,
        connect_args={"check_same_thread": False},
    )
    configure_sqlite(_engine)

    _session_factory = sessionmaker(bind=_engine)
    logger.info("Database engine initialised (%s)", config.database.url)
    return _engine


def dispose_engine() -> None:
    """Close all pooled connections and forget the current engine."""
    global _engine, _session_factory

    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError("Database engine not initialised, call init_engine() first")
    return _engine


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """Provide a transactional database session."""
    if _session_factory is None:
        raise RuntimeError("Database engine not initialised, call init_engine() first")
    session = _session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
