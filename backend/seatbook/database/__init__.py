"""
Database engine, session factory, and metadata shared across the application.

SQLite (the default) and PostgreSQL are supported. On PostgreSQL the
reservation table additionally carries an exclusion constraint; see
models.reservation.
"""

from __future__ import annotations

import logging
import random
import time
from typing import Any, Callable, Generator, Optional, TypeVar

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import DeclarativeMeta, Session, declarative_base, sessionmaker

from seatbook.core.config import settings
from seatbook.core.exceptions import RepositoryException

logger = logging.getLogger(__name__)


def _engine_options(db_url: str) -> dict[str, Any]:
    if db_url.startswith("sqlite"):
        # Shared across the API's worker threads; wait on the file lock instead of failing
        return {"connect_args": {"check_same_thread": False, "timeout": 30}, "future": True}
    return {
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_timeout": settings.db_pool_timeout,
        "pool_recycle": 300,
        "pool_pre_ping": True,
        "future": True,
    }


def _on_sqlite_connect(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(db_url: str) -> Engine:
    """Engine for `db_url`; SQLite connections get foreign keys switched on."""
    new_engine = create_engine(db_url, **_engine_options(db_url))
    if new_engine.dialect.name == "sqlite":
        event.listen(new_engine, "connect", _on_sqlite_connect)
    logger.debug(f"Database engine created for dialect {new_engine.dialect.name}")
    return new_engine


engine: Engine = make_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)

Base: DeclarativeMeta = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Request-scoped session: committed on success, rolled back on error."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db(bind: Engine | None = None) -> None:
    """Create any missing tables. Importing models registers them on Base.metadata."""
    from seatbook import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database schema ready")


T = TypeVar("T")

# Read paths only: a retried write could book twice
_RETRYABLE_ERROR_SNIPPETS = (
    "database is locked",
    "server closed the connection",
    "connection reset by peer",
    "could not connect to server",
)


def _is_retryable_db_error(exc: Exception) -> bool:
    text = str(exc).lower()
    return any(snippet in text for snippet in _RETRYABLE_ERROR_SNIPPETS)


def _retry_delay(attempt: int) -> float:
    return 0.1 * (2 ** (attempt - 1)) + random.uniform(0, 0.05 * attempt)


def with_db_retry(
    op_name: str,
    func: Callable[[], T],
    *,
    max_attempts: int = 3,
    on_retry: Optional[Callable[[], None]] = None,
) -> T:
    """
    Run a read-only query, retrying transient disconnects and SQLite lock waits.

    `on_retry` runs before each new attempt (typically `session.rollback`).
    Never wrap reservation writes with this.
    """
    attempt = 0
    while True:
        attempt += 1
        try:
            return func()
        except (OperationalError, RepositoryException) as exc:
            if attempt >= max_attempts or not _is_retryable_db_error(exc):
                raise
            delay = _retry_delay(attempt)
            logger.warning(
                f"Retrying {op_name} after transient store error",
                extra={"op": op_name, "attempt": attempt, "delay": delay, "error": str(exc)},
            )
            time.sleep(delay)
            if on_retry is not None:
                on_retry()


__all__ = [
    "Base",
    "SessionLocal",
    "engine",
    "get_db",
    "init_db",
    "make_engine",
    "with_db_retry",
]
