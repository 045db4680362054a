"""Database Session Manager — one async engine per process, sessions per request.

Invariants:
    - A session that raises is rolled back before the error leaves the scope
    - SQLAlchemy failures surface as DatabaseError (503), never as raw driver errors
    - Pool sizing only applies to server databases; SQLite (tests) uses its default pool

Design Decisions:
    - Module-level db_manager set by the FastAPI lifespan, not at import time
      (ADR: tests swap it for one bound to the in-memory engine)
    - expire_on_commit=False: rows stay readable after commit without lazy loads
    - Exception mapping is an ordered table, most specific class first
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import (
    DBAPIError, IntegrityError, OperationalError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)

from ministry.core.errors import DatabaseError

logger = logging.getLogger(__name__)

# (exception class, public message, operation); first match wins
_ERROR_MAP: tuple[tuple[type[SQLAlchemyError], str, str], ...] = (
    (IntegrityError, "Integrity constraint violated", "commit"),
    (OperationalError, "Connection or operational error", "execute"),
    (DBAPIError, "Database driver error", "query"),
    (SQLAlchemyError, "Database operation failed", "unknown"),
)


def _to_database_error(exc: SQLAlchemyError) -> DatabaseError:
    for exc_type, message, operation in _ERROR_MAP:
        if isinstance(exc, exc_type):
            return DatabaseError(message, operation)
    return DatabaseError("Database operation failed", "unknown")


class DatabaseSessionManager:
    """Owns the engine and hands out sessions that roll back on failure."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        options: dict = {"pool_pre_ping": True}
        if not database_url.startswith("sqlite"):
            options.update(
                pool_size=pool_size, max_overflow=max_overflow, pool_recycle=3600,
            )
        self.engine = create_async_engine(database_url, **options)
        self._session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            mapped = _to_database_error(e)
            logger.error(
                "Database %s error: %s", mapped.operation, e,
                extra={"error_code": mapped.code},
            )
            raise mapped from e
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def ping(self) -> float | None:
        """Round-trip a trivial query. Returns latency in ms, or None when unreachable."""
        started = time.perf_counter()
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
        except DatabaseError:
            return None
        return round((time.perf_counter() - started) * 1000, 2)

    async def dispose(self) -> None:
        await self.engine.dispose()


db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    logger.info("Database engine created (%s)", db_manager.engine.dialect.name)
    return db_manager


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request."""
    if db_manager is None:
        raise RuntimeError("Database not initialized")
    async with db_manager.session() as session:
        yield session
