"""
Visit Counter Backend: SQL Visit Storage
=========================================

What:  VisitStorage implementation shared by the SQLite and PostgreSQL
       backends. Backends differ only in how their AsyncEngine is built.
How:   Every operation checks a connection out of the pool through
       _connection(), which translates SQLAlchemy and driver errors into
       the StorageError hierarchy.

Error translation (by the phase the failure happens in):
    checking a connection out of the pool     → StorageConnectionError
    (refused, auth failure, connect or pool timeout, unreadable database file)
    statement execution, connection invalidated mid-query
                                              → StorageConnectionError
    statement execution, anything else        → StorageQueryError

SQLite raises OperationalError for both "unable to open database file" and
"no such table", so the exception class alone cannot tell the two apart.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator

from sqlalchemy import func, insert, select, text
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from visitcount.database import Base
from visitcount.exceptions import StorageConnectionError, StorageQueryError
from visitcount.models.visit import Visit
from visitcount.storage.base import VisitStorage

logger = logging.getLogger(__name__)


def _error_context(e: BaseException) -> dict:
    return {"error_type": type(e).__name__, "original_error": str(e)}


class SQLVisitStorage(VisitStorage):
    """
    VisitStorage over an SQLAlchemy AsyncEngine.

    Instances are normally built by a backend's connect() classmethod, which
    provisions the table before handing the storage out. Wrapping an existing
    engine directly is supported for tests.
    """

    def __init__(self, engine: AsyncEngine):
        self._engine = engine

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    @asynccontextmanager
    async def _connection(
        self, operation: str, message: str, *, transactional: bool = False
    ) -> AsyncIterator[AsyncConnection]:
        """Check out a pooled connection, optionally inside a committed transaction."""
        try:
            conn = await self._engine.connect()
        except (SQLAlchemyError, OSError, asyncio.TimeoutError) as e:
            logger.debug("Storage %s: connection checkout failed: %s", operation, e)
            raise StorageConnectionError(message, operation=operation, context=_error_context(e)) from e

        try:
            if transactional:
                async with conn.begin():
                    yield conn
            else:
                yield conn
        except DBAPIError as e:
            logger.debug("Storage %s: statement failed: %s", operation, e)
            error_cls = StorageConnectionError if e.connection_invalidated else StorageQueryError
            raise error_cls(message, operation=operation, context=_error_context(e)) from e
        except SQLAlchemyError as e:
            logger.debug("Storage %s: statement failed: %s", operation, e)
            raise StorageQueryError(message, operation=operation, context=_error_context(e)) from e
        finally:
            await conn.close()

    async def provision(self) -> None:
        """Create the visits table if it does not exist (idempotent)."""
        async with self._connection(
            "provision", "Failed to create visits table", transactional=True
        ) as conn:
            await conn.run_sync(Base.metadata.create_all, checkfirst=True)

    async def increment_visit(self, timestamp: datetime) -> None:
        async with self._connection(
            "increment_visit", "Failed to increment visit count", transactional=True
        ) as conn:
            await conn.execute(insert(Visit).values(timestamp=timestamp))

    async def get_visit_count(self) -> int:
        async with self._connection("get_visit_count", "Failed to get visit count") as conn:
            result = await conn.execute(select(func.count()).select_from(Visit))
            return int(result.scalar_one())

    async def ping(self) -> None:
        async with self._connection("ping", "Database is unreachable") as conn:
            await conn.execute(text("SELECT 1"))

    async def close(self) -> None:
        await self._engine.dispose()
