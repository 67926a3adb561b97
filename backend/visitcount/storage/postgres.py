"""
Visit Counter Backend: Networked PostgreSQL Storage
====================================================

What:  Connection-pooled PostgreSQL backend using the asyncpg driver.
How:   Pool of 10 persistent connections plus 10 overflow (20 max), each
       recycled after 5 minutes and pre-pinged before use.

Construction sequence (connect):
    1. Build the engine (lazy, no I/O)
    2. Reachability check: SELECT 1
    3. Provisioning: CREATE TABLE IF NOT EXISTS visits
    If step 2 or 3 fails the pool is disposed and the error is raised;
    the application never starts with a half-initialized backend.
"""

import logging
from typing import Union

from sqlalchemy.engine import URL

from visitcount.database import build_engine
from visitcount.exceptions import StorageError
from visitcount.storage.sql import SQLVisitStorage

logger = logging.getLogger(__name__)

POOL_SIZE = 10
MAX_OVERFLOW = 10


class PostgresVisitStorage(SQLVisitStorage):
    """Networked backend selected with STORAGE_BACKEND=postgres."""

    @classmethod
    async def connect(
        cls, url: Union[str, URL], echo: bool = False
    ) -> "PostgresVisitStorage":
        engine = build_engine(
            url,
            pool_size=POOL_SIZE,
            max_overflow=MAX_OVERFLOW,
            pool_pre_ping=True,
            echo=echo,
        )
        storage = cls(engine)
        try:
            await storage.ping()
            await storage.provision()
        except StorageError as e:
            logger.error("PostgreSQL storage initialization failed: %s | Context: %s", e.message, e.context)
            await storage.close()
            raise

        logger.info("PostgreSQL storage ready (pool %d + %d overflow)", POOL_SIZE, MAX_OVERFLOW)
        return storage
