"""
Visit Counter Backend: Embedded SQLite Storage
===============================================

What:  Single-file SQLite backend using the aiosqlite async driver.
How:   Bounded pool of at most 10 open connections (5 kept, 5 overflow),
       each recycled after 5 minutes. The table is provisioned once in
       connect(); nothing is checked per call.
"""

import logging
from pathlib import Path

from visitcount.database import build_engine
from visitcount.exceptions import StorageConnectionError, StorageError
from visitcount.storage.sql import SQLVisitStorage

logger = logging.getLogger(__name__)

MAX_OPEN_CONNECTIONS = 10
MAX_IDLE_CONNECTIONS = 5


class SQLiteVisitStorage(SQLVisitStorage):
    """Embedded backend; the database file is created on first connect."""

    @classmethod
    async def connect(cls, path: str, echo: bool = False) -> "SQLiteVisitStorage":
        """
        Open (creating if needed) the database file and provision the table.

        Raises:
            StorageConnectionError: The file or its directory is not usable.
            StorageQueryError: Table provisioning failed.
        """
        db_file = Path(path)
        try:
            db_file.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageConnectionError(
                "Failed to open database file",
                operation="connect",
                context={"path": str(db_file), "original_error": str(e)},
            ) from e

        engine = build_engine(
            f"sqlite+aiosqlite:///{db_file}",
            pool_size=MAX_IDLE_CONNECTIONS,
            max_overflow=MAX_OPEN_CONNECTIONS - MAX_IDLE_CONNECTIONS,
            echo=echo,
        )
        storage = cls(engine)
        try:
            await storage.provision()
        except StorageError:
            await storage.close()
            raise

        logger.info("SQLite storage ready: %s", db_file.resolve())
        return storage
