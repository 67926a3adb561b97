"""
Visit Counter Backend: Abstract Visit Storage Interface
========================================================

What:  Abstract base class defining the contract every storage backend meets.
How:   Concrete backends inherit from VisitStorage; the application selects
       one at startup (see create_storage) and request-path code only ever
       sees this interface.
Who:   Called by VisitService and the readiness probe.

Implementations:
    - SQLiteVisitStorage:   embedded single-file database (aiosqlite)
    - PostgresVisitStorage: networked, connection-pooled database (asyncpg)
"""

from abc import ABC, abstractmethod
from datetime import datetime


class VisitStorage(ABC):
    """
    Persistence contract for visit records.

    Contract:
        - Every failure is raised as a StorageError subclass; driver
          exceptions never leak past a backend.
        - No operation retries. The first failure propagates to the caller.
        - The visits table already exists once a backend is constructed.
    """

    @abstractmethod
    async def increment_visit(self, timestamp: datetime) -> None:
        """
        Insert one visit record stamped with `timestamp`.

        Raises:
            StorageConnectionError: The database could not be reached.
            StorageQueryError: The insert was rejected.
        """
        ...

    @abstractmethod
    async def get_visit_count(self) -> int:
        """
        Count all visit records.

        Returns:
            int: Number of rows, 0 for an empty store (not an error).

        Raises:
            StorageConnectionError: The database could not be reached.
            StorageQueryError: The count query failed.
        """
        ...

    @abstractmethod
    async def ping(self) -> None:
        """Lightweight reachability check used by /readyz. Raises StorageConnectionError."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release every pooled connection. Safe to call more than once."""
        ...
