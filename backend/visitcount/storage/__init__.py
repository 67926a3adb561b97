"""
Visit Counter Backend: Storage Package
=======================================

What:  The VisitStorage interface, its two backends, backend selection, and
       the FastAPI dependency that hands the active backend to routes.

Selection happens once, in the application lifespan. Routes and services
receive a VisitStorage and never branch on which backend it is.
"""

import logging

from starlette.requests import Request

from visitcount.config import Settings
from visitcount.storage.base import VisitStorage
from visitcount.storage.postgres import PostgresVisitStorage
from visitcount.storage.sql import SQLVisitStorage
from visitcount.storage.sqlite import SQLiteVisitStorage

logger = logging.getLogger(__name__)

__all__ = [
    "VisitStorage",
    "SQLVisitStorage",
    "SQLiteVisitStorage",
    "PostgresVisitStorage",
    "create_storage",
    "get_storage",
]


async def create_storage(settings: Settings) -> VisitStorage:
    """Build the backend named by STORAGE_BACKEND, provisioned and ready."""
    echo = settings.log_level == "DEBUG"
    logger.info("Initializing %s storage backend", settings.storage_backend)
    if settings.storage_backend == "postgres":
        return await PostgresVisitStorage.connect(settings.postgres_url, echo=echo)
    return await SQLiteVisitStorage.connect(settings.sqlite_path, echo=echo)


def get_storage(request: Request) -> VisitStorage:
    """FastAPI dependency: the storage backend attached to the running app."""
    return request.app.state.storage
