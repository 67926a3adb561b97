"""
Visit Counter Backend: Visit Service
=====================================

What:  Business logic behind /api/count: record a visit, report the count.
How:   Stateless; the storage backend is passed in on each call, so tests
       hand it a fake and routes hand it the backend from app.state.

Error Handling Strategy:
    StorageError from the backend propagates unchanged (no retry, no
    wrapping); the global handler turns it into a 500. A result that does
    not fit its response contract raises SerializationError.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from pydantic import ValidationError

from visitcount.exceptions import SerializationError
from visitcount.schemas.visit import VisitCountResponse, VisitMessageResponse
from visitcount.storage.base import VisitStorage

logger = logging.getLogger(__name__)

INCREMENT_MESSAGE = "Visit count incremented"


class VisitService:
    """Translates visit operations into storage calls and response models."""

    async def record_visit(
        self,
        storage: VisitStorage,
        timestamp: Optional[datetime] = None,
    ) -> VisitMessageResponse:
        """
        Insert one visit record stamped with the current UTC time.

        Args:
            storage: Active VisitStorage backend
            timestamp: Override for the record time (defaults to now, UTC)

        Raises:
            StorageError: The backend failed; nothing was recorded.
        """
        await storage.increment_visit(timestamp or datetime.now(timezone.utc))
        logger.info(INCREMENT_MESSAGE)
        return VisitMessageResponse(message=INCREMENT_MESSAGE)

    async def get_count(self, storage: VisitStorage) -> VisitCountResponse:
        """
        Read the current visit count.

        Raises:
            StorageError: The backend failed.
            SerializationError: The backend reported a count the response
                contract rejects (e.g. a negative number).
        """
        count = await storage.get_visit_count()
        try:
            return VisitCountResponse(visits=count)
        except ValidationError as e:
            raise SerializationError(
                message="Failed to encode visit count",
                context={"count": count, "errors": e.errors()},
            ) from e


visit_service = VisitService()
