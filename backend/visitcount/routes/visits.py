"""
Visit Counter Backend: Visit Count Routes
==========================================

What:  POST /api/count (record a visit) and GET /api/count (read the count).
How:   Thin handlers: resolve the storage backend, delegate to VisitService.

Any other verb on /api/count is answered 405 by the router before a handler
or the storage dependency is resolved, so storage is never touched.
"""

from fastapi import APIRouter, Depends

from visitcount.schemas.visit import (
    ErrorResponse,
    VisitCountResponse,
    VisitMessageResponse,
)
from visitcount.services.visit_service import visit_service
from visitcount.storage import VisitStorage, get_storage

router = APIRouter(prefix="/api", tags=["Visits"])

_ERROR_RESPONSES = {
    500: {"description": "Storage or encoding failure", "model": ErrorResponse},
}


@router.post(
    "/count",
    response_model=VisitMessageResponse,
    responses=_ERROR_RESPONSES,
    summary="Record a visit",
)
async def increment_visit_count(
    storage: VisitStorage = Depends(get_storage),
) -> VisitMessageResponse:
    return await visit_service.record_visit(storage)


@router.get(
    "/count",
    response_model=VisitCountResponse,
    responses=_ERROR_RESPONSES,
    summary="Get the visit count",
)
async def get_visit_count(
    storage: VisitStorage = Depends(get_storage),
) -> VisitCountResponse:
    return await visit_service.get_count(storage)
