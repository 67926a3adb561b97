"""
Visit Counter Backend: Liveness and Readiness Probes
=====================================================

What:  GET /healthz (process is up) and GET /readyz (storage reachable).
Who:   Load balancers and orchestrators; both return plain text.

    /healthz: always 200 "ok", no dependency checks
    /readyz:  200 "ready" when storage.ping() succeeds, else 500
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from visitcount.exceptions import StorageError
from visitcount.storage import VisitStorage, get_storage

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/healthz", response_class=PlainTextResponse, summary="Liveness probe")
async def healthz() -> PlainTextResponse:
    return PlainTextResponse("ok")


@router.get("/readyz", response_class=PlainTextResponse, summary="Readiness probe")
async def readyz(storage: VisitStorage = Depends(get_storage)) -> PlainTextResponse:
    try:
        await storage.ping()
    except StorageError as e:
        logger.warning("Readiness check failed: %s | Context: %s", e.message, e.context)
        return PlainTextResponse("storage unavailable", status_code=500)
    return PlainTextResponse("ready")
