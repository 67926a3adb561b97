"""
Visit Counter Backend: Origin Check Middleware
===============================================

What:  Rejects requests whose Origin header is not on the allow-list.
When:  Production mode only (APP_ENV=prod); innermost layer before routing.

Policy:
    allow-list empty           → 500 "Allowed origins not set"
    Origin header on the list  → pass through, echo Access-Control-Allow-Origin
    anything else              → 403 "Forbidden"
                                 (a missing Origin header is "anything else";
                                  the Host header is never consulted)

Preflight requests (OPTIONS with Access-Control-Request-Method) never reach
this layer: CORSMiddleware answers them, with 200 for a listed origin and
400 "Disallowed CORS origin" for any other, including when the list is empty.

Matching is exact string comparison: no wildcards, no normalization of
scheme, port, or trailing slash.

Excluded paths:
    Probes and the metrics scrape come from infrastructure, not browsers,
    and carry no Origin header.
"""

import logging
from typing import Iterable

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

logger = logging.getLogger(__name__)


class OriginCheckMiddleware(BaseHTTPMiddleware):
    """Allow-list enforcement; the list is fixed at construction."""

    EXCLUDED_PATHS = frozenset({"/healthz", "/readyz", "/metrics"})

    def __init__(self, app: ASGIApp, allowed_origins: Iterable[str]) -> None:
        super().__init__(app)
        self._allowed_origins = frozenset(allowed_origins)

    @property
    def allowed_origins(self) -> frozenset:
        return self._allowed_origins

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        if not self._allowed_origins:
            logger.error(
                "Rejecting %s %s: allowed origins not set",
                request.method,
                request.url.path,
            )
            return JSONResponse(
                status_code=500,
                content={
                    "error": "configuration_error",
                    "message": "Allowed origins not set",
                },
            )

        origin = request.headers.get("origin", "")
        if origin not in self._allowed_origins:
            logger.warning(
                "Rejected origin %r for %s %s",
                origin,
                request.method,
                request.url.path,
            )
            return JSONResponse(
                status_code=403,
                content={"error": "origin_rejected", "message": "Forbidden"},
            )

        response = await call_next(request)
        response.headers["Access-Control-Allow-Origin"] = origin
        return response
