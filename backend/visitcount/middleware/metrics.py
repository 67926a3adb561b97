"""
Visit Counter Backend: Request Metrics Middleware
==================================================

What:  Records one counter increment and one latency observation for every
       request, labeled by (method, route template).
How:   Timer starts before the downstream call; the observation is made in a
       `finally` block so requests that raise are still counted.
When:  Outermost layer of the chain, so short-circuited responses (403 from
       the origin check, 405 from routing) are observed too.

Endpoint label:
    The route template the request matches, e.g. "/api/count". The router
    stores it in the ASGI scope; requests short-circuited before routing (the
    origin check's 403) are matched against the route table here instead.
    Method-not-allowed matches count as matches. Requests no route matches
    share the label "unmatched", so the set of series is fixed by the route
    table and not by whatever paths clients send.
"""

import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Match
from starlette.types import ASGIApp

from visitcount.metrics import PrometheusRequestMetrics

UNMATCHED_ENDPOINT = "unmatched"


def _match_route(request: Request):
    partial = None
    for route in request.app.router.routes:
        match, _ = route.matches(request.scope)
        if match == Match.FULL:
            return route
        if match == Match.PARTIAL and partial is None:
            partial = route
    return partial


def endpoint_label(request: Request) -> str:
    """Route template the request matches, or UNMATCHED_ENDPOINT."""
    route = request.scope.get("route") or _match_route(request)
    return getattr(route, "path", None) or UNMATCHED_ENDPOINT


class MetricsMiddleware(BaseHTTPMiddleware):
    """Feeds PrometheusRequestMetrics; never short-circuits."""

    # The scrape endpoint is not instrumented
    EXCLUDED_PATHS = frozenset({"/metrics"})

    def __init__(self, app: ASGIApp, metrics: PrometheusRequestMetrics) -> None:
        super().__init__(app)
        self._metrics = metrics

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in self.EXCLUDED_PATHS:
            return await call_next(request)

        method = request.method
        start_time = time.perf_counter()
        try:
            return await call_next(request)
        finally:
            # Read after call_next: routing fills in scope["route"]
            self._metrics.observe_request(
                method, endpoint_label(request), time.perf_counter() - start_time
            )
