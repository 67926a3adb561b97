"""
Visit Counter Backend: Request Logging Middleware
==================================================

What:  One access log line per request: method, URL, status, duration.
How:   Duration is measured around the downstream call and the line is
       written after downstream returns.
When:  Inside MetricsMiddleware, outside CORS and the origin check, so
       rejected requests are logged as well.

Log levels follow the response status:
    5xx → ERROR, 4xx → WARNING, everything else → INFO
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("visitcount.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs every request with its wall-clock duration.

    Example line:
        POST http://localhost:8000/api/count 200 3.4ms from 127.0.0.1
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()

        client_ip = request.client.host if request.client else "unknown"
        method = request.method
        url = str(request.url)

        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error("%s %s failed after %.1fms from %s", method, url, duration_ms, client_ip)
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms from %s",
            method,
            url,
            status,
            duration_ms,
            client_ip,
            extra={
                "method": method,
                "url": url,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response
