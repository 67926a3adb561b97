"""
Visit Counter Backend: Request Metrics Registry
================================================

What:  The two process-wide request instruments and their text exposition.
How:   PrometheusRequestMetrics owns a dedicated CollectorRegistry, so each
       application instance (and each test) gets isolated counters rather
       than sharing prometheus_client's global default registry.
Who:   Updated by MetricsMiddleware on every request; read only by the
       GET /metrics scrape endpoint.

Instruments:
    http_requests_total{method, endpoint}             counter
    http_request_duration_seconds{method, endpoint}   histogram, default buckets
"""

from typing import Optional

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)
from starlette.requests import Request


class PrometheusRequestMetrics:
    """Prometheus-backed request counter and latency histogram."""

    def __init__(self, registry: Optional[CollectorRegistry] = None) -> None:
        self._registry = registry or CollectorRegistry()

        self._requests_total = Counter(
            "http_requests_total",
            "Total number of HTTP requests",
            ["method", "endpoint"],
            registry=self._registry,
        )

        self._request_duration = Histogram(
            "http_request_duration_seconds",
            "Duration of HTTP requests",
            ["method", "endpoint"],
            registry=self._registry,
        )

    @property
    def registry(self) -> CollectorRegistry:
        return self._registry

    def observe_request(self, method: str, endpoint: str, duration: float) -> None:
        """Count one request and record its duration in seconds."""
        self._requests_total.labels(method=method, endpoint=endpoint).inc()
        self._request_duration.labels(method=method, endpoint=endpoint).observe(duration)

    @property
    def content_type(self) -> str:
        return CONTENT_TYPE_LATEST

    def generate(self) -> bytes:
        """Serialize the registry in Prometheus text exposition format."""
        return generate_latest(self._registry)


def get_metrics(request: Request) -> PrometheusRequestMetrics:
    """FastAPI dependency: the metrics registry attached to the running app."""
    return request.app.state.metrics
