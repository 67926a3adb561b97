"""
Visit Counter Backend: Metrics Scrape Route
============================================

What:  GET /metrics in Prometheus text exposition format.
Who:   The external Prometheus collector; the service never reads it back.
"""

from fastapi import APIRouter, Depends, Response

from visitcount.metrics import PrometheusRequestMetrics, get_metrics

router = APIRouter(tags=["Metrics"])


@router.get("/metrics", summary="Prometheus scrape endpoint")
async def scrape_metrics(
    metrics: PrometheusRequestMetrics = Depends(get_metrics),
) -> Response:
    return Response(content=metrics.generate(), media_type=metrics.content_type)
