# Routes package init
"""
Visit Counter Backend: API Routes Package
==========================================

Route Inventory:
    - visits.py:   POST /api/count   (record a visit)
                   GET  /api/count   (read the visit count)
    - health.py:   GET  /healthz     (liveness)
                   GET  /readyz      (readiness, pings storage)
    - metrics.py:  GET  /metrics     (Prometheus scrape)

Routes handle HTTP concerns only; business logic lives in services.
"""
