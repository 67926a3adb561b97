# Middleware package init
"""
Visit Counter Backend: Middleware Package
==========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first, as composed by main.build_middleware):
    Request → [Metrics] → [Logging] → [CORS] → [Origin Check*] → Route Handler

    * production mode only

    Responses travel back out through the same layers in reverse:
    Response ← [Metrics] ← [Logging] ← [CORS] ← [Origin Check*] ← Route Handler

    This means:
    - Metrics and logging observe every response, including a 403 or 500
      produced by the origin check before the handler runs
    - CORS answers preflight requests itself; they never reach the origin
      check or the handler
"""
