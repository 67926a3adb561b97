"""
Visit Counter Backend: Application Package
===========================================

What: Marks the `visitcount` directory as a Python package.
Who:  Imported by uvicorn (`visitcount.main:app`), pytest, and the console script.

Layering:

    ┌─────────────────────────────────────┐
    │     Middleware (metrics, logging,   │  ← cross-cutting concerns
    │      CORS, origin check)            │
    ├─────────────────────────────────────┤
    │        Routes (API Layer)           │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │        Services (Business Logic)    │  ← verb → storage operation
    ├─────────────────────────────────────┤
    │     Storage (SQLite / PostgreSQL)   │  ← pluggable backends
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
