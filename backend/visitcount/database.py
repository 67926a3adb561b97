"""
Visit Counter Backend: Database Engine Helpers
===============================================

What:  Declarative base for ORM models and the async engine factory used by
       both storage backends.
How:   Each backend builds its own AsyncEngine through build_engine() with the
       pool limits that suit it; there is no module-level engine.

Connection Pooling:
    SQLite (embedded):    pool_size=5,  max_overflow=5   → at most 10 open
    PostgreSQL (network): pool_size=10, max_overflow=10  → at most 20 open
    Both:                 pool_recycle=300 (5 minute connection lifetime)

    Callers beyond the pool limit queue for up to pool_timeout seconds and
    then fail with a connection-level error.
"""

from typing import Any, Union

from sqlalchemy.engine import URL
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase

# Maximum connection lifetime in seconds, shared by both backends
POOL_RECYCLE_SECONDS = 300


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models; its metadata drives provisioning."""
    pass


def build_engine(
    url: Union[str, URL],
    *,
    pool_size: int,
    max_overflow: int,
    pool_recycle: int = POOL_RECYCLE_SECONDS,
    echo: bool = False,
    **kwargs: Any,
) -> AsyncEngine:
    """
    Create an AsyncEngine with a bounded connection pool.

    Engine creation is lazy: no connection is opened until the first
    statement, so reachability has to be checked explicitly by the caller.
    """
    return create_async_engine(
        url,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_recycle=pool_recycle,
        echo=echo,
        **kwargs,
    )
