"""
Visit Counter Backend: Test Configuration (conftest.py)
========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── dev_settings / prod_settings: Settings built without reading .env
    ├── fake_storage: In-memory VisitStorage spy (no database)
    ├── sqlite_storage: Real SQLite backend in a temporary directory
    ├── request_metrics: Fresh Prometheus registry
    ├── client: HTTPX AsyncClient against a dev-mode app with fake storage
    └── make_client: Factory for clients against arbitrary app configurations
"""

import os
import tempfile

# Override settings for testing BEFORE any application imports
os.environ["ALLOWED_ORIGINS"] = "http://example.com"
os.environ["APP_ENV"] = "dev"
os.environ["STORAGE_BACKEND"] = "sqlite"
os.environ["SQLITE_PATH"] = os.path.join(tempfile.mkdtemp(prefix="visitcount_test_"), "visits.db")
os.environ["LOG_LEVEL"] = "WARNING"

from contextlib import asynccontextmanager
from datetime import datetime
from typing import List, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from visitcount.config import Settings
from visitcount.metrics import PrometheusRequestMetrics
from visitcount.storage.base import VisitStorage
from visitcount.storage.sqlite import SQLiteVisitStorage


class FakeVisitStorage(VisitStorage):
    """
    In-memory VisitStorage that records every call.

    Usage:
        fake = FakeVisitStorage()
        fake.fail_with = StorageConnectionError("down")  # next calls raise
        assert fake.calls == ["increment_visit", "get_visit_count"]
    """

    def __init__(self, initial_count: int = 0) -> None:
        self.visits: List[datetime] = []
        self.initial_count = initial_count
        self.calls: List[str] = []
        self.fail_with: Optional[Exception] = None
        self.closed = False

    def _record(self, name: str) -> None:
        self.calls.append(name)
        if self.fail_with is not None:
            raise self.fail_with

    async def increment_visit(self, timestamp: datetime) -> None:
        self._record("increment_visit")
        self.visits.append(timestamp)

    async def get_visit_count(self) -> int:
        self._record("get_visit_count")
        return self.initial_count + len(self.visits)

    async def ping(self) -> None:
        self._record("ping")

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def dev_settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        allowed_origins="http://example.com",
        app_env="dev",
        sqlite_path=str(tmp_path / "visits.db"),
        log_level="WARNING",
    )


@pytest.fixture
def prod_settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        allowed_origins="http://example.com",
        app_env="prod",
        sqlite_path=str(tmp_path / "visits.db"),
        log_level="WARNING",
    )


@pytest.fixture
def fake_storage() -> FakeVisitStorage:
    return FakeVisitStorage()


@pytest.fixture
def request_metrics() -> PrometheusRequestMetrics:
    return PrometheusRequestMetrics()


@pytest_asyncio.fixture
async def sqlite_storage(tmp_path):
    """
    Provides a provisioned SQLite backend in a per-test temporary directory.

    Closed (pool disposed) after the test.
    """
    storage = await SQLiteVisitStorage.connect(str(tmp_path / "db" / "visits.db"))
    yield storage
    await storage.close()


@asynccontextmanager
async def _client_for(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client


@pytest.fixture
def make_client():
    """
    Factory returning an async context manager for any FastAPI app.

    Usage:
        async with make_client(create_app(prod_settings, storage)) as client:
            response = await client.get("/api/count")

    ASGITransport does not run the lifespan, so apps under test must be
    given their storage explicitly.
    """
    return _client_for


@pytest_asyncio.fixture
async def client(dev_settings, fake_storage, request_metrics):
    """HTTPX AsyncClient talking to a dev-mode app backed by fake_storage."""
    from visitcount.main import create_app

    app = create_app(dev_settings, storage=fake_storage, request_metrics=request_metrics)
    async with _client_for(app) as http_client:
        yield http_client
