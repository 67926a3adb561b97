"""
Visit Counter Backend: /api/count Endpoint Tests
=================================================

What:  HTTP-level tests for recording and reading visits.
How:   HTTPX AsyncClient over ASGITransport; storage is either the in-memory
       FakeVisitStorage spy or a real SQLite backend.

What we test:
    ✅ POST returns the literal success body
    ✅ GET after two increments returns {"visits":2}
    ✅ Other verbs return 405 and never touch storage
    ✅ Storage failures become 500 with a descriptive error body
    ✅ A count the response contract rejects becomes 500 serialization_error
"""

import pytest

from conftest import FakeVisitStorage
from visitcount.exceptions import StorageConnectionError, StorageQueryError
from visitcount.main import create_app


class TestIncrement:
    """POST /api/count."""

    @pytest.mark.asyncio
    async def test_post_returns_literal_message(self, client, fake_storage):
        response = await client.post("/api/count")

        assert response.status_code == 200
        assert response.text == '{"message":"Visit count incremented"}'
        assert response.headers["content-type"] == "application/json"
        assert fake_storage.calls == ["increment_visit"]

    @pytest.mark.asyncio
    async def test_post_stamps_visit_with_aware_utc_time(self, client, fake_storage):
        await client.post("/api/count")

        (timestamp,) = fake_storage.visits
        assert timestamp.tzinfo is not None
        assert timestamp.utcoffset().total_seconds() == 0

    @pytest.mark.asyncio
    async def test_post_storage_unavailable_returns_500(self, client, fake_storage):
        fake_storage.fail_with = StorageConnectionError(
            "Failed to increment visit count",
            operation="increment_visit",
            context={"original_error": "connection refused"},
        )

        response = await client.post("/api/count")

        assert response.status_code == 500
        assert response.json() == {
            "error": "storage_unavailable",
            "message": "Failed to increment visit count",
        }
        # driver detail is logged, not returned
        assert "connection refused" not in response.text


class TestGetCount:
    """GET /api/count."""

    @pytest.mark.asyncio
    async def test_get_on_empty_store_returns_zero(self, client):
        response = await client.get("/api/count")

        assert response.status_code == 200
        assert response.json() == {"visits": 0}

    @pytest.mark.asyncio
    async def test_get_after_two_increments(self, client):
        await client.post("/api/count")
        await client.post("/api/count")

        response = await client.get("/api/count")

        assert response.status_code == 200
        assert response.text == '{"visits":2}'

    @pytest.mark.asyncio
    async def test_get_query_failure_returns_500(self, client, fake_storage):
        fake_storage.fail_with = StorageQueryError(
            "Failed to get visit count", operation="get_visit_count"
        )

        response = await client.get("/api/count")

        assert response.status_code == 500
        assert response.json()["error"] == "storage_error"
        assert response.json()["message"] == "Failed to get visit count"

    @pytest.mark.asyncio
    async def test_negative_count_is_serialization_error(
        self, dev_settings, request_metrics, make_client
    ):
        app = create_app(
            dev_settings,
            storage=FakeVisitStorage(initial_count=-1),
            request_metrics=request_metrics,
        )
        async with make_client(app) as client:
            response = await client.get("/api/count")

        assert response.status_code == 500
        assert response.json()["error"] == "serialization_error"


class TestMethodNotAllowed:
    """Verbs other than GET and POST."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["PUT", "PATCH", "DELETE", "HEAD"])
    async def test_other_verbs_return_405_without_storage(self, client, fake_storage, method):
        response = await client.request(method, "/api/count")

        assert response.status_code == 405
        assert fake_storage.calls == []
        assert fake_storage.visits == []

    @pytest.mark.asyncio
    async def test_options_without_preflight_headers_is_405(self, client, fake_storage):
        response = await client.options("/api/count")

        assert response.status_code == 405
        assert fake_storage.calls == []


class TestWithSQLiteBackend:
    """End-to-end through the real embedded backend."""

    @pytest.mark.asyncio
    async def test_counts_persist_across_requests(
        self, dev_settings, sqlite_storage, request_metrics, make_client
    ):
        app = create_app(dev_settings, storage=sqlite_storage, request_metrics=request_metrics)
        async with make_client(app) as client:
            assert (await client.get("/api/count")).json() == {"visits": 0}
            for _ in range(3):
                assert (await client.post("/api/count")).status_code == 200
            assert (await client.get("/api/count")).json() == {"visits": 3}

        assert await sqlite_storage.get_visit_count() == 3
