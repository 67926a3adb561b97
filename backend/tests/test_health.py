"""
Visit Counter Backend: Probe and Lifecycle Tests
=================================================

What:  Tests for /healthz, /readyz, and the application lifespan.
How:   Probes go through the HTTP client. The lifespan is entered directly
       with `async with lifespan(app)`, since ASGITransport does not run it.
"""

from unittest.mock import AsyncMock, patch

import pytest

from conftest import FakeVisitStorage
from visitcount.config import Settings
from visitcount.exceptions import ConfigurationError, StorageConnectionError
from visitcount.main import create_app, lifespan
from visitcount.storage import SQLiteVisitStorage


class TestProbes:

    @pytest.mark.asyncio
    async def test_healthz_is_plain_ok(self, client, fake_storage):
        response = await client.get("/healthz")

        assert response.status_code == 200
        assert response.text == "ok"
        assert response.headers["content-type"].startswith("text/plain")
        assert fake_storage.calls == []

    @pytest.mark.asyncio
    async def test_readyz_pings_storage(self, client, fake_storage):
        response = await client.get("/readyz")

        assert response.status_code == 200
        assert response.text == "ready"
        assert fake_storage.calls == ["ping"]

    @pytest.mark.asyncio
    async def test_readyz_fails_when_storage_unreachable(self, client, fake_storage):
        fake_storage.fail_with = StorageConnectionError("Database is unreachable", operation="ping")

        response = await client.get("/readyz")

        assert response.status_code == 500
        assert response.text == "storage unavailable"

    @pytest.mark.asyncio
    async def test_healthz_unaffected_by_storage_failure(self, client, fake_storage):
        fake_storage.fail_with = StorageConnectionError("Database is unreachable")

        response = await client.get("/healthz")

        assert response.status_code == 200


class TestLifespan:

    @pytest.fixture(autouse=True)
    def _quiet_logging_setup(self, monkeypatch):
        # setup_logging would replace pytest's capture handlers on the root logger
        monkeypatch.setattr("visitcount.main.setup_logging", lambda log_level: None)

    @pytest.mark.asyncio
    async def test_missing_allow_list_aborts_startup(self, tmp_path):
        settings = Settings(_env_file=None, allowed_origins="", sqlite_path=str(tmp_path / "v.db"))
        app = create_app(settings)

        with patch("visitcount.main.create_storage", AsyncMock()) as mock_create:
            with pytest.raises(ConfigurationError):
                async with lifespan(app):
                    pass

        mock_create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_storage_failure_aborts_startup(self, dev_settings):
        app = create_app(dev_settings)
        failure = StorageConnectionError("Database is unreachable", operation="ping")

        with patch("visitcount.main.create_storage", AsyncMock(side_effect=failure)):
            with pytest.raises(StorageConnectionError):
                async with lifespan(app):
                    pass

    @pytest.mark.asyncio
    async def test_builds_sqlite_storage_and_closes_on_shutdown(self, dev_settings):
        app = create_app(dev_settings)
        closed = []
        real_close = SQLiteVisitStorage.close

        async def spy_close(self):
            closed.append(self)
            await real_close(self)

        with patch.object(SQLiteVisitStorage, "close", spy_close):
            async with lifespan(app):
                storage = app.state.storage
                assert isinstance(storage, SQLiteVisitStorage)
                assert await storage.get_visit_count() == 0
                assert closed == []

        assert closed == [storage]

    @pytest.mark.asyncio
    async def test_injected_storage_is_used_and_closed(self, dev_settings):
        fake = FakeVisitStorage()
        app = create_app(dev_settings, storage=fake)

        with patch("visitcount.main.create_storage", AsyncMock()) as mock_create:
            async with lifespan(app):
                assert app.state.storage is fake

        mock_create.assert_not_awaited()
        assert fake.closed is True
