from __future__ import annotations

from dataclasses import dataclass, field

import httpx
import pytest

from src.adapters.api.dependencies import get_feed_config, get_feed_store
from src.adapters.persistence.redis_feed_store import RedisFeedStore
from src.app.config import FeedConfig
from src.domain.exceptions import FeedStoreError
from src.main import app


@dataclass(slots=True)
class _FakeFeedStore:
    values: dict[str, bytes] = field(default_factory=dict)

    def set(self, key: str, value: bytes | str) -> None:
        raise AssertionError("Read API must not write")

    def get(self, key: str) -> bytes | None:
        return self.values.get(key)


class _BrokenFeedStore:
    def set(self, key: str, value: bytes | str) -> None:
        raise AssertionError("Read API must not write")

    def get(self, key: str) -> bytes | None:
        raise FeedStoreError("redis down")


def _override(store) -> None:
    app.dependency_overrides[get_feed_store] = lambda: store
    app.dependency_overrides[get_feed_config] = lambda: FeedConfig(feed_id="f-test~rt")


@pytest.mark.unit
@pytest.mark.anyio
async def test_get_vehicle_feed_returns_protobuf_bytes() -> None:
    _override(_FakeFeedStore(values={"gtfsrt|f-test~rt|vehicles": b"\x0a\x05hello"}))

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.get("/gtfs-rt/vehicles")

    app.dependency_overrides.clear()

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/x-protobuf"
    assert resp.content == b"\x0a\x05hello"


@pytest.mark.unit
@pytest.mark.anyio
async def test_missing_feed_is_404() -> None:
    _override(_FakeFeedStore())

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.get("/gtfs-rt/trips")
        unknown = await client.get("/gtfs-rt/alerts")

    app.dependency_overrides.clear()

    assert resp.status_code == 404
    assert unknown.status_code == 422


@pytest.mark.unit
@pytest.mark.anyio
async def test_status_reports_freshness_markers() -> None:
    _override(
        _FakeFeedStore(
            values={
                "gtfsrttime|f-test~rt|vehicles": b"1767891600123",
                "gtfsrttime|f-test~rt|trips": b"1767891600124",
            }
        )
    )

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.get("/gtfs-rt/status")

    app.dependency_overrides.clear()

    assert resp.status_code == 200
    assert resp.json() == {
        "feed_id": "f-test~rt",
        "vehicles_updated_at_ms": 1767891600123,
        "trips_updated_at_ms": 1767891600124,
        "heartbeat_at_ms": None,
    }


@pytest.mark.unit
@pytest.mark.anyio
async def test_store_errors_are_json_500() -> None:
    _override(_BrokenFeedStore())

    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.get("/gtfs-rt/vehicles")

    app.dependency_overrides.clear()

    assert resp.status_code == 500
    assert resp.json() == {"detail": "redis down"}


@pytest.mark.unit
@pytest.mark.anyio
async def test_health() -> None:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        resp = await client.get("/health")

    assert resp.json() == {"status": "ok"}


@pytest.mark.unit
def test_feed_store_is_built_once_per_process(monkeypatch) -> None:
    monkeypatch.setenv("FEED_STORE", "redis")
    monkeypatch.setenv("REDIS_URL", "redis://127.0.0.1:6379/0")
    get_feed_store.cache_clear()
    try:
        first = get_feed_store()
        assert isinstance(first, RedisFeedStore)
        assert get_feed_store() is first
    finally:
        get_feed_store.cache_clear()
