# ─────────────────────────────────────────────────────────────────────────────
# Test Fixtures — shared across all tests
# ─────────────────────────────────────────────────────────────────────────────

from collections.abc import Iterator

import httpx
import pytest
import respx
from fastapi.testclient import TestClient

from clientinfo.config import Settings, get_settings
from clientinfo.main import create_app

GEO_PROVIDER = "https://geo.test"

FULL_PAYLOAD = {
    "ip": "203.0.113.7",
    "city": "Lisbon",
    "region": "Lisbon",
    "country": "PT",
    "latitude": 38.7223,
    "longitude": -9.1393,
    "timezone": "Europe/Lisbon",
}


@pytest.fixture
def test_settings() -> Settings:
    """Settings configured for testing: fake provider, console logs."""
    return Settings(
        geo_provider_url=GEO_PROVIDER,
        log_json=False,
        log_level="DEBUG",
    )


@pytest.fixture
def geo_api() -> Iterator[respx.MockRouter]:
    """respx router for the geolocation provider.

    Unmatched outbound calls fail the test, so a lookup that should have
    been skipped shows up loudly.
    """
    with respx.mock(base_url=GEO_PROVIDER, assert_all_called=False) as router:
        yield router


@pytest.fixture
def client(test_settings: Settings, geo_api: respx.MockRouter) -> Iterator[TestClient]:
    """TestClient with the lifespan running (outbound client created and closed).

    Each app owns its limiter, so every test starts with empty windows.

    Requests come from the socket peer "testclient"; tests pick the caller IP
    with X-Forwarded-For.
    """
    get_settings.cache_clear()
    app = create_app(test_settings)
    with TestClient(app) as test_client:
        yield test_client
    get_settings.cache_clear()


def mock_lookup(geo_api: respx.MockRouter, ip: str, **kwargs: object) -> respx.Route:
    """Route GET /<ip>/json/ on the fake provider to the given response."""
    return geo_api.get(f"/{ip}/json/").mock(**kwargs)


def ok_json(payload: object) -> httpx.Response:
    return httpx.Response(200, json=payload)
