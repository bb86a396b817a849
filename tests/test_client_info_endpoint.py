# ─────────────────────────────────────────────────────────────────────────────
# GET /api/client-info — full request flow with a mocked geolocation provider
# ─────────────────────────────────────────────────────────────────────────────
# Outbound calls are intercepted by respx (geo_api fixture); the caller IP is
# chosen per test with X-Forwarded-For.
# ─────────────────────────────────────────────────────────────────────────────

import httpx
import pytest
from conftest import FULL_PAYLOAD, mock_lookup, ok_json
from dirty_equals import IsStr

ALL_NA = {
    "city": "N/A",
    "region": "N/A",
    "country": "N/A",
    "latitude": "N/A",
    "longitude": "N/A",
}

CALLER = "203.0.113.7"


def _get(client, ip: str | None = CALLER, **headers: str) -> httpx.Response:
    if ip is not None:
        headers["X-Forwarded-For"] = ip
    return client.get("/api/client-info", headers=headers)


class TestLocalhostCallers:
    """Loopback callers are reported as "localhost" and never looked up."""

    @pytest.mark.parametrize("loopback", ["127.0.0.1", "::1"])
    def test_reported_as_localhost(self, client, geo_api, loopback):
        response = _get(client, loopback, **{"User-Agent": "curl/8.5.0"})

        assert response.status_code == 200
        assert response.json() == {
            "ip": "localhost",
            "userAgent": "curl/8.5.0",
            "locationData": ALL_NA,
        }
        assert not geo_api.calls


class TestSuccessfulLookup:
    def test_fields_come_from_provider(self, client, geo_api):
        route = mock_lookup(geo_api, CALLER, return_value=ok_json(FULL_PAYLOAD))

        response = _get(client)

        assert response.status_code == 200
        assert response.json() == {
            "ip": CALLER,
            "userAgent": IsStr,
            "locationData": {
                "city": "Lisbon",
                "region": "Lisbon",
                "country": "PT",
                "latitude": 38.7223,
                "longitude": -9.1393,
            },
        }
        assert route.call_count == 1

    def test_missing_fields_default_to_na(self, client, geo_api):
        partial = {"city": "Lisbon", "latitude": 38.7223}
        mock_lookup(geo_api, CALLER, return_value=ok_json(partial))

        location = _get(client).json()["locationData"]

        assert location == {
            "city": "Lisbon",
            "region": "N/A",
            "country": "N/A",
            "latitude": 38.7223,
            "longitude": "N/A",
        }

    def test_null_fields_default_to_na(self, client, geo_api):
        mock_lookup(geo_api, CALLER, return_value=ok_json({**FULL_PAYLOAD, "city": None}))

        location = _get(client).json()["locationData"]

        assert location["city"] == "N/A"
        assert location["country"] == "PT"

    def test_ipv6_caller(self, client, geo_api):
        route = mock_lookup(geo_api, "2001:db8::1", return_value=ok_json(FULL_PAYLOAD))

        response = _get(client, "2001:db8::1")

        assert response.json()["ip"] == "2001:db8::1"
        assert route.called


class TestDegradedLookup:
    """Provider trouble never changes the status code, only the location fields."""

    @pytest.mark.parametrize(
        "mock_kwargs",
        [
            {"side_effect": httpx.ConnectError("Connection refused")},
            {"side_effect": httpx.ReadTimeout("timed out")},
            {"return_value": httpx.Response(503, json={"error": "overloaded"})},
            {"return_value": httpx.Response(429, text="Too Many Requests")},
            {"return_value": httpx.Response(200, text="<html>not json</html>")},
            {"return_value": ok_json(["not", "an", "object"])},
            {"return_value": ok_json({"ip": CALLER, "error": True, "reason": "RateLimited"})},
        ],
        ids=["connect", "timeout", "503", "429", "html", "array", "error-payload"],
    )
    def test_failure_yields_na_and_200(self, client, geo_api, mock_kwargs):
        mock_lookup(geo_api, CALLER, **mock_kwargs)

        response = _get(client)

        assert response.status_code == 200
        assert response.json() == {"ip": CALLER, "userAgent": IsStr, "locationData": ALL_NA}


class TestUserAgent:
    def test_missing_user_agent_is_unknown(self, client, geo_api):
        client.headers.pop("user-agent")

        response = _get(client, "127.0.0.1")

        assert response.request.headers.get("user-agent") is None
        assert response.json()["userAgent"] == "Unknown"

    def test_empty_user_agent_is_unknown(self, client, geo_api):
        response = _get(client, "127.0.0.1", **{"User-Agent": ""})
        assert response.json()["userAgent"] == "Unknown"

    def test_full_user_agent_is_echoed(self, client, geo_api):
        ua = (
            "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/126.0.0.0 Safari/537.36"
        )
        response = _get(client, "::1", **{"User-Agent": ua})
        assert response.json()["userAgent"] == ua


class TestResponseHeaders:
    def test_security_headers_present(self, client, geo_api):
        response = _get(client, "127.0.0.1")
        assert response.headers["Content-Security-Policy"].startswith("default-src 'self'")
        assert response.headers["X-Content-Type-Options"] == "nosniff"

    def test_request_id_and_timing(self, client, geo_api):
        response = _get(client, "127.0.0.1")
        assert response.headers["X-Request-ID"] == IsStr(regex=r"[0-9a-f-]{8}")
        assert "X-Response-Time-Ms" in response.headers
