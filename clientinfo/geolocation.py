# Outbound IP geolocation lookup (ipapi.co JSON API) over a shared httpx.AsyncClient.
# One GET per lookup, no retries, no caching. Failures come back as a failed
# GeoLookup instead of an exception so callers can degrade to "N/A".

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

import httpx
import structlog

from clientinfo.exceptions import GeolocationLookupError

logger = structlog.get_logger(__name__)

DEFAULT_PROVIDER_URL = "https://ipapi.co"


@dataclass(frozen=True)
class GeoLookup:
    """Outcome of one lookup: the raw upstream payload, or why there is none."""

    payload: dict[str, Any] = field(default_factory=dict)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, payload: dict[str, Any]) -> GeoLookup:
        return cls(payload=payload)

    @classmethod
    def failure(cls, reason: str) -> GeoLookup:
        return cls(error=reason)


class GeolocationClient:
    """Thin async client for the geolocation provider.

    The timeout defaults to None, meaning no explicit limit: a slow provider
    holds the calling request open. Set GEO_TIMEOUT_SECONDS to bound it.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_PROVIDER_URL,
        timeout_seconds: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout_seconds),
            headers={"Accept": "application/json"},
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def lookup_url(self, ip: str) -> str:
        """https://<provider>/<ip>/json/ (colons kept for IPv6)."""
        return f"{self._base_url}/{quote(ip, safe=':')}/json/"

    async def lookup(self, ip: str) -> GeoLookup:
        """Look up ip. Never raises for provider, network, or payload problems."""
        url = self.lookup_url(ip)
        try:
            response = await self._client.get(url)
            response.raise_for_status()
            payload = response.json()
            if not isinstance(payload, dict):
                raise GeolocationLookupError(
                    ip, f"expected a JSON object, got {type(payload).__name__}"
                )
            # ipapi.co reports quota and reserved-range problems in the body, sometimes with 200.
            if payload.get("error"):
                raise GeolocationLookupError(
                    ip, str(payload.get("reason") or "provider reported an error")
                )
        except (httpx.HTTPError, httpx.InvalidURL, ValueError, GeolocationLookupError) as exc:
            reason = str(exc) or type(exc).__name__
            logger.warning(
                "geolocation_lookup_failed",
                ip=ip,
                url=url,
                error=reason,
                error_type=type(exc).__name__,
            )
            return GeoLookup.failure(reason)

        logger.debug("geolocation_lookup_succeeded", ip=ip, fields=sorted(payload))
        return GeoLookup.success(payload)

    async def aclose(self) -> None:
        """Close the underlying connection pool if this client created it."""
        if self._owns_client:
            await self._client.aclose()
