# ─────────────────────────────────────────────────────────────────────────────
# Client Info Service — identity → (maybe) geolocation → response
# ─────────────────────────────────────────────────────────────────────────────
# Per-request and stateless. Localhost callers never trigger an outbound call;
# any lookup failure collapses to the all-"N/A" LocationInfo, so the endpoint
# answers 200 whether or not the provider is up.
# ─────────────────────────────────────────────────────────────────────────────

from __future__ import annotations

from typing import Any

import structlog
from starlette.requests import Request

from clientinfo import metrics
from clientinfo.geolocation import GeoLookup, GeolocationClient
from clientinfo.identity import LOCALHOST, resolve_identity
from clientinfo.schemas import (
    LOCATION_FIELDS,
    NOT_AVAILABLE,
    ClientIdentity,
    ClientInfoResponse,
    LocationInfo,
)

logger = structlog.get_logger(__name__)


def _present(value: Any) -> bool:
    # 0.0 is a real coordinate; only absent, null and blank count as missing.
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


def location_from_payload(payload: dict[str, Any]) -> LocationInfo:
    """Map an upstream payload onto LocationInfo, "N/A" for each missing field."""
    values: dict[str, Any] = {}
    for name in LOCATION_FIELDS:
        value = payload.get(name)
        if not _present(value) or isinstance(value, (bool, dict, list)):
            values[name] = NOT_AVAILABLE
        elif name in ("latitude", "longitude"):
            values[name] = value
        else:
            values[name] = str(value)
    return LocationInfo(**values)


def location_from_lookup(lookup: GeoLookup) -> LocationInfo:
    """Failed lookups degrade to the not-applicable record, never an error."""
    if not lookup.ok:
        return LocationInfo.not_applicable()
    return location_from_payload(lookup.payload)


class ClientInfoService:
    """Builds the /api/client-info response for one request."""

    def __init__(self, geolocation: GeolocationClient, *, trust_proxy_headers: bool = True) -> None:
        self._geolocation = geolocation
        self._trust_proxy_headers = trust_proxy_headers

    async def locate(self, identity: ClientIdentity) -> LocationInfo:
        if identity.ip == LOCALHOST:
            metrics.geolocation_lookups_total.labels(outcome="skipped").inc()
            return LocationInfo.not_applicable()

        lookup = await self._geolocation.lookup(identity.ip)
        metrics.geolocation_lookups_total.labels(
            outcome="success" if lookup.ok else "failure"
        ).inc()
        return location_from_lookup(lookup)

    async def describe(self, request: Request) -> ClientInfoResponse:
        identity = resolve_identity(request, trust_proxy_headers=self._trust_proxy_headers)
        location = await self.locate(identity)
        metrics.client_info_requests_total.inc()
        logger.debug(
            "client_info_resolved",
            ip=identity.ip,
            located=location != LocationInfo.not_applicable(),
        )
        return ClientInfoResponse(
            ip=identity.ip,
            user_agent=identity.user_agent,
            location_data=location,
        )
