# ─────────────────────────────────────────────────────────────────────────────
# Pydantic v2 Response Schemas
# ─────────────────────────────────────────────────────────────────────────────
# Wire keys are camelCase (userAgent, locationData) to match the frontend;
# Python attributes stay snake_case via the alias generator.
# ─────────────────────────────────────────────────────────────────────────────


from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

NOT_AVAILABLE = "N/A"

LOCATION_FIELDS: tuple[str, ...] = ("city", "region", "country", "latitude", "longitude")

Coordinate = float | int | str


class ClientIdentity(BaseModel):
    """Who is calling: resolved IP (loopback collapsed to "localhost") and user agent."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    ip: str
    user_agent: str


class LocationInfo(BaseModel):
    """Coarse geolocation. Every field falls back to "N/A", never null."""

    city: str = NOT_AVAILABLE
    region: str = NOT_AVAILABLE
    country: str = NOT_AVAILABLE
    latitude: Coordinate = NOT_AVAILABLE
    longitude: Coordinate = NOT_AVAILABLE

    @classmethod
    def not_applicable(cls) -> "LocationInfo":
        """The record used for localhost callers and failed lookups."""
        return cls()


class ClientInfoResponse(BaseModel):
    """GET /api/client-info payload."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    ip: str = Field(..., description="Caller IP, or 'localhost' for loopback callers")
    user_agent: str = Field(..., description="Raw User-Agent header, 'Unknown' when absent")
    location_data: LocationInfo = Field(default_factory=LocationInfo)


class HealthResponse(BaseModel):
    """Liveness probe. Near-zero cost, no dependencies."""

    status: str = "ok"
    timestamp: datetime
