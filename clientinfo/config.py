# ─────────────────────────────────────────────────────────────────────────────
# Settings — Pydantic v2 BaseSettings
# ─────────────────────────────────────────────────────────────────────────────


from functools import lru_cache
from pathlib import Path

from limits import parse_many
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Packaged frontend, shipped next to the code.
DEFAULT_STATIC_DIR = Path(__file__).resolve().parent / "public"


class Settings(BaseSettings):
    """Server configuration sourced from environment variables.

    Uses pydantic-settings v2 (separate package from pydantic).
    """

    model_config = SettingsConfigDict(env_prefix="", env_file=".env", extra="ignore")

    # ── Server ───────────────────────────────────────────────────────────────
    host: str = "0.0.0.0"
    port: int = 3000
    static_dir: Path = DEFAULT_STATIC_DIR

    # Peers uvicorn trusts to set X-Forwarded-For / X-Forwarded-Proto.
    # Cloud Run and most load balancers need "*" here; uvicorn's default is loopback only.
    forwarded_allow_ips: str = "127.0.0.1"

    # ── Geolocation ──────────────────────────────────────────────────────────
    geo_provider_url: str = "https://ipapi.co"
    # None = no explicit timeout, the lookup waits as long as the transport does.
    geo_timeout_seconds: float | None = None

    # ── Client identity ──────────────────────────────────────────────────────
    # Read X-Forwarded-For and friends before falling back to the socket peer.
    trust_proxy_headers: bool = True

    # ── Rate limiting ────────────────────────────────────────────────────────
    # limits/slowapi format, applied per source IP on /api/client-info only.
    rate_limit: str = "100/15 minutes"

    # ── Logging ──────────────────────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool = True  # JSON logs for Cloud Logging

    @field_validator("rate_limit")
    @classmethod
    def _parseable_rate_limit(cls, value: str) -> str:
        # slowapi only logs an unparseable limit and leaves the route unlimited.
        parse_many(value)
        return value


@lru_cache
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()
