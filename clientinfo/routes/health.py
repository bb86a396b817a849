# ─────────────────────────────────────────────────────────────────────────────
# Lifecycle Routes — liveness probe + favicon
# ─────────────────────────────────────────────────────────────────────────────
#   /_health      → Liveness probe. "Is the process alive?" Near-zero cost.
#                   Returns 200 always, never rate limited.
#   /favicon.ico  → 204 so browsers stop logging 404s for it.
# ─────────────────────────────────────────────────────────────────────────────

from datetime import UTC, datetime

from fastapi import APIRouter, Response

from clientinfo.schemas import HealthResponse

router = APIRouter()


@router.get("/_health", response_model=HealthResponse)
async def liveness() -> HealthResponse:
    """Liveness probe: is the process alive?

    Keep it absolutely minimal: no deps, no I/O.
    """
    return HealthResponse(status="ok", timestamp=datetime.now(UTC))


@router.get("/favicon.ico", status_code=204, response_class=Response)
async def favicon() -> Response:
    return Response(status_code=204)
