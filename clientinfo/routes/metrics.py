# ─────────────────────────────────────────────────────────────────────────────
# Prometheus Metrics Endpoint — text exposition format
# ─────────────────────────────────────────────────────────────────────────────
# GET /_metrics → text/plain Prometheus format from clientinfo.metrics.registry
# ─────────────────────────────────────────────────────────────────────────────

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from clientinfo.metrics import registry

router = APIRouter()


@router.get("/_metrics")
async def prometheus_metrics() -> Response:
    """Prometheus text exposition format metrics endpoint."""
    return Response(content=generate_latest(registry), media_type=CONTENT_TYPE_LATEST)
