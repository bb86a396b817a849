# ─────────────────────────────────────────────────────────────────────────────
# Rate Limiter — per-app slowapi instance + standard RateLimit-* headers
# ─────────────────────────────────────────────────────────────────────────────
# create_app() builds one limiter per application and stores it on
# app.state.limiter; the rate-limited routes are registered on that instance.
#
# Counters live in limits' in-memory storage: per process, lost on restart,
# not shared between replicas or between app instances. The lifespan resets
# them on shutdown.
# ─────────────────────────────────────────────────────────────────────────────

import math
import time

import structlog
from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

logger = structlog.get_logger(__name__)

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."


def build_limiter() -> Limiter:
    """Fresh limiter with its own in-memory storage.

    Keyed by the socket peer. Behind a proxy listed in FORWARDED_ALLOW_IPS,
    uvicorn has already rewritten it from X-Forwarded-For. slowapi's own
    header injection emits the legacy X-RateLimit-* variant, so it stays off
    and rate_limit_headers() writes the standard ones.
    """
    return Limiter(
        key_func=get_remote_address,
        strategy="fixed-window",
        storage_uri="memory://",
        headers_enabled=False,
    )


def rate_limit_headers(request: Request, *, rejected: bool = False) -> dict[str, str]:
    """Standard RateLimit-* headers for the limit evaluated on this request.

    Empty when no limit was evaluated (unlimited route, limiter disabled).
    Rejections also carry Retry-After.
    """
    current = getattr(request.state, "view_rate_limit", None)
    if current is None:
        return {}

    item, args = current
    app_limiter: Limiter = request.app.state.limiter
    try:
        reset_at, remaining = app_limiter.limiter.get_window_stats(item, *args)
    except Exception:
        logger.exception("rate_limit_window_stats_failed")
        return {}

    reset_in = max(0, math.ceil(reset_at - time.time()))
    headers = {
        "RateLimit-Policy": f"{item.amount};w={item.get_expiry()}",
        "RateLimit-Limit": str(item.amount),
        "RateLimit-Remaining": str(max(0, remaining)),
        "RateLimit-Reset": str(reset_in),
    }
    if rejected:
        headers["Retry-After"] = str(reset_in)
    return headers
