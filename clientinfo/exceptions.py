# ─────────────────────────────────────────────────────────────────────────────
# Custom Exceptions + FastAPI Exception Handlers
# ─────────────────────────────────────────────────────────────────────────────


import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from slowapi.errors import RateLimitExceeded

from clientinfo import metrics
from clientinfo.middleware import SECURITY_HEADERS
from clientinfo.rate_limit import RATE_LIMIT_MESSAGE, rate_limit_headers

logger = structlog.get_logger(__name__)


# ── Exception hierarchy ──────────────────────────────────────────────────────


class ClientInfoError(Exception):
    """Base exception for all client-info server errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class GeolocationLookupError(ClientInfoError):
    """The geolocation provider answered, but not with usable data.

    Never leaves GeolocationClient: it is converted into a failed lookup there.
    """

    def __init__(self, ip: str, reason: str) -> None:
        self.ip = ip
        self.reason = reason
        super().__init__(f"Geolocation lookup failed for '{ip}': {reason}")


# ── Handler registration ────────────────────────────────────────────────────


def register_exception_handlers(app: FastAPI) -> None:
    """Register all custom exception handlers on the FastAPI app."""

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_exceeded_handler(
        request: Request, exc: RateLimitExceeded
    ) -> PlainTextResponse:
        """429 with the fixed message and standard RateLimit-* headers.

        Expected traffic shaping, not a server fault: logged at info.
        """
        metrics.rate_limit_rejections_total.inc()
        headers = rate_limit_headers(request, rejected=True)
        logger.info(
            "rate_limit_exceeded",
            path=request.url.path,
            method=request.method,
            limit=str(exc.detail),
            retry_after=headers.get("Retry-After"),
        )
        return PlainTextResponse(RATE_LIMIT_MESSAGE, status_code=429, headers=headers)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all 500.

        Starlette runs this handler in ServerErrorMiddleware, outside the user
        middleware stack, so the security headers are added here.
        """
        logger.error("unhandled_error", error=str(exc), path=request.url.path, exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "type": "UnhandledError"},
            headers=SECURITY_HEADERS,
        )
