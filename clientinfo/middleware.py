# ─────────────────────────────────────────────────────────────────────────────
# Request Middleware — request ID, timing, structured logging, security headers
# ─────────────────────────────────────────────────────────────────────────────


import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger()

# Content-Security-Policy. Styles and fonts may come from the jsDelivr CDN;
# connect-src also allows the geolocation provider.
CSP_DIRECTIVES: dict[str, tuple[str, ...]] = {
    "default-src": ("'self'",),
    "base-uri": ("'self'",),
    "font-src": ("'self'", "https://cdn.jsdelivr.net"),
    "form-action": ("'self'",),
    "frame-ancestors": ("'self'",),
    "img-src": ("'self'", "data:", "https:"),
    "object-src": ("'none'",),
    "script-src": ("'self'",),
    "script-src-attr": ("'none'",),
    "style-src": ("'self'", "https://cdn.jsdelivr.net"),
    "upgrade-insecure-requests": (),
    "connect-src": ("'self'", "https://cdn.jsdelivr.net", "https://ipapi.co"),
}


def build_csp(directives: dict[str, tuple[str, ...]]) -> str:
    """Serialize directives as 'name source source; name ...'."""
    return ";".join(" ".join((name, *sources)) for name, sources in directives.items())


SECURITY_HEADERS: dict[str, str] = {
    "Content-Security-Policy": build_csp(CSP_DIRECTIVES),
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Origin-Agent-Cluster": "?1",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "X-Content-Type-Options": "nosniff",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Frame-Options": "SAMEORIGIN",
    "X-Permitted-Cross-Domain-Policies": "none",
    "X-XSS-Protection": "0",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Stamps the fixed security header set on every response, static files included."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response: Response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers[name] = value
        return response


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Adds request ID, logs timing, attaches context for structured logging.

    Skips logging for /_health (too noisy from Cloud Run probes).
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = str(uuid.uuid4())[:8]
        request.state.request_id = request_id
        start = time.perf_counter()

        with structlog.contextvars.bound_contextvars(request_id=request_id):
            response: Response = await call_next(request)

        duration_ms = (time.perf_counter() - start) * 1000

        # Don't log health probes (too noisy from Cloud Run)
        if request.url.path != "/_health":
            logger.info(
                "request_completed",
                request_id=request_id,
                method=request.method,
                path=str(request.url.path),
                status=response.status_code,
                duration_ms=round(duration_ms, 1),
            )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time-Ms"] = str(round(duration_ms, 1))
        return response
