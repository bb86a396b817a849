# ─────────────────────────────────────────────────────────────────────────────
# GET /api/client-info — caller IP, user agent, coarse location (THIN)
# ─────────────────────────────────────────────────────────────────────────────
# The router is built per application: slowapi registers a decorated route on
# the limiter instance, and each app owns its limiter and its limit string.
# ─────────────────────────────────────────────────────────────────────────────


from fastapi import APIRouter, Depends, Request, Response
from slowapi import Limiter

from clientinfo.dependencies import get_client_info_service
from clientinfo.rate_limit import rate_limit_headers
from clientinfo.schemas import ClientInfoResponse
from clientinfo.services.client_info import ClientInfoService


def build_router(limiter: Limiter, rate_limit: str) -> APIRouter:
    """Router for /api/client-info, limited to `rate_limit` per source IP."""
    router = APIRouter()

    @router.get("/api/client-info", response_model=ClientInfoResponse)
    @limiter.limit(rate_limit)
    async def client_info(
        request: Request,
        response: Response,
        service: ClientInfoService = Depends(get_client_info_service),
    ) -> ClientInfoResponse:
        """Who is calling and roughly where from.

        Always 200 once past the rate limit: a failed geolocation lookup shows
        up as "N/A" fields, not as an error status. Logic is in the service.
        """
        response.headers.update(rate_limit_headers(request))
        return await service.describe(request)

    return router
