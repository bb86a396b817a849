# ─────────────────────────────────────────────────────────────────────────────
# Dependency Injection — FastAPI Depends() providers
# ─────────────────────────────────────────────────────────────────────────────
# State flows: lifespan creates → app.state stores → Depends() injects.
# No global variables. Every dependency is explicit in endpoint signatures.
# ─────────────────────────────────────────────────────────────────────────────


from fastapi import Request

from clientinfo.services.client_info import ClientInfoService


def get_client_info_service(request: Request) -> ClientInfoService:
    """Inject ClientInfoService into endpoints via Depends()."""
    return request.app.state.client_info_service  # type: ignore[no-any-return]
