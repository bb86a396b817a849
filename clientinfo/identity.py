"""Client identity resolution: who is calling, as far as the request can tell.

The IP comes from the best available signal. Forwarding headers set by proxies
and CDNs are checked in a fixed precedence order, then the socket peer address.
Header values are only trusted when they parse as an IP address.
"""

from __future__ import annotations

import ipaddress
from collections.abc import Mapping

from starlette.requests import Request

from clientinfo.schemas import ClientIdentity

LOCALHOST = "localhost"
UNKNOWN_USER_AGENT = "Unknown"
UNKNOWN_IP = "unknown"

LOOPBACK_ADDRESSES: frozenset[str] = frozenset({"::1", "127.0.0.1"})

# Checked in order; the first header yielding a valid address wins.
# Comma-separated headers (X-Forwarded-For style) contribute their first valid entry.
CLIENT_IP_HEADERS: tuple[str, ...] = (
    "x-client-ip",
    "x-forwarded-for",
    "cf-connecting-ip",
    "do-connecting-ip",
    "fastly-client-ip",
    "true-client-ip",
    "x-real-ip",
    "x-cluster-client-ip",
    "x-forwarded",
    "forwarded-for",
    "x-appengine-user-ip",
)


def normalize_ip(ip: str) -> str:
    """Collapse the loopback addresses to the "localhost" sentinel."""
    if ip in LOOPBACK_ADDRESSES:
        return LOCALHOST
    return ip


def _clean_candidate(value: str) -> str | None:
    """Return value as an IP string if it is one, else None.

    Accepts "1.2.3.4:5678" (IPv4 with port), which some proxies send.
    """
    candidate = value.strip()
    if not candidate:
        return None
    if candidate.count(":") == 1:
        host, _, port = candidate.partition(":")
        if port.isdigit():
            candidate = host
    try:
        ipaddress.ip_address(candidate)
    except ValueError:
        return None
    return candidate


def ip_from_headers(headers: Mapping[str, str]) -> str | None:
    """First valid client IP advertised by a forwarding header, or None."""
    for name in CLIENT_IP_HEADERS:
        raw = headers.get(name)
        if not raw:
            continue
        for part in raw.split(","):
            ip = _clean_candidate(part)
            if ip:
                return ip
    return None


def resolve_client_ip(request: Request, *, trust_proxy_headers: bool = True) -> str:
    """Best-effort caller IP, before loopback normalization. Never raises."""
    if trust_proxy_headers:
        forwarded = ip_from_headers(request.headers)
        if forwarded:
            return forwarded

    if request.client and request.client.host:
        return request.client.host

    return UNKNOWN_IP


def resolve_identity(request: Request, *, trust_proxy_headers: bool = True) -> ClientIdentity:
    """Build the ClientIdentity for a request."""
    ip = normalize_ip(resolve_client_ip(request, trust_proxy_headers=trust_proxy_headers))
    user_agent = request.headers.get("user-agent") or UNKNOWN_USER_AGENT
    return ClientIdentity(ip=ip, user_agent=user_agent)
