# ─────────────────────────────────────────────────────────────────────────────
# Service Metrics — prometheus-client counters
# ─────────────────────────────────────────────────────────────────────────────
# Custom registry to avoid default process metrics. Exposed by
# GET /_metrics (routes/metrics.py).
# ─────────────────────────────────────────────────────────────────────────────

from prometheus_client import CollectorRegistry, Counter

registry = CollectorRegistry()

client_info_requests_total = Counter(
    "client_info_requests_total",
    "Requests answered by /api/client-info",
    registry=registry,
)

geolocation_lookups_total = Counter(
    "geolocation_lookups_total",
    "Outbound geolocation lookups by outcome",
    ["outcome"],  # success | failure | skipped
    registry=registry,
)

rate_limit_rejections_total = Counter(
    "rate_limit_rejections_total",
    "Requests rejected by the per-IP rate limit",
    registry=registry,
)
