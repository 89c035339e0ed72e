"""Prometheus metrics export."""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Request metrics
request_count = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

request_duration = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
)

# MCP gateway metrics
mcp_requests_total = Counter(
    "mcp_requests_total",
    "Total MCP gateway requests",
    ["method", "service_type", "outcome"],  # outcome: ok | token_required | error
)

credential_resolutions_total = Counter(
    "credential_resolutions_total",
    "Credential resolutions by source",
    ["source"],  # source: app | owner | missing
)

upstream_calls_total = Counter(
    "upstream_calls_total",
    "Total calls to external service APIs",
    ["operation", "status"],
)

upstream_call_duration = Histogram(
    "upstream_call_duration_seconds",
    "External service API call duration in seconds",
    ["operation"],
)

# Connection tests
connection_tests_total = Counter(
    "connection_tests_total",
    "Total connection tests",
    ["connection_type", "status"],
)


def get_metrics_response() -> Response:
    """Get Prometheus metrics as HTTP response."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )
