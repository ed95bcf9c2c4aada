"""
Telemetry: Prometheus metrics and Sentry error tracking.
"""

from clubber.telemetry.metrics import (
    clubber_search_requests_total,
    clubber_search_results,
    clubber_sse_broadcasts_total,
    clubber_sse_connections_active,
    clubber_sse_dropped_connections_total,
    get_metrics_text,
    record_broadcast,
    record_search,
    set_sse_connections,
)

__all__ = [
    "clubber_search_requests_total",
    "clubber_search_results",
    "clubber_sse_broadcasts_total",
    "clubber_sse_connections_active",
    "clubber_sse_dropped_connections_total",
    "get_metrics_text",
    "record_broadcast",
    "record_search",
    "set_sse_connections",
]
