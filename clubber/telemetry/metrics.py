"""
Prometheus metrics for the match API and the live-event stream.

Design principles:
- Low cardinality (controlled labels)
- Best-effort (never block main flow)

ALLOWED LABELS (bounded sets):
- endpoint: "matches", "live", "playlist"
- reason:   "sink_closed", "slow_consumer", "write_error"
- outcome:  "delivered", "empty"

FORBIDDEN AS LABELS: connection ids, match ids, usernames, search terms.
Use logs for those.
"""

import logging

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

logger = logging.getLogger(__name__)

# =============================================================================
# SSE METRICS
# =============================================================================

clubber_sse_connections_active = Gauge(
    "clubber_sse_connections_active",
    "Currently registered SSE connections",
)

clubber_sse_broadcasts_total = Counter(
    "clubber_sse_broadcasts_total",
    "Broadcast sweeps performed by the notification hub",
    ["outcome"],
)

clubber_sse_dropped_connections_total = Counter(
    "clubber_sse_dropped_connections_total",
    "Connections removed because a write to their sink failed",
    ["reason"],
)

# =============================================================================
# SEARCH METRICS
# =============================================================================

clubber_search_requests_total = Counter(
    "clubber_search_requests_total",
    "Paginated search requests served",
    ["endpoint"],
)

clubber_search_results = Histogram(
    "clubber_search_results",
    "Items returned per page",
    ["endpoint"],
    buckets=[0, 1, 5, 10, 20, 50, 100],
)


def set_sse_connections(count: int) -> None:
    """Set the active SSE connection gauge."""
    try:
        clubber_sse_connections_active.set(count)
    except Exception as e:
        logger.warning(f"Failed to set SSE connection gauge: {e}")


def record_broadcast(delivered: int, dropped_reasons: list[str]) -> None:
    """Record one broadcast sweep and the connections it dropped."""
    try:
        outcome = "delivered" if delivered else "empty"
        clubber_sse_broadcasts_total.labels(outcome=outcome).inc()
        for reason in dropped_reasons:
            clubber_sse_dropped_connections_total.labels(reason=reason).inc()
    except Exception as e:
        logger.warning(f"Failed to record broadcast metric: {e}")


def record_search(endpoint: str, returned: int) -> None:
    """Record a served page of search results."""
    try:
        clubber_search_requests_total.labels(endpoint=endpoint).inc()
        clubber_search_results.labels(endpoint=endpoint).observe(returned)
    except Exception as e:
        logger.warning(f"Failed to record search metric: {e}")


def get_metrics_text() -> tuple[str, str]:
    """
    Generate Prometheus metrics text output.

    Returns:
        Tuple of (content, content_type)
    """
    return generate_latest(REGISTRY).decode("utf-8"), CONTENT_TYPE_LATEST
