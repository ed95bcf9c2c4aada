"""Core routes: health, metrics.

Auth per-endpoint:
- /api/v1/health: public, rate limited
- /metrics: Bearer token (METRICS_BEARER_TOKEN), open when unset
"""

import secrets
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from clubber.config import get_settings
from clubber.database import check_database
from clubber.dependencies import get_notification_hub
from clubber.notifications import NotificationHub
from clubber.security import limiter
from clubber.telemetry import get_metrics_text

router = APIRouter(tags=["core"])


@router.get("/api/v1/health")
@limiter.limit("120/minute")
async def health_check(
    request: Request,
    hub: NotificationHub = Depends(get_notification_hub),
):
    """Health check endpoint for monitoring."""
    if await check_database():
        return {"status": "Healthy", "db": "Connected", "sseConnections": hub.connection_count}
    return JSONResponse(
        status_code=503,
        content={"status": "Unhealthy", "db": "Disconnected", "sseConnections": hub.connection_count},
    )


def metrics_auth_error(authorization: Optional[str], expected_token: str) -> Optional[str]:
    """Reason the scrape is refused, or None when allowed (no token configured = open)."""
    if not expected_token:
        return None
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token:
        return "missing or malformed bearer token"
    if not secrets.compare_digest(token, expected_token):
        return "invalid token"
    return None


@router.get("/metrics")
async def prometheus_metrics(authorization: Optional[str] = Header(default=None)):
    """Prometheus scrape endpoint."""
    refused = metrics_auth_error(authorization, get_settings().METRICS_BEARER_TOKEN)
    if refused:
        return PlainTextResponse(f"# Unauthorized: {refused}\n", status_code=401)

    content, content_type = get_metrics_text()
    return PlainTextResponse(content, media_type=content_type)
