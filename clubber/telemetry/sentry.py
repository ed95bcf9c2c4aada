"""
Sentry error reporting.

Only unhandled API errors and ERROR-level log records are reported.
Credentials never leave the process: auth headers, token-like query
parameters and request bodies are redacted in `before_send`.
"""

import logging
import re
from typing import Optional

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from clubber.config import Settings, get_settings

logger = logging.getLogger(__name__)

REDACTED = "[REDACTED]"

_REDACTED_HEADERS = frozenset({"authorization", "x-api-key", "cookie", "set-cookie"})
_TOKEN_PARAM = re.compile(r"(?i)\b(token|access_token|api_key|password)=[^&]*")

_active = False


def _redact_request(request: dict) -> dict:
    headers = request.get("headers")
    if isinstance(headers, dict):
        request["headers"] = {
            name: REDACTED if name.lower() in _REDACTED_HEADERS else value
            for name, value in headers.items()
        }

    query = request.get("query_string")
    if isinstance(query, str):
        request["query_string"] = _TOKEN_PARAM.sub(lambda m: f"{m.group(1)}={REDACTED}", query)

    # Login/register bodies carry passwords
    request.pop("data", None)
    return request


def before_send(event: dict, hint: dict) -> Optional[dict]:
    """Strip credentials from an outgoing Sentry event."""
    if isinstance(event.get("request"), dict):
        event["request"] = _redact_request(event["request"])
    return event


def init_sentry(settings: Optional[Settings] = None) -> bool:
    """Start the Sentry SDK when SENTRY_DSN is set. Returns whether reporting is on."""
    global _active

    cfg = settings or get_settings()
    if not cfg.SENTRY_ENABLED or not cfg.SENTRY_DSN:
        logger.info("Sentry reporting off")
        return False

    sentry_sdk.init(
        dsn=cfg.SENTRY_DSN,
        environment=cfg.ENVIRONMENT,
        traces_sample_rate=cfg.SENTRY_TRACES_SAMPLE_RATE,
        send_default_pii=False,
        before_send=before_send,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
            LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
        ],
    )
    _active = True
    logger.info(f"Sentry reporting on (env={cfg.ENVIRONMENT}, traces={cfg.SENTRY_TRACES_SAMPLE_RATE})")
    return True


def capture_exception(exc: BaseException) -> None:
    """Report `exc` if Sentry is running."""
    if _active:
        sentry_sdk.capture_exception(exc)
