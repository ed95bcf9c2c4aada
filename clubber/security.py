"""Security: rate limiting, admin API key, and JWT bearer authentication."""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import HTTPException, Security
from fastapi.security import APIKeyHeader, HTTPAuthorizationCredentials, HTTPBearer
from slowapi import Limiter
from slowapi.util import get_remote_address

from clubber.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

JWT_ALGORITHM = "HS256"

# Rate limiter using client IP
limiter = Limiter(key_func=get_remote_address)

# API Key header for admin endpoints
api_key_header = APIKeyHeader(name=settings.API_KEY_HEADER, auto_error=False)

bearer_scheme = HTTPBearer(auto_error=False)


def is_production() -> bool:
    return get_settings().ENVIRONMENT.lower() == "production"


async def verify_api_key(
    api_key: Optional[str] = Security(api_key_header),
) -> bool:
    """
    Verify API key for admin endpoints (match writes, manual broadcasts).

    In production an empty API_KEY blocks all admin requests (fail-closed).
    In development an empty API_KEY allows all requests.
    """
    expected = get_settings().API_KEY
    if not expected:
        if is_production():
            logger.error("API_KEY not configured in production - blocking admin access")
            raise HTTPException(
                status_code=503,
                detail="Service misconfigured. Admin access disabled.",
            )
        return True

    if not api_key:
        raise HTTPException(
            status_code=401,
            detail="Missing API key. Provide it via X-API-Key header.",
        )

    if api_key != expected:
        logger.warning("Invalid API key attempt")
        raise HTTPException(status_code=403, detail="Invalid API key")

    return True


# =============================================================================
# JWT
# =============================================================================


def create_access_token(user_id: uuid.UUID, username: str, now: Optional[datetime] = None) -> str:
    """Issue a signed HS256 token carrying the user id (`sub`) and username."""
    cfg = get_settings()
    issued = now or datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "name": username,
        "iss": cfg.JWT_ISSUER,
        "aud": cfg.JWT_AUDIENCE,
        "iat": issued,
        "exp": issued + timedelta(hours=cfg.JWT_DURATION_HOURS),
    }
    return jwt.encode(payload, cfg.JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Validate signature, issuer, audience and expiry. Raises jwt.InvalidTokenError."""
    cfg = get_settings()
    return jwt.decode(
        token,
        cfg.JWT_SECRET,
        algorithms=[JWT_ALGORITHM],
        audience=cfg.JWT_AUDIENCE,
        issuer=cfg.JWT_ISSUER,
        options={"require": ["exp", "sub"]},
    )


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=401,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
) -> uuid.UUID:
    """FastAPI dependency: the authenticated user's id from the bearer token."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise _unauthorized("Authentication is required to access this resource.")

    try:
        claims = decode_access_token(credentials.credentials)
        return uuid.UUID(claims["sub"])
    except (jwt.InvalidTokenError, ValueError) as e:
        logger.info(f"Rejected bearer token: {type(e).__name__}")
        raise _unauthorized("Invalid or expired token.") from None
