"""Registration and login (JWT issuance)."""

from fastapi import APIRouter, Depends, Request

from clubber.config import get_settings
from clubber.dependencies import get_auth_service
from clubber.errors import AuthenticationError, ClubberError
from clubber.schemas import AuthResponse, LoginRequest, RegisterRequest
from clubber.security import limiter
from clubber.services.auth_service import AuthService

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])
settings = get_settings()


@router.post("/register", response_model=AuthResponse)
@limiter.limit(settings.RATE_LIMIT_PER_MINUTE)
async def register(
    request: Request,
    data: RegisterRequest,
    service: AuthService = Depends(get_auth_service),
):
    result = await service.register(data)
    if not result.succeeded:
        raise ClubberError(result.message or "Registration failed.", title="Registration failed")
    return result


@router.post("/login", response_model=AuthResponse)
@limiter.limit(settings.RATE_LIMIT_PER_MINUTE)
async def login(
    request: Request,
    data: LoginRequest,
    service: AuthService = Depends(get_auth_service),
):
    result = await service.login(data)
    if not result.succeeded or result.token is None:
        raise AuthenticationError(result.message or "Invalid username or password.", title="Login failed")
    return result
