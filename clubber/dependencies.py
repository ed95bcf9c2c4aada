"""FastAPI dependency providers for process-wide components and services."""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from clubber.config import get_settings
from clubber.database import get_async_session
from clubber.notifications import NotificationHub
from clubber.services.auth_service import AuthService
from clubber.services.match_service import MatchService
from clubber.services.playlist_service import PlaylistService
from clubber.services.stream_urls import StreamUrlService


def get_notification_hub(request: Request) -> NotificationHub:
    """The hub built by the application lifespan."""
    return request.app.state.notification_hub


def get_stream_url_service() -> StreamUrlService:
    return StreamUrlService(get_settings())


def get_match_service(
    session: AsyncSession = Depends(get_async_session),
    hub: NotificationHub = Depends(get_notification_hub),
    stream_urls: StreamUrlService = Depends(get_stream_url_service),
) -> MatchService:
    return MatchService(session, hub, stream_urls)


def get_playlist_service(
    session: AsyncSession = Depends(get_async_session),
    stream_urls: StreamUrlService = Depends(get_stream_url_service),
) -> PlaylistService:
    return PlaylistService(session, stream_urls)


def get_auth_service(session: AsyncSession = Depends(get_async_session)) -> AuthService:
    return AuthService(session)
