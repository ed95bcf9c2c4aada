"""Clubber API: match search, playlists, and live match events over SSE."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from clubber.config import get_settings
from clubber.database import AsyncSessionLocal, close_db, init_db
from clubber.errors import register_exception_handlers
from clubber.notifications import NotificationHub
from clubber.routes.auth import router as auth_router
from clubber.routes.core import router as core_router
from clubber.routes.events import router as events_router
from clubber.routes.matches import router as matches_router
from clubber.routes.playlist import router as playlist_router
from clubber.security import limiter
from clubber.seed import seed_sample_matches
from clubber.telemetry.sentry import init_sentry

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

settings = get_settings()
init_sentry(settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: tables, optional seed data, notification hub. Shutdown: close streams, then the engine."""
    logger.info("Starting Clubber API...")
    await init_db()

    if settings.SEED_SAMPLE_MATCHES:
        async with AsyncSessionLocal() as session:
            await seed_sample_matches(session)

    app.state.notification_hub = NotificationHub()
    logger.info("Notification hub ready")

    yield

    logger.info("Shutting down: closing event streams")
    app.state.notification_hub.close()
    await close_db()


app = FastAPI(
    title="Clubber API",
    description="Sports streaming playlist API with live match events",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

register_exception_handlers(app)

app.include_router(core_router)
app.include_router(auth_router)
app.include_router(matches_router)
app.include_router(playlist_router)
app.include_router(events_router)
