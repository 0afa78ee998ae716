"""Likes API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map LikesError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Lifespan owns every process-wide resource: DB pool, push client,
      realtime hub, notification dispatcher; shutdown releases them in
      reverse order after draining queued notifications

Design Decisions:
    - Lifespan over @app.on_event
    - Push client and dispatcher live on app.state and are injected per request,
      never imported as module globals
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.error_handlers import register_error_handlers
from app.api.routes import health, likes, realtime
from app.config import get_settings
from app.infrastructure.database import close_db, init_db
from app.infrastructure.observability import setup_logging
from app.infrastructure.push_gateway import NotificationService
from app.infrastructure.realtime import RealtimeHub
from app.services.notification_dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )

    push = NotificationService(
        settings.push_gateway_url,
        token=settings.push_gateway_token,
        timeout_seconds=settings.push_timeout_seconds,
    )
    await push.start()
    hub = RealtimeHub()
    dispatcher = NotificationDispatcher(
        push, hub,
        queue_size=settings.dispatch_queue_size,
        workers=settings.dispatch_workers,
        timeout_seconds=settings.dispatch_timeout_seconds,
        channel_id=settings.push_channel_id,
    )
    dispatcher.start()
    app.state.realtime = hub
    app.state.dispatcher = dispatcher
    logger.info("Likes API started")

    yield

    logger.info("Likes API shutting down")
    await dispatcher.stop(settings.dispatch_shutdown_grace_seconds)
    await hub.close_all()
    await push.close()
    await close_db()


app = FastAPI(
    title="Likes API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(likes.router)
app.include_router(realtime.router)

register_error_handlers(app)
