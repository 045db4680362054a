"""Ministry Platform API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map MinistryError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup and disposed on shutdown via lifespan
    - Provider clients (Anthropic, Resend, Twilio) closed on shutdown

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Scheduled jobs (workflows, weekly newsletter) are plain HTTP endpoints
      guarded by CRON_SECRET; an external scheduler calls them (ADR: no in-process scheduler)
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from ministry.api.dependencies import close_clients
from ministry.api.error_handlers import register_error_handlers
from ministry.api.routes import (
    admin_insights, admin_members, ai, email, gamification, health, library,
    live, member_portal, prayer, public, sms, volunteer, workflows,
)
from ministry.config import get_settings
from ministry.infrastructure import database
from ministry.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    database.init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info("Ministry API started")
    yield
    logger.info("Ministry API shutting down")
    await close_clients()
    if database.db_manager is not None:
        await database.db_manager.dispose()


app = FastAPI(
    title="Ministry Platform API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes: explicit registration
app.include_router(health.router)
app.include_router(public.router)
app.include_router(member_portal.router)
app.include_router(gamification.router)
app.include_router(library.router)
app.include_router(prayer.router)
app.include_router(live.router)
app.include_router(ai.router)
app.include_router(admin_members.router)
app.include_router(admin_insights.router)
app.include_router(volunteer.router)
app.include_router(workflows.router)
app.include_router(email.router)
app.include_router(sms.router)

register_error_handlers(app)

# Static files: the frontend build, when present
# Mounted AFTER API routes so /api/v1/* takes precedence
if os.path.isdir("static"):
    app.mount("/", StaticFiles(directory="static", html=True), name="static")
