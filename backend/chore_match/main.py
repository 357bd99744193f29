"""Chore Match API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map ChoreMatchError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Marketplace initialized on startup via lifespan context manager

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Static client mounted last and only if the directory exists, so /api/* takes precedence
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from chore_match.api.error_handlers import register_error_handlers
from chore_match.api.routes import accounts, chores, health
from chore_match.config import get_settings
from chore_match.infrastructure.observability import setup_logging
from chore_match.services.marketplace import init_marketplace

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    init_marketplace(settings)
    logger.info(
        f"Chore Match API started (radius {settings.proximity_radius_km} km, "
        f"session ttl {settings.session_ttl_seconds or 'none'})",
    )
    yield
    logger.info("Chore Match API shutting down; in-memory state discarded")


app = FastAPI(
    title="Chore Match API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(accounts.router)
app.include_router(chores.router)

register_error_handlers(app)

# Browser client: html=True serves index.html at /
if os.path.isdir(settings.static_dir):
    app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")
