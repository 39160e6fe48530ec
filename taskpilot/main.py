"""
Main application entry point - FastAPI app instance and configuration.
This is where the ASGI application is created and configured.
Run with: uvicorn taskpilot.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from taskpilot.core.config import settings
from taskpilot.db.base import Base
from taskpilot.db.session import SessionLocal, engine
from taskpilot.routers import assistant
from taskpilot.services.recurrence import RecurrenceEngine, RecurrenceScheduler
import taskpilot.models  # noqa: F401

# ---------------------------------------------------------------------------
# LOGGING
# ---------------------------------------------------------------------------
# The taskpilot.ai logger has its own stdout handler (see ai/monitoring);
# everything else under taskpilot.* uses the root configuration.
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="[%(asctime)s] %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("taskpilot")


# ---------------------------------------------------------------------------
# LIFESPAN
# ---------------------------------------------------------------------------
# - Tables are created when missing (Alembic manages them in production)
# - The recurrence scheduler runs for as long as the app does
@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)

    scheduler = None
    if settings.RECURRENCE_ENABLED:
        scheduler = RecurrenceScheduler(
            RecurrenceEngine(SessionLocal),
            interval_seconds=settings.RECURRENCE_INTERVAL_SECONDS,
        )
        scheduler.start()
    app.state.recurrence_scheduler = scheduler

    logger.info(f"{settings.APP_NAME} started")
    try:
        yield
    finally:
        if scheduler is not None:
            await scheduler.stop()
        logger.info(f"{settings.APP_NAME} stopped")


# ---------------------------------------------------------------------------
# CREATE FASTAPI APPLICATION
# ---------------------------------------------------------------------------
app = FastAPI(
    title=settings.APP_NAME,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# REGISTER ROUTERS
# ---------------------------------------------------------------------------
# assistant.router: POST /assistant
app.include_router(assistant.router)


# ---------------------------------------------------------------------------
# HEALTH CHECK ENDPOINT
# ---------------------------------------------------------------------------
@app.get("/health", tags=["health"])
def health_check():
    """
    Simple health check endpoint.

    Does NOT check database connectivity.

    Returns:
        {"status": "ok"}
    """
    return {"status": "ok"}
