"""
SchoolHub API - Main Application Entry Point

This module initializes and configures the FastAPI application including:
- Database and Redis connections
- Change-feed handlers (welcome emails, announcement fan-out)
- Background job scheduler
- CORS middleware
- API routing
- Health check endpoints
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from app.api import api_router
from app.core.config import settings
from app.core.database import close_db, init_db
from app.core.events import event_bus
from app.core.redis import close_redis, init_redis
from app.core.scheduler import (
    list_registered_jobs,
    pause_job,
    resume_job,
    start_scheduler,
    stop_scheduler,
    trigger_job_manually,
)
from app.modules.notifications.jobs import register_notification_jobs
from app.modules.notifications.triggers import register_notification_triggers

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """
    Application lifespan manager.

    Handles startup and shutdown events including:
    - Redis connection
    - Database connection
    - Creation handlers on the change feed
    - Background job scheduler
    """
    logger.info(f"Starting SchoolHub API in {settings.python_env} mode...")

    # Redis is optional outside production; rate limits and token revocation
    # fall back to process memory
    try:
        await init_redis()
        logger.info("Redis connected")
    except Exception as e:
        logger.error(f"Redis connection failed: {e}")
        if settings.is_production:
            raise

    try:
        await init_db()
        logger.info("Database connected")
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        if settings.is_production:
            raise

    register_notification_triggers()

    try:
        register_notification_jobs()
        await start_scheduler()
        logger.info("Background scheduler started")
    except Exception as e:
        logger.error(f"Background scheduler failed to start: {e}")
        if settings.is_production:
            raise

    yield

    logger.info("Shutting down SchoolHub API...")

    await stop_scheduler()

    # Let in-flight welcome/announcement handlers finish before closing the pool
    await event_bus.drain()
    event_bus.clear_handlers()

    await close_redis()
    await close_db()
    logger.info("Cleanup complete")


app = FastAPI(
    title="SchoolHub API",
    description="Multi-tenant school management API",
    version="0.1.0",
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    lifespan=lifespan,
)

app.include_router(api_router, prefix="/api/v1")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """Root endpoint - API welcome message."""
    return {
        "message": "Welcome to SchoolHub API",
        "status": "running",
        "environment": settings.python_env,
    }


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint for container orchestration."""
    return {"status": "healthy"}


@app.get("/ready", tags=["Health"])
async def readiness_check() -> dict[str, str]:
    """Readiness check endpoint."""
    return {"status": "ready"}


# ============================================
# Background Job Debug Endpoints
# ============================================
# Manual control of scheduled jobs. In production, jobs run on schedule.


@app.get("/debug/jobs", tags=["Debug"])
async def list_jobs():
    """List all registered background jobs and their status."""
    return {"jobs": list_registered_jobs()}


@app.post("/debug/jobs/{job_id}/trigger", tags=["Debug"])
async def trigger_job(job_id: str):
    """
    Manually trigger a background job.

    Args:
        job_id: The ID of the job to trigger, e.g.
            notifications_cleanup_email_logs

    Raises:
        HTTPException 400: If job_id is not found.
    """
    try:
        return await trigger_job_manually(job_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


@app.post("/debug/jobs/{job_id}/pause", tags=["Debug"])
async def pause_job_endpoint(job_id: str):
    return {"job_id": job_id, "paused": pause_job(job_id)}


@app.post("/debug/jobs/{job_id}/resume", tags=["Debug"])
async def resume_job_endpoint(job_id: str):
    return {"job_id": job_id, "resumed": resume_job(job_id)}
