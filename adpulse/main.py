"""ADPULSE — FastAPI Application Entry Point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from adpulse.api.meta_routes import router as meta_router
from adpulse.scheduler.jobs import start_scheduler, stop_scheduler
from adpulse.core.logging import get_logger

logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    logger.info("ADPULSE starting up...")
    start_scheduler()
    yield
    stop_scheduler()
    logger.info("ADPULSE shut down")


app = FastAPI(
    title="ADPULSE",
    description="Fetch ad-level hourly Facebook Ads performance through the async insights report flow.",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(meta_router)


@app.get("/health", tags=["System"])
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "adpulse",
        "version": "1.0.0",
    }
