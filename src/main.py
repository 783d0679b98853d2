"""
Tallyline - Commission calculation service

Main FastAPI application with:
- Admin commission endpoints (recalculate, calculate-all, rule versions)
- Panel lead/load status endpoints that trigger recalculation
- Nightly commission sweep via APScheduler
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.api import admin_router, api_router, panel_router
from src.config import settings
from src.db import engine
from src.models import Base
from src.scheduler import scheduler, setup_scheduler

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup:
    - Creates tables on SQLite (PostgreSQL is migrated with Alembic)
    - Starts the commission sweep scheduler

    Shutdown:
    - Stops the scheduler
    """
    logger.info("Starting Tallyline...")

    if settings.is_sqlite:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("SQLite schema ensured")

    if settings.scheduler_enabled:
        setup_scheduler()
        scheduler.start()

    logger.info("Tallyline started successfully!")

    yield

    # Shutdown
    logger.info("Shutting down Tallyline...")
    if scheduler.running:
        scheduler.shutdown(wait=False)


# Create FastAPI application
app = FastAPI(
    title="Tallyline",
    description="Commission calculation and recalculation engine",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if not settings.is_production else None,
    redoc_url="/redoc" if not settings.is_production else None,
)

# Include routers
app.include_router(api_router)  # /api/* endpoints
app.include_router(admin_router)  # /admin/* endpoints
app.include_router(panel_router)  # /panel/* endpoints


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.main:app",
        host="0.0.0.0",
        port=8000,
        reload=not settings.is_production,
    )
