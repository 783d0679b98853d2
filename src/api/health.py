"""
Health check endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.db import get_db
from src.scheduler import scheduler

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def health_check():
    """Returns 200 while the process is up."""
    return {"status": "healthy", "service": "tallyline"}


@router.get("/ready")
async def readiness_check(db: AsyncSession = Depends(get_db)):
    """
    Readiness check.

    Ready means the database answers. The sweep scheduler state is
    reported alongside but doesn't affect readiness.
    """
    if not settings.scheduler_enabled:
        sweep = "disabled"
    else:
        sweep = "running" if scheduler.running else "stopped"

    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        return {
            "status": "not_ready",
            "database": f"error: {e}",
            "commission_sweep": sweep,
        }

    return {
        "status": "ready",
        "database": "connected",
        "commission_sweep": sweep,
    }


@router.get("/live")
async def liveness_check():
    """Liveness check for the container orchestrator."""
    return {"status": "alive"}
