"""Panel API router aggregation."""

from fastapi import APIRouter

from src.api.panel.leads import router as leads_router
from src.api.panel.loads import router as loads_router

panel_router = APIRouter(prefix="/panel", tags=["Panel"])

panel_router.include_router(leads_router)
panel_router.include_router(loads_router)

__all__ = ["panel_router"]
