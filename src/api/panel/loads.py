"""Panel load endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.db import get_db
from src.models import Load
from src.schemas.events import LoadResponse, LoadStatusUpdate
from src.services.events import apply_load_status, on_load_status_changed
from src.services.recalculation import RecalculationCoordinator, get_coordinator

router = APIRouter(prefix="/loads")


@router.patch("/{load_id}/status", response_model=LoadResponse)
async def update_load_status(
    load_id: int,
    data: LoadStatusUpdate,
    db: AsyncSession = Depends(get_db),
    coordinator: RecalculationCoordinator = Depends(get_coordinator),
):
    """Change a load's status; completing it recalculates the dispatcher's commission."""
    load = await db.get(Load, load_id)
    if not load:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Load not found",
        )

    previous = apply_load_status(load, data.status)
    await db.commit()

    await on_load_status_changed(coordinator, load, previous)

    return LoadResponse.model_validate(load)
