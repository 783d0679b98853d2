"""Panel lead endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.db import get_db
from src.models import Lead
from src.schemas.events import LeadResponse, LeadStatusUpdate
from src.services.events import apply_lead_status, on_lead_status_changed
from src.services.recalculation import RecalculationCoordinator, get_coordinator

router = APIRouter(prefix="/leads")


@router.patch("/{lead_id}/status", response_model=LeadResponse)
async def update_lead_status(
    lead_id: int,
    data: LeadStatusUpdate,
    db: AsyncSession = Depends(get_db),
    coordinator: RecalculationCoordinator = Depends(get_coordinator),
):
    """
    Change a lead's status.

    Moving a lead to Active recalculates the assignee's commission before
    responding; a failed recalculation doesn't fail the update.
    """
    lead = await db.get(Lead, lead_id)
    if not lead:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Lead not found",
        )

    previous = apply_lead_status(lead, data.status)
    await db.commit()

    await on_lead_status_changed(coordinator, lead, previous)

    return LeadResponse.model_validate(lead)
