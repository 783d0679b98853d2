"""Admin monthly commission API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.db import get_db
from src.models import CommissionMonthly, CommissionType
from src.schemas.commission import (
    CalculateAllRequest,
    CalculateAllResponse,
    CalculateRequest,
    CommissionMonthlyResponse,
)
from src.services.exceptions import (
    ConcurrentRecalculationConflict,
    InvalidMonth,
    MetricsUnavailable,
)
from src.services.recalculation import RecalculationCoordinator, get_coordinator

router = APIRouter(prefix="/commissions")


@router.get("", response_model=list[CommissionMonthlyResponse])
async def list_commissions(
    db: AsyncSession = Depends(get_db),
    user_id: Optional[int] = Query(None),
    month: Optional[str] = Query(None, pattern=r"^\d{4}-(0[1-9]|1[0-2])$"),
    org_id: Optional[int] = Query(None),
    type: Optional[CommissionType] = Query(None),
):
    """List monthly commission records."""
    query = select(CommissionMonthly)

    if user_id is not None:
        query = query.where(CommissionMonthly.user_id == user_id)
    if month:
        query = query.where(CommissionMonthly.month == month)
    if org_id is not None:
        query = query.where(CommissionMonthly.org_id == org_id)
    if type:
        query = query.where(CommissionMonthly.type == type)

    query = query.order_by(CommissionMonthly.month.desc(), CommissionMonthly.amount.desc())

    result = await db.execute(query)
    return [CommissionMonthlyResponse.model_validate(c) for c in result.scalars().all()]


@router.post("/calculate", response_model=CommissionMonthlyResponse)
async def calculate_commission(
    data: CalculateRequest,
    coordinator: RecalculationCoordinator = Depends(get_coordinator),
):
    """Recalculate one user's commission for a month."""
    try:
        record = await coordinator.trigger(data.user_id, data.month, data.calculated_by)
    except InvalidMonth as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except MetricsUnavailable as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    except ConcurrentRecalculationConflict as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Nothing to calculate: unknown user, no commission role or no rule",
        )

    return CommissionMonthlyResponse.model_validate(record)


@router.post("/calculate-all", response_model=CalculateAllResponse)
async def calculate_all_commissions(
    data: CalculateAllRequest,
    coordinator: RecalculationCoordinator = Depends(get_coordinator),
):
    """Recalculate every sales and dispatch user for a month."""
    batch = await coordinator.calculate_all(data.month, data.calculated_by)

    return CalculateAllResponse(
        message=f"Calculated commissions for {batch.processed} users",
        month=batch.month,
        processed=batch.processed,
        skipped=batch.skipped,
        failed_user_ids=batch.failed_user_ids,
        commissions=[CommissionMonthlyResponse.model_validate(c) for c in batch.records],
    )
