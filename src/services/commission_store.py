"""
Monthly commission record store.

One record per (user, month). Recalculation updates the record in place
and never touches its approval fields. Flushing surfaces unique-key and
version conflicts to the caller; committing is the caller's job.
"""

import logging
from typing import TYPE_CHECKING, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models import CommissionMonthly, CommissionStatus, User

if TYPE_CHECKING:
    from src.services.commission import ComputedCommission

logger = logging.getLogger(__name__)


async def get_commission_monthly(
    db: AsyncSession,
    user_id: int,
    month: str,
) -> Optional[CommissionMonthly]:
    result = await db.execute(
        select(CommissionMonthly).where(
            CommissionMonthly.user_id == user_id,
            CommissionMonthly.month == month,
        )
    )
    return result.scalar_one_or_none()


async def upsert_commission_monthly(
    db: AsyncSession,
    user: User,
    month: str,
    computed: "ComputedCommission",
    updated_by: Optional[int] = None,
) -> CommissionMonthly:
    """
    Create or update the user's record for the month.

    Args:
        db: Database session (caller commits)
        user: User the commission belongs to
        month: YYYY-MM
        computed: Calculator output
        updated_by: Acting user, None for event/system runs

    Returns:
        The flushed record

    Raises:
        IntegrityError: another writer inserted the same (user, month) first
        StaleDataError: another writer updated the record since it was read
    """
    record = await get_commission_monthly(db, user.id, month)

    if record:
        record.org_id = user.org_id
        record.type = computed.type
        record.base_amount = computed.base_amount
        record.bonus_amount = computed.bonus_amount
        record.percentage_adjustment = computed.percentage_adjustment
        record.penalty_pct = computed.penalty_pct
        record.amount = computed.amount
        record.metrics = computed.metrics
        record.updated_by = updated_by
        logger.debug(f"Updating commission {record.id} for user {user.id} ({month})")
    else:
        record = CommissionMonthly(
            user_id=user.id,
            org_id=user.org_id,
            month=month,
            type=computed.type,
            base_amount=computed.base_amount,
            bonus_amount=computed.bonus_amount,
            percentage_adjustment=computed.percentage_adjustment,
            penalty_pct=computed.penalty_pct,
            amount=computed.amount,
            metrics=computed.metrics,
            status=CommissionStatus.CALCULATED,
            updated_by=updated_by,
        )
        db.add(record)
        logger.debug(f"Creating commission for user {user.id} ({month})")

    await db.flush()
    return record
