"""
Domain event triggers for commission recalculation.

A lead becoming Active recalculates its assignee's sales commission; a
load becoming completed recalculates its dispatcher's commission. Both
await the coordinator so the record is written before the caller
responds, and both swallow coordinator errors so the status change that
fired them still succeeds.

The status change must be committed before the trigger runs: the
coordinator reads metrics in its own transaction.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from src.models import CommissionMonthly, Lead, LeadStatus, Load, LoadStatus
from src.services.recalculation import RecalculationCoordinator
from src.utils.months import current_month

logger = logging.getLogger(__name__)


def apply_lead_status(
    lead: Lead,
    status: LeadStatus,
    now: Optional[datetime] = None,
) -> LeadStatus:
    """Set a lead's status, stamping activated_at on entry into Active. Returns the previous status."""
    previous = lead.status
    lead.status = status
    if status == LeadStatus.ACTIVE and previous != LeadStatus.ACTIVE:
        lead.activated_at = now or datetime.now(timezone.utc)
    return previous


def apply_load_status(
    load: Load,
    status: LoadStatus,
    now: Optional[datetime] = None,
) -> LoadStatus:
    """Set a load's status, stamping completed_at on entry into completed. Returns the previous status."""
    previous = load.status
    load.status = status
    if status == LoadStatus.COMPLETED and previous != LoadStatus.COMPLETED:
        load.completed_at = now or datetime.now(timezone.utc)
    return previous


async def on_lead_status_changed(
    coordinator: RecalculationCoordinator,
    lead: Lead,
    previous_status: Optional[LeadStatus],
    month: Optional[str] = None,
) -> Optional[CommissionMonthly]:
    """Recalculate the assignee's commission when a lead turns Active."""
    if lead.status != LeadStatus.ACTIVE or previous_status == LeadStatus.ACTIVE:
        return None
    if not lead.assigned_to:
        return None

    month = month or current_month()
    try:
        return await coordinator.trigger(lead.assigned_to, month)
    except Exception as e:
        logger.warning(
            f"Commission recalculation after lead {lead.id} activation failed "
            f"for user {lead.assigned_to} ({month}): {e}",
            exc_info=True,
        )
        return None


async def on_load_status_changed(
    coordinator: RecalculationCoordinator,
    load: Load,
    previous_status: Optional[LoadStatus],
    month: Optional[str] = None,
) -> Optional[CommissionMonthly]:
    """Recalculate the dispatcher's commission when a load is completed."""
    if load.status != LoadStatus.COMPLETED or previous_status == LoadStatus.COMPLETED:
        return None
    if not load.assigned_to:
        return None

    month = month or current_month()
    try:
        return await coordinator.trigger(load.assigned_to, month)
    except Exception as e:
        logger.warning(
            f"Commission recalculation after load {load.id} completion failed "
            f"for user {load.assigned_to} ({month}): {e}",
            exc_info=True,
        )
        return None
