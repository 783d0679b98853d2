"""
Metrics collection for commission calculation.

Read-only queries over leads, loads and invoices that produce the raw
inputs a calculator needs for one user and month. Any storage failure is
reported as MetricsUnavailable so the caller can abort without writing.
"""

import logging
from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Any, Dict

from sqlalchemy import and_, distinct, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.models import (
    Invoice,
    InvoiceItem,
    Lead,
    LeadChannel,
    LeadStatus,
    Load,
    LoadStatus,
)
from src.services.exceptions import MetricsUnavailable
from src.utils.months import first_two_weeks, month_bounds

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def _jsonable(snapshot: Dict[str, Any]) -> Dict[str, Any]:
    return {k: str(v) if isinstance(v, Decimal) else v for k, v in snapshot.items()}


@dataclass(frozen=True)
class SalesMetrics:
    """Active-lead counts for a sales rep."""

    active_leads: int
    inbound_leads: int
    outbound_leads: int
    month_scoped: bool = False

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class DispatchMetrics:
    """Completed-load and lead figures for a dispatcher."""

    completed_loads: int
    invoice_total: Decimal
    own_lead_count: int
    new_lead_count: int
    first_two_weeks_invoice_amount: Decimal
    active_lead_count: int
    month_scoped: bool = False

    def as_dict(self) -> Dict[str, Any]:
        return _jsonable(asdict(self))


async def collect_sales_metrics(
    db: AsyncSession,
    user_id: int,
    month: str,
    month_scoped: bool = False,
) -> SalesMetrics:
    """
    Count the user's active leads, split by channel.

    Without month scoping this is the current Active set regardless of
    when each lead was activated.
    """
    conditions = [
        Lead.assigned_to == user_id,
        Lead.status == LeadStatus.ACTIVE,
    ]
    if month_scoped:
        start, end = month_bounds(month)
        conditions += [Lead.activated_at >= start, Lead.activated_at < end]

    try:
        result = await db.execute(
            select(Lead.channel, func.count())
            .where(and_(*conditions))
            .group_by(Lead.channel)
        )
        counts = {channel: count for channel, count in result.all()}
    except SQLAlchemyError as e:
        raise MetricsUnavailable(user_id, month, str(e)) from e

    inbound = counts.get(LeadChannel.INBOUND, 0)
    outbound = counts.get(LeadChannel.OUTBOUND, 0)

    return SalesMetrics(
        active_leads=inbound + outbound,
        inbound_leads=inbound,
        outbound_leads=outbound,
        month_scoped=month_scoped,
    )


async def collect_dispatch_metrics(
    db: AsyncSession,
    user_id: int,
    month: str,
    month_scoped: bool = False,
) -> DispatchMetrics:
    """
    Gather completed loads, their invoiced amounts and lead counts for a dispatcher.

    The invoice amount of a load is the sum of its invoice items; a
    completed load that hasn't been invoiced contributes 0.
    """
    start, end = month_bounds(month)
    fortnight_start, fortnight_end = first_two_weeks(month)

    load_conditions = [
        Load.assigned_to == user_id,
        Load.status == LoadStatus.COMPLETED,
    ]
    if month_scoped:
        load_conditions += [Load.completed_at >= start, Load.completed_at < end]
    completed = select(Load.id).where(and_(*load_conditions))

    own_conditions = [
        Lead.created_by == user_id,
        Lead.status == LeadStatus.ACTIVE,
    ]
    if month_scoped:
        own_conditions += [Lead.activated_at >= start, Lead.activated_at < end]

    try:
        completed_count = await db.scalar(
            select(func.count()).select_from(Load).where(and_(*load_conditions))
        )

        invoice_total = await db.scalar(
            select(func.coalesce(func.sum(InvoiceItem.amount), ZERO))
            .where(InvoiceItem.load_id.in_(completed))
        )

        first_two_weeks_amount = await db.scalar(
            select(func.coalesce(func.sum(InvoiceItem.amount), ZERO))
            .select_from(InvoiceItem)
            .join(Invoice, Invoice.id == InvoiceItem.invoice_id)
            .where(
                InvoiceItem.load_id.in_(completed),
                Invoice.issued_date >= fortnight_start,
                Invoice.issued_date <= fortnight_end,
            )
        )

        own_leads = await db.scalar(
            select(func.count()).select_from(Lead).where(and_(*own_conditions))
        )

        new_leads = await db.scalar(
            select(func.count())
            .select_from(Lead)
            .where(
                Lead.created_by == user_id,
                Lead.created_at >= start,
                Lead.created_at < end,
            )
        )

        active_trucks = await db.scalar(
            select(func.count(distinct(Lead.id)))
            .select_from(Lead)
            .join(Load, Load.lead_id == Lead.id)
            .where(
                Load.id.in_(completed),
                Lead.status == LeadStatus.ACTIVE,
            )
        )
    except SQLAlchemyError as e:
        raise MetricsUnavailable(user_id, month, str(e)) from e

    metrics = DispatchMetrics(
        completed_loads=completed_count or 0,
        invoice_total=Decimal(invoice_total or 0),
        own_lead_count=own_leads or 0,
        new_lead_count=new_leads or 0,
        first_two_weeks_invoice_amount=Decimal(first_two_weeks_amount or 0),
        active_lead_count=active_trucks or 0,
        month_scoped=month_scoped,
    )
    logger.debug(f"Dispatch metrics for user {user_id} ({month}): {metrics}")
    return metrics
