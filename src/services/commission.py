"""
Tiered commission calculation for sales reps and dispatchers.

Sales:
- Tier picked by active-lead count gives a fixed amount and a percentage
- Inbound leads earn 75% of the fixed amount, outbound leads 100%
- The tier percentage is added on top of the blended base
- Team leads earn 1000 per active lead once the team target (10) is met

Dispatch:
- Tier picked by the invoice total of completed loads gives a percentage
- Invoice total below 650 cuts the base by 25%
- Own-lead, new-lead, first-two-weeks, active-truck and 5+ lead bonuses

The compute_* functions are pure; calculate_* read the rule and metrics,
then upsert the monthly record in the caller's transaction.
"""

import logging
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from src.models import CommissionMonthly, CommissionType, User
from src.schemas.commission import DispatchTier, SalesTier
from src.services.commission_store import upsert_commission_monthly
from src.services.metrics import (
    DispatchMetrics,
    SalesMetrics,
    collect_dispatch_metrics,
    collect_sales_metrics,
)
from src.services.rules import get_current_rule
from src.services.tiers import (
    parse_dispatch_tiers,
    parse_sales_tiers,
    resolve_dispatch_tier,
    resolve_sales_tier,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENTS = Decimal("0.01")

# Sales
INBOUND_FACTOR = Decimal("0.75")          # inbound leads pay 25% less
TEAM_TARGET = 10                          # active leads
TEAM_LEAD_BONUS_PER_LEAD = Decimal("1000")

# Dispatch
INVOICE_FLOOR = Decimal("650")
SALARY_PENALTY_PCT = Decimal("-25")
OWN_LEAD_BONUS = Decimal("3000")          # per own lead
NEW_LEAD_BONUS = Decimal("2000")          # per new lead
FIRST_TWO_WEEKS_RATE = Decimal("0.03")
ACTIVE_TRUCK_MIN_LEADS = 3
ACTIVE_TRUCK_BONUS = Decimal("3000")      # per active lead
EXTRA_LEADS_THRESHOLD = 5
EXTRA_LEADS_BONUS = Decimal("5000")


def money(value: Decimal) -> Decimal:
    """Round to cents, half up."""
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def _snapshot(values: Dict[str, Any]) -> Dict[str, Any]:
    return {k: str(v) if isinstance(v, Decimal) else v for k, v in values.items()}


@dataclass(frozen=True)
class ComputedCommission:
    """Result of applying a rule to a metrics snapshot, ready to store."""

    type: CommissionType
    base_amount: Decimal
    bonus_amount: Decimal
    percentage_adjustment: Decimal
    amount: Decimal
    metrics: Dict[str, Any] = field(default_factory=dict)
    penalty_pct: Optional[Decimal] = None


def compute_sales_commission(
    tiers: Sequence[SalesTier],
    metrics: SalesMetrics,
    is_team_lead: bool,
) -> ComputedCommission:
    """Apply a sales tier table to a rep's active-lead counts."""
    active = metrics.active_leads
    tier = resolve_sales_tier(active, tiers)

    fixed = tier.fixed if tier and tier.fixed is not None else ZERO
    pct = tier.pct if tier and tier.pct is not None else ZERO

    if active > 0:
        adjusted = (
            metrics.inbound_leads * fixed * INBOUND_FACTOR
            + metrics.outbound_leads * fixed
        ) / active
    else:
        adjusted = ZERO

    percentage_amount = adjusted * pct / HUNDRED

    team_target_met = active >= TEAM_TARGET
    team_lead_bonus = ZERO
    if is_team_lead and team_target_met:
        team_lead_bonus = active * TEAM_LEAD_BONUS_PER_LEAD

    amount = adjusted + percentage_amount + team_lead_bonus

    snapshot = metrics.as_dict()
    snapshot.update(_snapshot({
        "applied_tier": tier.active if tier else None,
        "fixed_amount": fixed,
        "tier_pct": pct,
        "inbound_factor": INBOUND_FACTOR,
        "adjusted_amount": money(adjusted),
        "percentage_amount": money(percentage_amount),
        "team_lead": is_team_lead,
        "team_target_met": team_target_met,
        "team_lead_bonus": money(team_lead_bonus),
    }))

    return ComputedCommission(
        type=CommissionType.SALES,
        base_amount=money(adjusted),
        bonus_amount=money(team_lead_bonus),
        percentage_adjustment=pct,
        amount=money(amount),
        metrics=snapshot,
    )


def compute_dispatch_commission(
    tiers: Sequence[DispatchTier],
    metrics: DispatchMetrics,
) -> ComputedCommission:
    """Apply a dispatch tier table and bonus schedule to a dispatcher's loads."""
    invoice_total = metrics.invoice_total

    penalty_pct = SALARY_PENALTY_PCT if invoice_total < INVOICE_FLOOR else ZERO

    tier = resolve_dispatch_tier(invoice_total, tiers)
    pct = tier.pct if tier else ZERO

    base = invoice_total * pct / HUNDRED

    own_lead_bonus = metrics.own_lead_count * OWN_LEAD_BONUS
    new_lead_bonus = metrics.new_lead_count * NEW_LEAD_BONUS
    first_two_weeks_bonus = metrics.first_two_weeks_invoice_amount * FIRST_TWO_WEEKS_RATE

    active = metrics.active_lead_count
    active_trucks_bonus = active * ACTIVE_TRUCK_BONUS if active >= ACTIVE_TRUCK_MIN_LEADS else ZERO
    extra_leads_bonus = EXTRA_LEADS_BONUS if active > EXTRA_LEADS_THRESHOLD else ZERO

    total_bonuses = (
        own_lead_bonus
        + new_lead_bonus
        + first_two_weeks_bonus
        + active_trucks_bonus
        + extra_leads_bonus
    )

    penalty_amount = base * penalty_pct / HUNDRED if penalty_pct else ZERO

    amount = base + total_bonuses + penalty_amount

    snapshot = metrics.as_dict()
    snapshot.update(_snapshot({
        "applied_tier": f"{tier.min}-{tier.max}" if tier else None,
        "tier_pct": pct,
        "base_amount": money(base),
        "own_lead_bonus": money(own_lead_bonus),
        "new_lead_bonus": money(new_lead_bonus),
        "first_two_weeks_bonus": money(first_two_weeks_bonus),
        "active_trucks_bonus": money(active_trucks_bonus),
        "extra_leads_bonus": money(extra_leads_bonus),
        "total_bonuses": money(total_bonuses),
        "penalty_pct": penalty_pct,
        "penalty_amount": money(penalty_amount),
    }))

    return ComputedCommission(
        type=CommissionType.DISPATCH,
        base_amount=money(base),
        bonus_amount=money(total_bonuses),
        percentage_adjustment=pct,
        penalty_pct=penalty_pct,
        amount=money(amount),
        metrics=snapshot,
    )


async def calculate_sales_commission(
    db: AsyncSession,
    user: User,
    month: str,
    updated_by: Optional[int] = None,
    month_scoped: bool = False,
) -> Optional[CommissionMonthly]:
    """
    Calculate and store a sales rep's commission for a month.

    Returns:
        The upserted record, or None when the organization has no sales rule
    """
    rule = await get_current_rule(db, user.org_id, CommissionType.SALES)
    if not rule:
        logger.info(f"No sales commission rule for org {user.org_id}, skipping user {user.id}")
        return None

    tiers = parse_sales_tiers(rule.tiers)
    metrics = await collect_sales_metrics(db, user.id, month, month_scoped=month_scoped)

    computed = compute_sales_commission(tiers, metrics, is_team_lead=user.role.is_team_lead)
    computed.metrics["rule_id"] = rule.id

    return await upsert_commission_monthly(db, user, month, computed, updated_by=updated_by)


async def calculate_dispatch_commission(
    db: AsyncSession,
    user: User,
    month: str,
    updated_by: Optional[int] = None,
    month_scoped: bool = False,
) -> Optional[CommissionMonthly]:
    """
    Calculate and store a dispatcher's commission for a month.

    Returns:
        The upserted record, or None when the organization has no dispatch rule
    """
    rule = await get_current_rule(db, user.org_id, CommissionType.DISPATCH)
    if not rule:
        logger.info(f"No dispatch commission rule for org {user.org_id}, skipping user {user.id}")
        return None

    tiers = parse_dispatch_tiers(rule.tiers)
    metrics = await collect_dispatch_metrics(db, user.id, month, month_scoped=month_scoped)

    computed = compute_dispatch_commission(tiers, metrics)
    computed.metrics["rule_id"] = rule.id

    return await upsert_commission_monthly(db, user, month, computed, updated_by=updated_by)


CALCULATORS = {
    CommissionType.SALES: calculate_sales_commission,
    CommissionType.DISPATCH: calculate_dispatch_commission,
}
