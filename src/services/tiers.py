"""
Tier resolution for commission rules.

Both resolvers are pure: no I/O, same answer for the same inputs.
"""

from decimal import Decimal
from typing import Any, Iterable, List, Optional, Sequence

from pydantic import ValidationError

from src.models import CommissionType
from src.schemas.commission import (
    DispatchRuleTiers,
    DispatchTier,
    SalesRuleTiers,
    SalesTier,
)
from src.services.exceptions import InvalidRuleTiers


def parse_sales_tiers(raw: Iterable[Any]) -> List[SalesTier]:
    try:
        return SalesRuleTiers(tiers=list(raw)).tiers
    except ValidationError as e:
        raise InvalidRuleTiers(f"Invalid sales tiers: {e}") from e


def parse_dispatch_tiers(raw: Iterable[Any]) -> List[DispatchTier]:
    try:
        return DispatchRuleTiers(tiers=list(raw)).tiers
    except ValidationError as e:
        raise InvalidRuleTiers(f"Invalid dispatch tiers: {e}") from e


def parse_tiers(rule_type: CommissionType, raw: Iterable[Any]) -> list:
    """Validate a raw JSON tier table for the given rule type."""
    if rule_type == CommissionType.SALES:
        return parse_sales_tiers(raw)
    if rule_type == CommissionType.DISPATCH:
        return parse_dispatch_tiers(raw)
    raise InvalidRuleTiers(f"No tier table for commission type {rule_type!r}")


def resolve_sales_tier(active_count: int, tiers: Sequence[SalesTier]) -> Optional[SalesTier]:
    """Pick the applied sales tier for an active-lead count.

    Every tier whose threshold is met overwrites the previous pick, so the
    last qualifying tier in iteration order wins. Callers must pass tiers in
    ascending threshold order for that to be the highest qualifying tier;
    the order is not checked here.

    Returns:
        The applied tier, or None when no threshold is met
    """
    applied = None
    for tier in tiers:
        if active_count >= tier.active:
            applied = tier
    return applied


def resolve_dispatch_tier(invoice_total: Decimal, tiers: Sequence[DispatchTier]) -> Optional[DispatchTier]:
    """Pick the first tier whose closed [min, max] range contains the total.

    Ranges are expected to be non-overlapping. None means the total falls
    outside every range and the zero-rate default applies.
    """
    for tier in tiers:
        if tier.min <= invoice_total <= tier.max:
            return tier
    return None
