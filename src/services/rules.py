"""
Commission rule store.

Rules are versioned per (org, type). Publishing inserts a new version;
the engine only ever reads the newest non-archived one.
"""

import logging
from typing import Any, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models import AuditAction, CommissionRule, CommissionType
from src.services.tiers import parse_tiers
from src.utils.audit import log_action

logger = logging.getLogger(__name__)


async def get_current_rule(
    db: AsyncSession,
    org_id: Optional[int],
    rule_type: CommissionType,
) -> Optional[CommissionRule]:
    """
    Get the rule currently in effect for an organization and type.

    Returns:
        The most recently updated non-archived rule, or None when the
        organization has nothing configured (nothing to calculate)
    """
    if org_id is None:
        return None

    result = await db.execute(
        select(CommissionRule)
        .where(
            CommissionRule.org_id == org_id,
            CommissionRule.type == rule_type,
            CommissionRule.is_archived == False,
        )
        .order_by(CommissionRule.updated_at.desc(), CommissionRule.id.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def publish_rule(
    db: AsyncSession,
    org_id: int,
    rule_type: CommissionType,
    tiers: List[dict[str, Any]],
    updated_by: Optional[int] = None,
) -> CommissionRule:
    """
    Validate a tier table and store it as the newest rule version.

    Raises:
        InvalidRuleTiers: if the tiers don't fit the rule type
    """
    parsed = parse_tiers(rule_type, tiers)

    rule = CommissionRule(
        org_id=org_id,
        type=rule_type,
        tiers=[tier.model_dump(mode="json", exclude_none=True) for tier in parsed],
        updated_by=updated_by,
    )
    db.add(rule)
    await db.flush()

    log_action(
        db,
        user_id=updated_by,
        action=AuditAction.COMMISSION_RULE_PUBLISHED,
        target_type="commission_rule",
        target_id=rule.id,
        action_metadata={"org_id": org_id, "type": rule_type.value, "tiers": rule.tiers},
    )

    logger.info(f"Published {rule_type.value} commission rule {rule.id} for org {org_id}")
    return rule


async def archive_rule(
    db: AsyncSession,
    rule_id: int,
    archived_by: Optional[int] = None,
) -> Optional[CommissionRule]:
    """Archive a rule version so it is no longer resolved. Returns None if not found."""
    rule = await db.get(CommissionRule, rule_id)
    if not rule:
        logger.warning(f"Commission rule {rule_id} not found")
        return None

    if rule.is_archived:
        return rule

    rule.is_archived = True
    log_action(
        db,
        user_id=archived_by,
        action=AuditAction.COMMISSION_RULE_ARCHIVED,
        target_type="commission_rule",
        target_id=rule.id,
    )
    await db.flush()

    logger.info(f"Archived commission rule {rule_id}")
    return rule
