"""Admin commission rule API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.db import get_db
from src.models import CommissionType
from src.schemas.commission import RulePublishRequest, RuleResponse
from src.services.exceptions import InvalidRuleTiers
from src.services.rules import archive_rule, get_current_rule, publish_rule

router = APIRouter(prefix="/commission-rules")


def _rule_type(value: CommissionType) -> CommissionType:
    if value == CommissionType.NONE:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid commission rule type",
        )
    return value


@router.get("/current", response_model=RuleResponse)
async def current_rule(
    org_id: int = Query(...),
    type: CommissionType = Query(...),
    db: AsyncSession = Depends(get_db),
):
    """Get the rule currently in effect for an organization."""
    rule = await get_current_rule(db, org_id, _rule_type(type))
    if not rule:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No commission rule configured",
        )
    return RuleResponse.model_validate(rule)


@router.post("/{rule_type}", response_model=RuleResponse, status_code=status.HTTP_201_CREATED)
async def create_rule_version(
    rule_type: CommissionType,
    data: RulePublishRequest,
    db: AsyncSession = Depends(get_db),
):
    """Publish a new rule version; earlier versions are kept."""
    try:
        rule = await publish_rule(db, data.org_id, _rule_type(rule_type), data.tiers, data.updated_by)
    except InvalidRuleTiers as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    await db.commit()
    return RuleResponse.model_validate(rule)


@router.post("/{rule_id}/archive", response_model=RuleResponse)
async def archive_rule_version(
    rule_id: int,
    archived_by: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Archive a rule version."""
    rule = await archive_rule(db, rule_id, archived_by)
    if not rule:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Commission rule not found",
        )

    await db.commit()
    return RuleResponse.model_validate(rule)
