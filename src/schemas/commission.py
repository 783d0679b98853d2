"""Commission rule and monthly record schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.models import CommissionStatus, CommissionType

MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


# ── Tiers ─────────────────────────────────────────────────


class SalesTier(BaseModel):
    """Threshold tier: applies once the active-lead count reaches `active`."""

    model_config = ConfigDict(extra="ignore")

    active: int = Field(..., ge=0)
    fixed: Optional[Decimal] = None
    pct: Optional[Decimal] = None


class DispatchTier(BaseModel):
    """Closed invoice-total range [min, max] paying `pct` percent."""

    model_config = ConfigDict(extra="ignore")

    min: Decimal
    max: Decimal
    pct: Decimal

    @model_validator(mode="after")
    def check_range(self) -> "DispatchTier":
        if self.min > self.max:
            raise ValueError(f"Tier min {self.min} is above max {self.max}")
        return self


class SalesRuleTiers(BaseModel):
    tiers: List[SalesTier] = Field(..., min_length=1)


class DispatchRuleTiers(BaseModel):
    tiers: List[DispatchTier] = Field(..., min_length=1)


# ── Rules ─────────────────────────────────────────────────


class RulePublishRequest(BaseModel):
    """Body for publishing a new rule version."""

    org_id: int
    tiers: List[Dict[str, Any]] = Field(..., min_length=1)
    updated_by: Optional[int] = None


class RuleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    org_id: int
    type: CommissionType
    tiers: List[Dict[str, Any]]
    is_archived: bool
    updated_by: Optional[int] = None
    updated_at: datetime


# ── Monthly records ───────────────────────────────────────


class CommissionMonthlyResponse(BaseModel):
    """Plain-data view of a monthly commission record."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    org_id: Optional[int] = None
    month: str
    type: CommissionType
    base_amount: Decimal
    bonus_amount: Decimal
    percentage_adjustment: Decimal
    penalty_pct: Optional[Decimal] = None
    amount: Decimal
    metrics: Dict[str, Any]
    status: CommissionStatus
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    updated_by: Optional[int] = None
    updated_at: datetime


class CalculateRequest(BaseModel):
    user_id: int
    month: str = Field(..., pattern=MONTH_PATTERN)
    calculated_by: Optional[int] = None


class CalculateAllRequest(BaseModel):
    month: str = Field(..., pattern=MONTH_PATTERN)
    calculated_by: Optional[int] = None


class CalculateAllResponse(BaseModel):
    message: str
    month: str
    processed: int
    skipped: int
    failed_user_ids: List[int]
    commissions: List[CommissionMonthlyResponse]
