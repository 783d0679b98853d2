"""Pydantic schemas for request/response validation."""

from src.schemas.commission import (
    CalculateAllRequest,
    CalculateAllResponse,
    CalculateRequest,
    CommissionMonthlyResponse,
    DispatchRuleTiers,
    DispatchTier,
    RulePublishRequest,
    RuleResponse,
    SalesRuleTiers,
    SalesTier,
)
from src.schemas.events import (
    LeadResponse,
    LeadStatusUpdate,
    LoadResponse,
    LoadStatusUpdate,
)

__all__ = [
    # Tiers
    "SalesTier",
    "DispatchTier",
    "SalesRuleTiers",
    "DispatchRuleTiers",
    # Rules
    "RulePublishRequest",
    "RuleResponse",
    # Monthly records
    "CommissionMonthlyResponse",
    "CalculateRequest",
    "CalculateAllRequest",
    "CalculateAllResponse",
    # Events
    "LeadStatusUpdate",
    "LoadStatusUpdate",
    "LeadResponse",
    "LoadResponse",
]
