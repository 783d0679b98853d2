"""Lead / load status change schemas."""

from typing import Optional

from pydantic import BaseModel, ConfigDict

from src.models import LeadChannel, LeadStatus, LoadStatus


class LeadStatusUpdate(BaseModel):
    status: LeadStatus


class LoadStatusUpdate(BaseModel):
    status: LoadStatus


class LeadResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    org_id: Optional[int] = None
    company_name: str
    status: LeadStatus
    channel: LeadChannel
    assigned_to: int


class LoadResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    org_id: Optional[int] = None
    lead_id: int
    status: LoadStatus
    assigned_to: int
