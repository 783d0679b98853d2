"""
CRM lead model.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base, TimestampMixin, value_enum


class LeadStatus(str, Enum):
    """Pipeline status of a lead."""
    NEW = "New"
    IN_PROGRESS = "InProgress"
    FOLLOW_UP = "FollowUp"
    HAND_TO_DISPATCH = "HandToDispatch"
    ACTIVE = "Active"
    LOST = "Lost"


class LeadChannel(str, Enum):
    """How the lead reached us. Inbound leads pay a reduced fixed amount."""
    INBOUND = "inbound"
    OUTBOUND = "outbound"


class Lead(Base, TimestampMixin):
    """
    A carrier lead worked by sales and later served by dispatch.

    activated_at is stamped on the transition into Active and is what
    month-scoped metrics filter on.
    """

    __tablename__ = "leads"

    id: Mapped[int] = mapped_column(primary_key=True)
    org_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("organizations.id"),
        nullable=True,
        index=True,
    )
    company_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    status: Mapped[LeadStatus] = mapped_column(
        value_enum(LeadStatus),
        default=LeadStatus.NEW,
        nullable=False,
        index=True,
    )
    channel: Mapped[LeadChannel] = mapped_column(
        value_enum(LeadChannel),
        default=LeadChannel.OUTBOUND,
        nullable=False,
    )
    assigned_to: Mapped[int] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    created_by: Mapped[int] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    activated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Lead(id={self.id}, status={self.status}, assigned_to={self.assigned_to})>"
