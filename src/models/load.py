"""
Freight load model.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Numeric
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base, TimestampMixin, value_enum


class LoadStatus(str, Enum):
    """Lifecycle of a load."""
    BOOKED = "booked"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    INVOICED = "invoiced"
    PAID = "paid"


class Load(Base, TimestampMixin):
    """A load booked for a lead and handled by a dispatcher."""

    __tablename__ = "loads"

    id: Mapped[int] = mapped_column(primary_key=True)
    org_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("organizations.id"),
        nullable=True,
        index=True,
    )
    lead_id: Mapped[int] = mapped_column(
        ForeignKey("leads.id"),
        nullable=False,
        index=True,
    )
    status: Mapped[LoadStatus] = mapped_column(
        value_enum(LoadStatus),
        default=LoadStatus.BOOKED,
        nullable=False,
        index=True,
    )
    freight_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        default=Decimal("0"),
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
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Load(id={self.id}, status={self.status}, assigned_to={self.assigned_to})>"
