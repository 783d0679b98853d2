"""
Commission rule and monthly commission record models.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base, value_enum
from src.models.user import CommissionType


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CommissionStatus(str, Enum):
    """Lifecycle of a monthly commission record."""
    CALCULATED = "calculated"
    APPROVED = "approved"


class CommissionRule(Base):
    """
    One version of an organization's tier table for a commission type.

    Versions are append-only: publishing a change inserts a new row and the
    newest non-archived row by updated_at is the rule in effect.

    Sales tiers:    [{"active": 5, "fixed": 1000, "pct": 0}, ...]
    Dispatch tiers: [{"min": 0, "max": 649, "pct": 5}, ...]
    """

    __tablename__ = "commission_rules"

    id: Mapped[int] = mapped_column(primary_key=True)
    org_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id"),
        nullable=False,
        index=True,
    )
    type: Mapped[CommissionType] = mapped_column(
        value_enum(CommissionType),
        nullable=False,
        index=True,
    )
    tiers: Mapped[list] = mapped_column(
        JSON,
        nullable=False,
    )
    is_archived: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    updated_by: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id"),
        nullable=True,
    )
    # Python-side default keeps sub-second ordering between versions
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<CommissionRule(id={self.id}, org_id={self.org_id}, type={self.type})>"


class CommissionMonthly(Base):
    """
    Per-user, per-month commission outcome.

    At most one row per (user_id, month). Only the recalculation
    coordinator writes here; approval is set by a separate workflow.
    The version column is the optimistic lock for concurrent writers.
    """

    __tablename__ = "commissions_monthly"
    __table_args__ = (
        UniqueConstraint("user_id", "month", name="uq_commission_user_month"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    org_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("organizations.id"),
        nullable=True,
        index=True,
    )
    month: Mapped[str] = mapped_column(
        String(7),
        nullable=False,
        index=True,
        comment="YYYY-MM",
    )
    type: Mapped[CommissionType] = mapped_column(
        value_enum(CommissionType),
        nullable=False,
    )
    base_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        default=Decimal("0"),
        nullable=False,
    )
    bonus_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        default=Decimal("0"),
        nullable=False,
    )
    percentage_adjustment: Mapped[Decimal] = mapped_column(
        Numeric(6, 2),
        default=Decimal("0"),
        nullable=False,
        comment="Tier percentage applied, in percent",
    )
    penalty_pct: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(6, 2),
        nullable=True,
        comment="Dispatch only: salary penalty in percent (negative)",
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        comment="Final payable amount",
    )
    metrics: Mapped[dict] = mapped_column(
        JSON,
        nullable=False,
        comment="Snapshot of every input and intermediate used",
    )
    status: Mapped[CommissionStatus] = mapped_column(
        value_enum(CommissionStatus),
        default=CommissionStatus.CALCULATED,
        nullable=False,
        index=True,
    )
    approved_by: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id"),
        nullable=True,
    )
    approved_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    updated_by: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id"),
        nullable=True,
        comment="Actor of the last calculation; NULL for event/system runs",
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    __mapper_args__ = {"version_id_col": version}

    @property
    def is_approved(self) -> bool:
        return self.status == CommissionStatus.APPROVED

    def __repr__(self) -> str:
        return (
            f"<CommissionMonthly(id={self.id}, user_id={self.user_id}, "
            f"month='{self.month}', amount={self.amount})>"
        )
