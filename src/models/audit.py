"""
AuditLog model for tracking commission activity.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, JSON, String, func
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base, value_enum


class AuditAction(str, Enum):
    """Types of auditable actions."""
    COMMISSION_CALCULATED = "commission_calculated"
    COMMISSION_CALCULATED_ALL = "commission_calculated_all"
    COMMISSION_RULE_PUBLISHED = "commission_rule_published"
    COMMISSION_RULE_ARCHIVED = "commission_rule_archived"


class AuditLog(Base):
    """
    Activity log for commission calculations and rule changes.

    user_id is the acting user; NULL when the engine ran on its own
    (event trigger or scheduled sweep).
    """

    __tablename__ = "audit_logs"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id"),
        nullable=True,
        index=True,
    )
    action: Mapped[AuditAction] = mapped_column(
        value_enum(AuditAction),
        nullable=False,
        index=True,
    )
    target_type: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        comment="Type of entity affected (commission_monthly, commission_rule)",
    )
    target_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        comment="ID of the affected entity",
    )
    action_metadata: Mapped[Optional[dict]] = mapped_column(
        JSON,
        nullable=True,
        comment="Additional context about the action",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<AuditLog(id={self.id}, user_id={self.user_id}, action={self.action})>"
