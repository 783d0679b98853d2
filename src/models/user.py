"""
User and role models.
"""

from enum import Enum, IntEnum
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base, TimestampMixin, value_enum


class CommissionType(str, Enum):
    """Which calculator, if any, applies to holders of a role."""
    SALES = "sales"
    DISPATCH = "dispatch"
    NONE = "none"


class RoleLevel(IntEnum):
    """Seniority levels used across the organization."""
    REP = 1
    TEAM_LEAD = 2
    MANAGER = 3
    HEAD = 4
    SUPER_ADMIN = 5


class Role(Base):
    """
    Role assigned to a user.

    commission_type is resolved once when the role is configured; the
    engine never parses the display name or department to pick a calculator.
    """

    __tablename__ = "roles"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        nullable=False,
    )
    department: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="Display department: sales, dispatch, admin, ...",
    )
    level: Mapped[int] = mapped_column(
        Integer,
        default=RoleLevel.REP,
        nullable=False,
    )
    commission_type: Mapped[CommissionType] = mapped_column(
        value_enum(CommissionType),
        default=CommissionType.NONE,
        server_default=CommissionType.NONE.value,
        nullable=False,
    )

    @property
    def is_team_lead(self) -> bool:
        return self.level == RoleLevel.TEAM_LEAD

    def __repr__(self) -> str:
        return f"<Role(id={self.id}, name='{self.name}', commission_type={self.commission_type})>"


class User(Base, TimestampMixin):
    """User account. Authentication lives outside this service."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    username: Mapped[str] = mapped_column(
        String(100),
        unique=True,
        index=True,
        nullable=False,
    )
    display_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    role_id: Mapped[int] = mapped_column(
        ForeignKey("roles.id"),
        nullable=False,
    )
    org_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("organizations.id"),
        nullable=True,
        index=True,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    # Relationships
    role: Mapped["Role"] = relationship("Role", lazy="joined")

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}', role_id={self.role_id})>"
