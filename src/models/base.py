"""
Declarative base and shared column mixins.
"""

from datetime import datetime
from enum import Enum
from typing import Optional, Type

from sqlalchemy import DateTime, func
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


class TimestampMixin:
    """Mixin that adds created_at and updated_at timestamps."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        onupdate=func.now(),
        nullable=True,
    )


def value_enum(enum_cls: Type[Enum]) -> SQLAlchemyEnum:
    """Store a str Enum by its value rather than its member name."""
    return SQLAlchemyEnum(
        enum_cls,
        values_callable=lambda x: [e.value for e in x],
    )
