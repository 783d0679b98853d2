"""
Database models for Tallyline.

All models are exported here for convenient imports:
    from src.models import User, Lead, CommissionMonthly, etc.
"""

from src.models.audit import AuditAction, AuditLog
from src.models.base import Base, TimestampMixin
from src.models.commission import CommissionMonthly, CommissionRule, CommissionStatus
from src.models.invoice import Invoice, InvoiceItem
from src.models.lead import Lead, LeadChannel, LeadStatus
from src.models.load import Load, LoadStatus
from src.models.organization import Organization
from src.models.user import CommissionType, Role, RoleLevel, User

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    # Organization
    "Organization",
    # User
    "User",
    "Role",
    "RoleLevel",
    "CommissionType",
    # CRM
    "Lead",
    "LeadStatus",
    "LeadChannel",
    # Dispatch
    "Load",
    "LoadStatus",
    # Invoicing
    "Invoice",
    "InvoiceItem",
    # Commission
    "CommissionRule",
    "CommissionMonthly",
    "CommissionStatus",
    # Audit
    "AuditLog",
    "AuditAction",
]
