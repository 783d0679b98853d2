"""
Pytest configuration and fixtures.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./tallyline-test.db")
os.environ.setdefault("SCHEDULER_ENABLED", "false")

from datetime import date, datetime, timezone
from decimal import Decimal
from itertools import count

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from src.config import Settings
from src.models import (
    Base,
    CommissionRule,
    CommissionType,
    Invoice,
    InvoiceItem,
    Lead,
    LeadChannel,
    LeadStatus,
    Load,
    LoadStatus,
    Organization,
    Role,
    RoleLevel,
    User,
)
from src.services.recalculation import RecalculationCoordinator

MONTH = "2026-03"

SALES_TIERS = [
    {"active": 0, "fixed": 0},
    {"active": 5, "fixed": 1000, "pct": 0},
    {"active": 10, "fixed": 1000, "pct": 5},
]

DISPATCH_TIERS = [
    {"min": 0, "max": 649, "pct": 5},
    {"min": 650, "max": 2000, "pct": 8},
]


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """Create test database engine.

    File-backed so that every coordinator session gets its own connection.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture
async def db_session(session_factory):
    """Create test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def test_settings():
    return Settings(
        database_url="sqlite+aiosqlite://",
        scheduler_enabled=False,
        commission_batch_concurrency=1,
        commission_notification_timeout_seconds=0.2,
    )


class RecordingSink:
    """Sink that keeps every published fact."""

    def __init__(self):
        self.facts = []

    async def publish(self, fact):
        self.facts.append(fact)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def coordinator(session_factory, sink, test_settings):
    return RecalculationCoordinator(session_factory, sink=sink, settings=test_settings)


# ── Seed helpers ──────────────────────────────────────────


class Seeder:
    """Builds organizations, users, leads, loads and invoices for a test."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self._seq = count(1)

    async def org(self, code: str = "acme") -> Organization:
        org = Organization(name=code.title(), code=code)
        self.db.add(org)
        await self.db.flush()
        return org

    async def role(
        self,
        commission_type: CommissionType,
        level: int = RoleLevel.REP,
    ) -> Role:
        n = next(self._seq)
        role = Role(
            name=f"{commission_type.value}-{level}-{n}",
            department=commission_type.value,
            level=level,
            commission_type=commission_type,
        )
        self.db.add(role)
        await self.db.flush()
        return role

    async def user(
        self,
        org: Organization,
        commission_type: CommissionType = CommissionType.SALES,
        level: int = RoleLevel.REP,
        is_active: bool = True,
    ) -> User:
        role = await self.role(commission_type, level)
        n = next(self._seq)
        user = User(
            username=f"user{n}",
            display_name=f"User {n}",
            role_id=role.id,
            org_id=org.id,
            is_active=is_active,
        )
        self.db.add(user)
        await self.db.flush()
        return user

    async def rule(
        self,
        org: Organization,
        rule_type: CommissionType,
        tiers: list,
        updated_at: datetime = None,
        is_archived: bool = False,
    ) -> CommissionRule:
        rule = CommissionRule(
            org_id=org.id,
            type=rule_type,
            tiers=tiers,
            is_archived=is_archived,
        )
        if updated_at is not None:
            rule.updated_at = updated_at
        self.db.add(rule)
        await self.db.flush()
        return rule

    async def lead(
        self,
        org: Organization,
        assigned_to: User,
        status: LeadStatus = LeadStatus.ACTIVE,
        channel: LeadChannel = LeadChannel.OUTBOUND,
        created_by: User = None,
        created_at: datetime = None,
        activated_at: datetime = None,
    ) -> Lead:
        lead = Lead(
            org_id=org.id,
            company_name=f"Carrier {next(self._seq)}",
            status=status,
            channel=channel,
            assigned_to=assigned_to.id,
            created_by=(created_by or assigned_to).id,
            created_at=created_at or datetime(2020, 1, 1, tzinfo=timezone.utc),
            activated_at=activated_at,
        )
        self.db.add(lead)
        await self.db.flush()
        return lead

    async def leads(self, org, assigned_to, n: int, **kwargs) -> list:
        return [await self.lead(org, assigned_to, **kwargs) for _ in range(n)]

    async def load(
        self,
        org: Organization,
        lead: Lead,
        dispatcher: User,
        status: LoadStatus = LoadStatus.COMPLETED,
        completed_at: datetime = None,
    ) -> Load:
        load = Load(
            org_id=org.id,
            lead_id=lead.id,
            status=status,
            freight_amount=Decimal("0"),
            assigned_to=dispatcher.id,
            created_by=dispatcher.id,
            completed_at=completed_at,
        )
        self.db.add(load)
        await self.db.flush()
        return load

    async def invoice(
        self,
        org: Organization,
        lead: Lead,
        items: list,
        issued_date: date = date(2026, 3, 20),
    ) -> Invoice:
        """items: [(load, amount), ...]"""
        total = sum((Decimal(str(amount)) for _, amount in items), Decimal("0"))
        invoice = Invoice(
            org_id=org.id,
            lead_id=lead.id,
            invoice_number=f"INV-{next(self._seq):05d}",
            total_amount=total,
            status="sent",
            issued_date=issued_date,
        )
        self.db.add(invoice)
        await self.db.flush()
        for load, amount in items:
            self.db.add(InvoiceItem(invoice_id=invoice.id, load_id=load.id, amount=Decimal(str(amount))))
        await self.db.flush()
        return invoice


@pytest.fixture
def seed(db_session):
    return Seeder(db_session)
