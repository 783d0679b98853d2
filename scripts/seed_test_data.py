"""
Seed demo data for Tallyline and run one commission sweep.

Usage:
    python scripts/seed_test_data.py [YYYY-MM]

Or with custom DATABASE_URL:
    DATABASE_URL="sqlite+aiosqlite:///./tallyline.db" python scripts/seed_test_data.py

This script creates:
- A demo organization with sales and dispatch rules
- Sales reps (one team lead), a dispatcher and an admin
- Active leads, completed loads and invoices
Then recalculates every commission for the month and prints the results.
"""

import asyncio
import os
import sys
from datetime import date, datetime, timezone
from decimal import Decimal

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.db import AsyncSessionLocal, engine, get_db_context
from src.models import (
    Base,
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
from src.services.rules import publish_rule
from src.utils.months import current_month, first_two_weeks

# ===== TEST DATA =====

SALES_TIERS = [
    {"active": 0, "fixed": 0},
    {"active": 5, "fixed": 1000, "pct": 0},
    {"active": 10, "fixed": 1000, "pct": 5},
]

DISPATCH_TIERS = [
    {"min": 0, "max": 649, "pct": 5},
    {"min": 650, "max": 2000, "pct": 8},
    {"min": 2000.01, "max": 1000000, "pct": 10},
]

TEST_ROLES = [
    # name, department, level, commission type
    ("Sales Rep", "sales", RoleLevel.REP, CommissionType.SALES),
    ("Sales Team Lead", "sales", RoleLevel.TEAM_LEAD, CommissionType.SALES),
    ("Dispatcher", "dispatch", RoleLevel.REP, CommissionType.DISPATCH),
    ("Admin", "admin", RoleLevel.SUPER_ADMIN, CommissionType.NONE),
]

TEST_USERS = [
    # username, display name, role, inbound leads, outbound leads
    ("rep_anna", "Anna Rep", "Sales Rep", 4, 8),
    ("rep_boris", "Boris Rep", "Sales Rep", 1, 3),
    ("lead_carla", "Carla Lead", "Sales Team Lead", 2, 9),
    ("disp_dan", "Dan Dispatch", "Dispatcher", 0, 0),
    ("admin", "Admin", "Admin", 0, 0),
]


async def get_or_create_org(db: AsyncSession) -> Organization:
    result = await db.execute(select(Organization).where(Organization.code == "demo"))
    org = result.scalar_one_or_none()
    if not org:
        org = Organization(name="Demo Freight", code="demo")
        db.add(org)
        await db.flush()
        print(f"Created organization: {org.name}")
    else:
        print(f"Organization already exists (id={org.id})")
    return org


async def create_roles(db: AsyncSession) -> dict[str, Role]:
    roles = {}
    for name, department, level, commission_type in TEST_ROLES:
        result = await db.execute(select(Role).where(Role.name == name))
        role = result.scalar_one_or_none()
        if not role:
            role = Role(
                name=name,
                department=department,
                level=level,
                commission_type=commission_type,
            )
            db.add(role)
            await db.flush()
        roles[name] = role
    return roles


async def create_users(db: AsyncSession, org: Organization, roles: dict[str, Role]) -> dict[str, User]:
    users = {}
    for username, display_name, role_name, _, _ in TEST_USERS:
        result = await db.execute(select(User).where(User.username == username))
        user = result.scalar_one_or_none()
        if not user:
            user = User(
                username=username,
                display_name=display_name,
                role_id=roles[role_name].id,
                org_id=org.id,
                is_active=True,
            )
            db.add(user)
            await db.flush()
            print(f"Created user: {username} ({role_name})")
        users[username] = user
    return users


async def create_leads(db: AsyncSession, org: Organization, users: dict[str, User], month: str) -> list[Lead]:
    """Active leads for each sales user, created by the dispatcher where noted."""
    start, _ = first_two_weeks(month)
    activated = datetime(start.year, start.month, 3, tzinfo=timezone.utc)
    dispatcher = users["disp_dan"]

    leads = []
    for username, _, _, inbound, outbound in TEST_USERS:
        channels = [LeadChannel.INBOUND] * inbound + [LeadChannel.OUTBOUND] * outbound
        for i, channel in enumerate(channels):
            lead = Lead(
                org_id=org.id,
                company_name=f"{username} carrier {i + 1}",
                status=LeadStatus.ACTIVE,
                channel=channel,
                assigned_to=users[username].id,
                created_by=dispatcher.id if i == 0 else users[username].id,
                activated_at=activated,
            )
            db.add(lead)
            leads.append(lead)

    await db.flush()
    print(f"Created {len(leads)} active leads")
    return leads


async def create_loads(
    db: AsyncSession,
    org: Organization,
    dispatcher: User,
    leads: list[Lead],
    month: str,
) -> None:
    """Completed loads on the first few leads, invoiced in two batches."""
    start, fortnight_end = first_two_weeks(month)
    completed = datetime(start.year, start.month, 10, tzinfo=timezone.utc)

    loads = []
    for lead in leads[:4]:
        load = Load(
            org_id=org.id,
            lead_id=lead.id,
            status=LoadStatus.COMPLETED,
            freight_amount=Decimal("250.00"),
            assigned_to=dispatcher.id,
            created_by=dispatcher.id,
            completed_at=completed,
        )
        db.add(load)
        loads.append(load)
    await db.flush()

    batches = [
        (loads[:2], fortnight_end),
        (loads[2:], date(start.year, start.month, 20)),
    ]
    for n, (batch, issued) in enumerate(batches, start=1):
        invoice = Invoice(
            org_id=org.id,
            lead_id=batch[0].lead_id,
            invoice_number=f"DEMO-{month}-{n:03d}",
            total_amount=sum(load.freight_amount for load in batch),
            status="sent",
            issued_date=issued,
        )
        db.add(invoice)
        await db.flush()
        for load in batch:
            db.add(InvoiceItem(invoice_id=invoice.id, load_id=load.id, amount=load.freight_amount))

    await db.flush()
    print(f"Created {len(loads)} completed loads and {len(batches)} invoices")


async def main():
    month = sys.argv[1] if len(sys.argv) > 1 else current_month()
    print(f"Seeding {settings.database_url} for {month}")

    if settings.is_sqlite:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async with get_db_context() as db:
        org = await get_or_create_org(db)
        roles = await create_roles(db)
        users = await create_users(db, org, roles)
        admin = users["admin"]

        await publish_rule(db, org.id, CommissionType.SALES, SALES_TIERS, updated_by=admin.id)
        await publish_rule(db, org.id, CommissionType.DISPATCH, DISPATCH_TIERS, updated_by=admin.id)

        leads = await create_leads(db, org, users, month)
        await create_loads(db, org, users["disp_dan"], leads, month)

    coordinator = RecalculationCoordinator(AsyncSessionLocal)
    batch = await coordinator.calculate_all(month, calculated_by=admin.id)

    print(f"\nCommissions for {month}:")
    for record in batch.records:
        print(f"  user {record.user_id:>3} {record.type.value:<8} {record.amount:>12}")
    print(f"Skipped: {batch.skipped}, failed: {batch.failed_user_ids}")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
