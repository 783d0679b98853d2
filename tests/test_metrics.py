"""
Tests for metrics collection against a SQLite database.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest
from sqlalchemy.exc import OperationalError

from src.models import CommissionType, LeadChannel, LeadStatus, LoadStatus
from src.services.exceptions import MetricsUnavailable
from src.services.metrics import collect_dispatch_metrics, collect_sales_metrics

MONTH = "2026-03"


def _failing_db():
    async def execute(*args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    return SimpleNamespace(execute=execute, scalar=execute)


class TestSalesMetrics:
    async def test_counts_active_leads_by_channel(self, db_session, seed):
        org = await seed.org()
        rep = await seed.user(org)
        other = await seed.user(org)

        await seed.leads(org, rep, 4, channel=LeadChannel.INBOUND)
        await seed.leads(org, rep, 8, channel=LeadChannel.OUTBOUND)
        await seed.leads(org, rep, 3, status=LeadStatus.IN_PROGRESS)
        await seed.leads(org, rep, 1, status=LeadStatus.LOST)
        await seed.leads(org, other, 2)

        metrics = await collect_sales_metrics(db_session, rep.id, MONTH)

        assert metrics.active_leads == 12
        assert metrics.inbound_leads == 4
        assert metrics.outbound_leads == 8
        assert metrics.month_scoped is False

    async def test_no_leads(self, db_session, seed):
        org = await seed.org()
        rep = await seed.user(org)

        metrics = await collect_sales_metrics(db_session, rep.id, MONTH)

        assert metrics.active_leads == 0
        assert metrics.as_dict() == {
            "active_leads": 0,
            "inbound_leads": 0,
            "outbound_leads": 0,
            "month_scoped": False,
        }

    async def test_month_scoped_uses_activation_date(self, db_session, seed):
        org = await seed.org()
        rep = await seed.user(org)

        await seed.lead(org, rep, activated_at=datetime(2026, 3, 2, tzinfo=timezone.utc))
        await seed.lead(org, rep, activated_at=datetime(2026, 2, 27, tzinfo=timezone.utc))
        await seed.lead(org, rep, activated_at=datetime(2026, 4, 1, tzinfo=timezone.utc))

        unscoped = await collect_sales_metrics(db_session, rep.id, MONTH)
        scoped = await collect_sales_metrics(db_session, rep.id, MONTH, month_scoped=True)

        assert unscoped.active_leads == 3
        assert scoped.active_leads == 1

    async def test_storage_failure(self):
        with pytest.raises(MetricsUnavailable) as exc_info:
            await collect_sales_metrics(_failing_db(), 7, MONTH)

        assert exc_info.value.user_id == 7
        assert exc_info.value.month == MONTH


class TestDispatchMetrics:
    async def test_invoice_total_of_completed_loads(self, db_session, seed):
        org = await seed.org()
        rep = await seed.user(org)
        dispatcher = await seed.user(org, CommissionType.DISPATCH)

        lead = await seed.lead(org, rep)
        done = await seed.load(org, lead, dispatcher)
        done_too = await seed.load(org, lead, dispatcher)
        in_transit = await seed.load(org, lead, dispatcher, status=LoadStatus.IN_TRANSIT)
        await seed.load(org, lead, dispatcher)  # completed, not invoiced

        await seed.invoice(org, lead, [(done, "400"), (done_too, "300"), (in_transit, "999")])

        metrics = await collect_dispatch_metrics(db_session, dispatcher.id, MONTH)

        assert metrics.completed_loads == 3
        assert metrics.invoice_total == Decimal("700")

    async def test_first_two_weeks_amount(self, db_session, seed):
        org = await seed.org()
        rep = await seed.user(org)
        dispatcher = await seed.user(org, CommissionType.DISPATCH)

        lead = await seed.lead(org, rep)
        early = await seed.load(org, lead, dispatcher)
        day_14 = await seed.load(org, lead, dispatcher)
        late = await seed.load(org, lead, dispatcher)

        await seed.invoice(org, lead, [(early, "250")], issued_date=date(2026, 3, 1))
        await seed.invoice(org, lead, [(day_14, "100")], issued_date=date(2026, 3, 14))
        await seed.invoice(org, lead, [(late, "400")], issued_date=date(2026, 3, 15))

        metrics = await collect_dispatch_metrics(db_session, dispatcher.id, MONTH)

        assert metrics.invoice_total == Decimal("750")
        assert metrics.first_two_weeks_invoice_amount == Decimal("350")

    async def test_lead_counts(self, db_session, seed):
        org = await seed.org()
        rep = await seed.user(org)
        dispatcher = await seed.user(org, CommissionType.DISPATCH)

        # Own active leads, one created this month
        await seed.lead(org, rep, created_by=dispatcher)
        await seed.lead(
            org, rep, created_by=dispatcher,
            created_at=datetime(2026, 3, 10, tzinfo=timezone.utc),
        )
        # Created this month but not active: new, not own
        await seed.lead(
            org, rep, created_by=dispatcher, status=LeadStatus.NEW,
            created_at=datetime(2026, 3, 11, tzinfo=timezone.utc),
        )

        metrics = await collect_dispatch_metrics(db_session, dispatcher.id, MONTH)

        assert metrics.own_lead_count == 2
        assert metrics.new_lead_count == 2

    async def test_active_trucks_are_distinct_active_leads(self, db_session, seed):
        org = await seed.org()
        rep = await seed.user(org)
        dispatcher = await seed.user(org, CommissionType.DISPATCH)

        first = await seed.lead(org, rep)
        second = await seed.lead(org, rep)
        lost = await seed.lead(org, rep, status=LeadStatus.LOST)

        await seed.load(org, first, dispatcher)
        await seed.load(org, first, dispatcher)
        await seed.load(org, second, dispatcher)
        await seed.load(org, lost, dispatcher)

        metrics = await collect_dispatch_metrics(db_session, dispatcher.id, MONTH)

        assert metrics.completed_loads == 4
        assert metrics.active_lead_count == 2

    async def test_month_scoped_uses_completion_date(self, db_session, seed):
        org = await seed.org()
        rep = await seed.user(org)
        dispatcher = await seed.user(org, CommissionType.DISPATCH)
        lead = await seed.lead(org, rep)

        march = await seed.load(org, lead, dispatcher, completed_at=datetime(2026, 3, 5, tzinfo=timezone.utc))
        february = await seed.load(org, lead, dispatcher, completed_at=datetime(2026, 2, 5, tzinfo=timezone.utc))
        await seed.invoice(org, lead, [(march, "700"), (february, "300")])

        scoped = await collect_dispatch_metrics(db_session, dispatcher.id, MONTH, month_scoped=True)

        assert scoped.completed_loads == 1
        assert scoped.invoice_total == Decimal("700")
        assert scoped.month_scoped is True

    async def test_empty(self, db_session, seed):
        org = await seed.org()
        dispatcher = await seed.user(org, CommissionType.DISPATCH)

        metrics = await collect_dispatch_metrics(db_session, dispatcher.id, MONTH)

        assert metrics.completed_loads == 0
        assert metrics.invoice_total == Decimal("0")
        assert metrics.as_dict()["invoice_total"] == "0"

    async def test_storage_failure(self):
        with pytest.raises(MetricsUnavailable):
            await collect_dispatch_metrics(_failing_db(), 7, MONTH)
