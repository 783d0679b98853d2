"""
Tests for lead/load status triggers.
"""

from datetime import datetime, timezone
from types import SimpleNamespace

from src.models import Lead, LeadStatus, Load, LoadStatus
from src.services.events import (
    apply_lead_status,
    apply_load_status,
    on_lead_status_changed,
    on_load_status_changed,
)
from src.services.exceptions import MetricsUnavailable

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


class FakeCoordinator:
    def __init__(self, error=None):
        self.calls = []
        self.error = error

    async def trigger(self, user_id, month, calculated_by=None):
        self.calls.append((user_id, month))
        if self.error:
            raise self.error
        return SimpleNamespace(user_id=user_id, month=month)


def _lead(status=LeadStatus.HAND_TO_DISPATCH, assigned_to=7):
    return Lead(id=1, status=status, assigned_to=assigned_to, created_by=assigned_to)


def _load(status=LoadStatus.DELIVERED, assigned_to=9):
    return Load(id=2, lead_id=1, status=status, assigned_to=assigned_to, created_by=assigned_to)


# ── Status helpers ────────────────────────────────────────


class TestApplyStatus:
    def test_lead_activation_is_stamped(self):
        lead = _lead()
        previous = apply_lead_status(lead, LeadStatus.ACTIVE, now=NOW)

        assert previous == LeadStatus.HAND_TO_DISPATCH
        assert lead.status == LeadStatus.ACTIVE
        assert lead.activated_at == NOW

    def test_lead_already_active_keeps_stamp(self):
        lead = _lead(status=LeadStatus.ACTIVE)
        lead.activated_at = NOW

        apply_lead_status(lead, LeadStatus.ACTIVE, now=datetime(2026, 4, 1, tzinfo=timezone.utc))

        assert lead.activated_at == NOW

    def test_other_lead_status_not_stamped(self):
        lead = _lead(status=LeadStatus.NEW)
        apply_lead_status(lead, LeadStatus.IN_PROGRESS, now=NOW)
        assert lead.activated_at is None

    def test_load_completion_is_stamped(self):
        load = _load()
        previous = apply_load_status(load, LoadStatus.COMPLETED, now=NOW)

        assert previous == LoadStatus.DELIVERED
        assert load.completed_at == NOW


# ── Lead trigger ──────────────────────────────────────────


class TestLeadTrigger:
    async def test_activation_triggers_assignee(self):
        coordinator = FakeCoordinator()
        lead = _lead(status=LeadStatus.ACTIVE)

        result = await on_lead_status_changed(coordinator, lead, LeadStatus.HAND_TO_DISPATCH, month="2026-03")

        assert coordinator.calls == [(7, "2026-03")]
        assert result.user_id == 7

    async def test_defaults_to_current_month(self):
        coordinator = FakeCoordinator()
        lead = _lead(status=LeadStatus.ACTIVE)

        await on_lead_status_changed(coordinator, lead, LeadStatus.NEW)

        month = coordinator.calls[0][1]
        assert len(month) == 7 and month[4] == "-"

    async def test_non_active_status_does_not_trigger(self):
        coordinator = FakeCoordinator()
        lead = _lead(status=LeadStatus.FOLLOW_UP)

        assert await on_lead_status_changed(coordinator, lead, LeadStatus.IN_PROGRESS) is None
        assert coordinator.calls == []

    async def test_already_active_does_not_trigger(self):
        coordinator = FakeCoordinator()
        lead = _lead(status=LeadStatus.ACTIVE)

        await on_lead_status_changed(coordinator, lead, LeadStatus.ACTIVE)

        assert coordinator.calls == []

    async def test_coordinator_error_is_swallowed(self):
        coordinator = FakeCoordinator(error=MetricsUnavailable(7, "2026-03", "down"))
        lead = _lead(status=LeadStatus.ACTIVE)

        result = await on_lead_status_changed(coordinator, lead, LeadStatus.NEW, month="2026-03")

        assert result is None
        assert coordinator.calls == [(7, "2026-03")]


# ── Load trigger ──────────────────────────────────────────


class TestLoadTrigger:
    async def test_completion_triggers_dispatcher(self):
        coordinator = FakeCoordinator()
        load = _load(status=LoadStatus.COMPLETED)

        await on_load_status_changed(coordinator, load, LoadStatus.DELIVERED, month="2026-03")

        assert coordinator.calls == [(9, "2026-03")]

    async def test_other_transitions_do_not_trigger(self):
        coordinator = FakeCoordinator()

        await on_load_status_changed(coordinator, _load(status=LoadStatus.IN_TRANSIT), LoadStatus.BOOKED)
        await on_load_status_changed(coordinator, _load(status=LoadStatus.COMPLETED), LoadStatus.COMPLETED)
        await on_load_status_changed(coordinator, _load(status=LoadStatus.INVOICED), LoadStatus.COMPLETED)

        assert coordinator.calls == []

    async def test_coordinator_error_is_swallowed(self):
        coordinator = FakeCoordinator(error=RuntimeError("boom"))
        load = _load(status=LoadStatus.COMPLETED)

        assert await on_load_status_changed(coordinator, load, LoadStatus.DELIVERED) is None
