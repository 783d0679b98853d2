"""
Tests for the commission rule store.
"""

from sqlalchemy import select

import pytest

from src.models import AuditAction, AuditLog, CommissionType
from src.services.exceptions import InvalidRuleTiers
from src.services.rules import archive_rule, get_current_rule, publish_rule


class TestRuleStore:
    async def test_publish_and_resolve(self, db_session, seed):
        org = await seed.org()

        rule = await publish_rule(
            db_session, org.id, CommissionType.DISPATCH,
            [{"min": 0, "max": 649, "pct": 5}],
        )
        current = await get_current_rule(db_session, org.id, CommissionType.DISPATCH)

        assert current.id == rule.id
        assert rule.tiers == [{"min": "0", "max": "649", "pct": "5"}]

    async def test_publish_keeps_earlier_versions(self, db_session, seed):
        org = await seed.org()

        first = await publish_rule(db_session, org.id, CommissionType.SALES, [{"active": 0, "fixed": 100}])
        second = await publish_rule(db_session, org.id, CommissionType.SALES, [{"active": 0, "fixed": 200}])

        current = await get_current_rule(db_session, org.id, CommissionType.SALES)
        assert current.id == second.id
        assert first.tiers == [{"active": 0, "fixed": "100"}]

    async def test_publish_writes_audit_log(self, db_session, seed):
        org = await seed.org()
        user = await seed.user(org)

        rule = await publish_rule(db_session, org.id, CommissionType.SALES, [{"active": 0}], updated_by=user.id)
        await db_session.flush()

        result = await db_session.execute(
            select(AuditLog).where(AuditLog.action == AuditAction.COMMISSION_RULE_PUBLISHED)
        )
        entry = result.scalar_one()
        assert entry.target_id == rule.id
        assert entry.user_id == user.id

    async def test_invalid_tiers_rejected(self, db_session, seed):
        org = await seed.org()

        with pytest.raises(InvalidRuleTiers):
            await publish_rule(db_session, org.id, CommissionType.DISPATCH, [{"active": 5}])

        assert await get_current_rule(db_session, org.id, CommissionType.DISPATCH) is None

    async def test_archive_falls_back_to_previous_version(self, db_session, seed):
        org = await seed.org()

        first = await publish_rule(db_session, org.id, CommissionType.SALES, [{"active": 0, "fixed": 100}])
        second = await publish_rule(db_session, org.id, CommissionType.SALES, [{"active": 0, "fixed": 200}])

        archived = await archive_rule(db_session, second.id)

        assert archived.is_archived
        current = await get_current_rule(db_session, org.id, CommissionType.SALES)
        assert current.id == first.id

    async def test_archive_unknown_rule(self, db_session):
        assert await archive_rule(db_session, 404) is None

    async def test_rules_are_per_organization(self, db_session, seed):
        acme = await seed.org("acme")
        globex = await seed.org("globex")

        await publish_rule(db_session, acme.id, CommissionType.SALES, [{"active": 0}])

        assert await get_current_rule(db_session, globex.id, CommissionType.SALES) is None

    async def test_user_without_organization(self, db_session):
        assert await get_current_rule(db_session, None, CommissionType.SALES) is None
