"""
Commission update fan-out.

The coordinator publishes a CommissionUpdated fact after every committed
recalculation. Sinks are best-effort: the coordinator bounds them with a
timeout and swallows their errors, so they never fail a calculation.
"""

import logging
from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Protocol

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.models import AuditAction, CommissionType
from src.utils.audit import log_action

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommissionUpdated:
    """A monthly commission record was written."""

    commission_id: int
    user_id: int
    org_id: Optional[int]
    month: str
    type: CommissionType
    amount: Decimal
    calculated_by: Optional[int] = None

    def as_payload(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["type"] = self.type.value
        payload["amount"] = str(self.amount)
        return payload


class NotificationSink(Protocol):
    async def publish(self, fact: CommissionUpdated) -> None:
        ...


class LoggingSink:
    """Writes each fact to the application log."""

    async def publish(self, fact: CommissionUpdated) -> None:
        logger.info(
            f"Commission updated: user {fact.user_id} {fact.month} "
            f"{fact.type.value} = {fact.amount}"
        )


class AuditLogSink:
    """Records each fact as an audit log entry, in its own transaction."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def publish(self, fact: CommissionUpdated) -> None:
        async with self._session_factory() as db:
            log_action(
                db,
                user_id=fact.calculated_by,
                action=AuditAction.COMMISSION_CALCULATED,
                target_type="commission_monthly",
                target_id=fact.commission_id,
                action_metadata=fact.as_payload(),
            )
            await db.commit()


class CompositeSink:
    """Fans a fact out to several sinks; one failing sink doesn't stop the rest."""

    def __init__(self, sinks: Iterable[NotificationSink]):
        self._sinks: List[NotificationSink] = list(sinks)

    async def publish(self, fact: CommissionUpdated) -> None:
        for sink in self._sinks:
            try:
                await sink.publish(fact)
            except Exception as e:
                logger.warning(
                    f"{type(sink).__name__} failed for commission {fact.commission_id}: {e}"
                )
