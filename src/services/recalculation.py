"""
Commission recalculation coordinator.

The only entry point that runs a calculator and writes the monthly record.
Each (user_id, month) goes Idle -> Calculating -> Idle under its own lock,
and each unit of work is one transaction: read rule and metrics, compute,
upsert, commit. Any failure rolls the whole unit back.

Writers in other processes are caught by the unique (user_id, month) key
and the record's version counter; the losing unit is retried with freshly
read metrics.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from src.config import Settings, get_settings
from src.models import AuditAction, CommissionMonthly, CommissionType, Role, User
from src.services.commission import CALCULATORS
from src.services.commission_store import get_commission_monthly
from src.services.exceptions import ConcurrentRecalculationConflict
from src.services.locks import KeyedLock
from src.services.notifications import (
    AuditLogSink,
    CommissionUpdated,
    CompositeSink,
    LoggingSink,
    NotificationSink,
)
from src.utils.audit import log_action
from src.utils.months import parse_month

logger = logging.getLogger(__name__)

COMMISSION_TYPES = (CommissionType.SALES, CommissionType.DISPATCH)


class _UnitResult(NamedTuple):
    record: Optional[CommissionMonthly]
    written: bool


@dataclass
class BatchResult:
    """Outcome of a calculate-all sweep."""

    month: str
    records: List[CommissionMonthly] = field(default_factory=list)
    skipped: int = 0
    failed_user_ids: List[int] = field(default_factory=list)
    cancelled: bool = False

    @property
    def processed(self) -> int:
        return len(self.records)


class RecalculationCoordinator:
    """
    Serializes and runs commission recalculations.

    Args:
        session_factory: Produces one session per unit of work
        sink: Receives a CommissionUpdated fact after each committed write
        settings: Engine settings (retries, concurrency, policies)
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        sink: Optional[NotificationSink] = None,
        settings: Optional[Settings] = None,
    ):
        self._session_factory = session_factory
        self._sink = sink or LoggingSink()
        self._settings = settings or get_settings()
        self._locks = KeyedLock()

    @property
    def locks(self) -> KeyedLock:
        return self._locks

    async def trigger(
        self,
        user_id: int,
        month: str,
        calculated_by: Optional[int] = None,
    ) -> Optional[CommissionMonthly]:
        """
        Recalculate one user's commission for a month.

        Returns:
            The stored record, the untouched approved record when overwriting
            approved records is disabled, or None when there is nothing to
            calculate (unknown user, role without a commission type, no rule)

        Raises:
            InvalidMonth: month is not YYYY-MM
            MetricsUnavailable: leads/loads/invoices could not be read
            ConcurrentRecalculationConflict: retries exhausted
        """
        parse_month(month)

        async with self._locks.hold((user_id, month)):
            result = await self._run_with_retries(user_id, month, calculated_by)

        if result.written and result.record is not None:
            await self._publish(result.record, calculated_by)

        return result.record

    async def calculate_all(
        self,
        month: str,
        calculated_by: Optional[int] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> BatchResult:
        """
        Recalculate every active sales and dispatch user for a month.

        Users run with bounded concurrency, each under its own lock. One
        user's failure is logged and recorded without stopping the sweep.
        Setting cancel_event stops the sweep before the next user; a user
        already being calculated is allowed to finish.
        """
        parse_month(month)
        batch = BatchResult(month=month)

        async with self._session_factory() as db:
            result = await db.execute(
                select(User.id, Role.commission_type)
                .join(Role, Role.id == User.role_id)
                .where(User.is_active == True)
                .order_by(User.id)
            )
            rows = result.all()

        user_ids = [user_id for user_id, kind in rows if kind in COMMISSION_TYPES]
        batch.skipped = len(rows) - len(user_ids)

        semaphore = asyncio.Semaphore(self._settings.commission_batch_concurrency)
        records = {}

        async def run_one(user_id: int) -> None:
            async with semaphore:
                if cancel_event is not None and cancel_event.is_set():
                    batch.cancelled = True
                    return
                try:
                    record = await asyncio.shield(self.trigger(user_id, month, calculated_by))
                except asyncio.CancelledError:
                    batch.cancelled = True
                    raise
                except Exception as e:
                    logger.error(f"Commission sweep failed for user {user_id} ({month}): {e}", exc_info=True)
                    batch.failed_user_ids.append(user_id)
                    return

                if record is not None:
                    records[user_id] = record
                else:
                    batch.skipped += 1

        await asyncio.gather(*(run_one(user_id) for user_id in user_ids))

        batch.records = [records[user_id] for user_id in sorted(records)]
        batch.failed_user_ids.sort()

        await self._record_batch(batch, calculated_by)

        logger.info(
            f"Commission sweep {month}: {batch.processed} calculated, "
            f"{batch.skipped} skipped, {len(batch.failed_user_ids)} failed"
            + (" (cancelled)" if batch.cancelled else "")
        )
        return batch

    async def _run_with_retries(
        self,
        user_id: int,
        month: str,
        calculated_by: Optional[int],
    ) -> _UnitResult:
        attempts = self._settings.commission_conflict_retries
        for attempt in range(1, attempts + 1):
            try:
                return await self._calculate_once(user_id, month, calculated_by)
            except (IntegrityError, StaleDataError) as e:
                logger.warning(
                    f"Commission write conflict for user {user_id} ({month}), "
                    f"attempt {attempt}/{attempts}: {e}"
                )
        raise ConcurrentRecalculationConflict(user_id, month, attempts)

    async def _calculate_once(
        self,
        user_id: int,
        month: str,
        calculated_by: Optional[int],
    ) -> _UnitResult:
        async with self._session_factory() as db:
            try:
                user = await db.get(User, user_id)
                if not user or not user.is_active:
                    logger.warning(f"User {user_id} not found or inactive, nothing to calculate")
                    return _UnitResult(None, False)

                commission_type = user.role.commission_type
                calculator = CALCULATORS.get(commission_type)
                if calculator is None:
                    logger.debug(f"Role of user {user_id} earns no commission")
                    return _UnitResult(None, False)

                existing = await get_commission_monthly(db, user_id, month)
                if existing and existing.is_approved and not self._settings.commission_overwrite_approved:
                    logger.warning(
                        f"Commission {existing.id} for user {user_id} ({month}) is approved, "
                        f"not recalculating"
                    )
                    return _UnitResult(existing, False)

                record = await calculator(
                    db,
                    user,
                    month,
                    updated_by=calculated_by,
                    month_scoped=self._settings.commission_month_scoped_metrics,
                )
                if record is None:
                    await db.rollback()
                    return _UnitResult(None, False)

                await db.commit()
            except Exception:
                await db.rollback()
                raise

        logger.info(
            f"Commission {record.type.value} for user {user_id} ({month}) stored: {record.amount}"
        )
        return _UnitResult(record, True)

    async def _publish(self, record: CommissionMonthly, calculated_by: Optional[int]) -> None:
        fact = CommissionUpdated(
            commission_id=record.id,
            user_id=record.user_id,
            org_id=record.org_id,
            month=record.month,
            type=record.type,
            amount=record.amount,
            calculated_by=calculated_by,
        )
        try:
            await asyncio.wait_for(
                self._sink.publish(fact),
                timeout=self._settings.commission_notification_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Commission update notification timed out for commission {record.id}")
        except Exception as e:
            logger.warning(f"Commission update notification failed for commission {record.id}: {e}")

    async def _record_batch(self, batch: BatchResult, calculated_by: Optional[int]) -> None:
        try:
            async with self._session_factory() as db:
                log_action(
                    db,
                    user_id=calculated_by,
                    action=AuditAction.COMMISSION_CALCULATED_ALL,
                    target_type="commission_monthly",
                    action_metadata={
                        "month": batch.month,
                        "processed": batch.processed,
                        "skipped": batch.skipped,
                        "failed_user_ids": batch.failed_user_ids,
                        "cancelled": batch.cancelled,
                    },
                )
                await db.commit()
        except Exception as e:
            logger.warning(f"Failed to record commission sweep for {batch.month}: {e}")


# Global coordinator instance
_coordinator: Optional[RecalculationCoordinator] = None


def get_coordinator() -> RecalculationCoordinator:
    """Get the process-wide coordinator, creating it on first use."""
    global _coordinator
    if _coordinator is None:
        from src.db import AsyncSessionLocal

        _coordinator = RecalculationCoordinator(
            session_factory=AsyncSessionLocal,
            sink=CompositeSink([LoggingSink(), AuditLogSink(AsyncSessionLocal)]),
        )
    return _coordinator
