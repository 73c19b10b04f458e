from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Optional, Sequence

from ..common.datetime_utils import as_local_naive, now_local
from ..common.locks import KeyedLock
from ..core.constants import APPEND_RETRY_LIMIT
from ..core.enums import BreakStatus, ErrorCode
from ..core.exceptions import ConcurrentAppendError, InvalidTransitionError
from ..core.result import Result
from ..notifications.model import BreakEnded, BreakStarted, CheckInRecorded, CheckOutRecorded, DomainEvent
from ..notifications.sink import NotificationSink
from ..payroll.calculator.base import PayrollCalculator
from ..policy.model import AttendancePolicy
from ..policy.service import PolicyService
from ..users.repository import UserRepository
from .break_rules import check_break_start
from .factory import AttendanceStrategyFactory
from .fold import apply_adjustments, derive_daily_record
from .model import AttendanceEvent, BreakEnd, BreakStart, CheckIn, CheckOut, DailyAttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceStateEngine:
    """Validates and appends attendance events, deriving the day's record.

    Writers for one identity are serialised in-process, and every append is
    conditional on the event count the decision was based on, so two
    processes racing on the same day cannot both record a check-in.
    """

    def __init__(
        self,
        repository: AttendanceRepository,
        users: UserRepository,
        policies: PolicyService,
        *,
        sink: Optional[NotificationSink] = None,
        strategy_factory: Optional[AttendanceStrategyFactory] = None,
        calculator: Optional[PayrollCalculator] = None,
        retry_limit: int = APPEND_RETRY_LIMIT,
    ):
        self._repo = repository
        self._users = users
        self._policies = policies
        self._sink = sink
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._calculator = calculator
        self._retry_limit = max(int(retry_limit), 1)
        self._locks = KeyedLock()

    def _fold(
        self, events: Sequence[AttendanceEvent], policy: AttendancePolicy, user_id: int, day: date
    ) -> DailyAttendanceRecord:
        return derive_daily_record(
            events,
            policy,
            user_id=user_id,
            work_date=day,
            strategy_factory=self._factory,
            calculator=self._calculator,
        )

    def record_event(self, event: AttendanceEvent) -> Result[DailyAttendanceRecord]:
        user = self._users.get_by_id(int(event.user_id))
        if not user or not user.is_active:
            return Result.fail(ErrorCode.USER_INACTIVE, "User not found or inactive")

        event = replace(event, occurred_at=as_local_naive(event.occurred_at))
        day = event.work_date
        policy = self._policies.resolve(user.org_id, day)
        if isinstance(event, CheckIn) and not policy.is_working_day(day):
            return Result.fail(ErrorCode.NON_WORKING_DAY, f"Weekend work is not enabled ({day.strftime('%A')})")

        with self._locks.hold(user.user_id):
            for attempt in range(1, self._retry_limit + 1):
                existing = list(self._repo.get_events_for_day(user.user_id, day))

                if isinstance(event, BreakStart):
                    current = self._fold(existing, policy, user.user_id, day)
                    admission = check_break_start(current, at=event.occurred_at, policy=policy.breaks)
                    if not admission.allowed:
                        return Result.fail(ErrorCode.BREAK_NOT_ALLOWED, admission.reason, data=admission)

                try:
                    preview = self._fold(existing + [event], policy, user.user_id, day)
                except InvalidTransitionError as e:
                    return Result.fail(e.code, str(e))

                if isinstance(event, CheckIn):
                    event = replace(event, late=preview.is_late)

                try:
                    stored = self._repo.append_event(event, expected_count=len(existing))
                except ConcurrentAppendError:
                    logger.info(
                        "Concurrent append for user %s on %s (attempt %d/%d), re-validating",
                        user.user_id,
                        day,
                        attempt,
                        self._retry_limit,
                    )
                    continue

                record = self._fold(existing + [stored], policy, user.user_id, day)
                record = apply_adjustments(record, self._repo.get_adjustments_for_day(user.user_id, day))
                logger.info(
                    "Recorded %s for user %s at %s -> %s",
                    stored.kind.value,
                    user.user_id,
                    stored.occurred_at.isoformat(),
                    record.status.value,
                )
                self._publish(stored, record)
                return Result.ok(record)

        raise ConcurrentAppendError(
            f"Could not append {event.kind.value} for user {user.user_id} on {day} "
            f"after {self._retry_limit} attempts"
        )

    def current_record(self, user_id: int, day: date) -> Result[DailyAttendanceRecord]:
        user = self._users.get_by_id(int(user_id))
        if not user:
            return Result.fail(ErrorCode.USER_INACTIVE, "User not found")
        policy = self._policies.resolve(user.org_id, day)
        record = self._fold(self._repo.get_events_for_day(user.user_id, day), policy, user.user_id, day)
        return Result.ok(apply_adjustments(record, self._repo.get_adjustments_for_day(user.user_id, day)))

    def _publish(self, event: AttendanceEvent, record: DailyAttendanceRecord) -> None:
        if self._sink is None:
            return
        notice: Optional[DomainEvent] = None
        now = now_local()
        if isinstance(event, CheckIn):
            notice = CheckInRecorded(
                occurred_at=now,
                user_id=record.user_id,
                work_date=record.work_date,
                is_late=record.is_late,
                late_minutes=record.late_minutes,
                match_confidence=event.match_confidence,
            )
        elif isinstance(event, CheckOut):
            notice = CheckOutRecorded(
                occurred_at=now,
                user_id=record.user_id,
                work_date=record.work_date,
                work_minutes=record.work_minutes,
                overtime_minutes=record.overtime_minutes,
                is_early_leave=record.is_early_leave,
            )
        elif isinstance(event, BreakStart):
            notice = BreakStarted(
                occurred_at=now, user_id=record.user_id, work_date=record.work_date, break_type=event.break_type
            )
        elif isinstance(event, BreakEnd):
            done = [b for b in record.breaks if b.status is BreakStatus.COMPLETED]
            last = done[-1]
            notice = BreakEnded(
                occurred_at=now,
                user_id=record.user_id,
                work_date=record.work_date,
                duration_minutes=last.duration_minutes,
                exceeded=last.exceeded,
                exceeded_minutes=last.exceeded_minutes,
            )
        if notice is not None:
            self._sink.publish(notice)
