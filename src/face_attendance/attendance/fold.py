from __future__ import annotations

import sys
from dataclasses import replace
from datetime import date
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import whole_minutes
from ..core.enums import AttendanceStatus, DayStatus, ErrorCode
from ..core.exceptions import InvalidTransitionError
from ..payroll.calculator.base import PayrollCalculator
from ..payroll.calculator.standard_calculator import StandardPayrollCalculator
from ..policy.model import AttendancePolicy
from .break_rules import close_break
from .factory import AttendanceStrategyFactory
from .model import (
    AttendanceEvent,
    BreakEnd,
    BreakSession,
    BreakStart,
    CheckIn,
    CheckOut,
    DailyAttendanceRecord,
    WorkHourAdjustment,
)

_DEFAULT_FACTORY = AttendanceStrategyFactory()
_DEFAULT_CALCULATOR = StandardPayrollCalculator()


def ordered(events: Iterable[AttendanceEvent]) -> list[AttendanceEvent]:
    """Chronological order; unsaved events sort after saved ones at the same instant."""
    return sorted(
        events,
        key=lambda e: (e.occurred_at, e.event_id if e.event_id is not None else sys.maxsize),
    )


def derive_daily_record(
    events: Sequence[AttendanceEvent],
    policy: AttendancePolicy,
    *,
    user_id: Optional[int] = None,
    work_date: Optional[date] = None,
    strategy_factory: Optional[AttendanceStrategyFactory] = None,
    calculator: Optional[PayrollCalculator] = None,
) -> DailyAttendanceRecord:
    """Pure fold of one identity's events for one day into a record.

    Raises :class:`InvalidTransitionError` when the sequence is not a legal
    walk of ``not_started -> checked_in -> (on_break <-> checked_in) -> checked_out``.
    """
    items = ordered(events)
    if user_id is None or work_date is None:
        if not items:
            raise ValueError("user_id and work_date are required for an empty event list")
        user_id = items[0].user_id if user_id is None else user_id
        work_date = items[0].work_date if work_date is None else work_date

    factory = strategy_factory or _DEFAULT_FACTORY
    calc = calculator or _DEFAULT_CALCULATOR

    status = DayStatus.NOT_STARTED
    check_in: Optional[CheckIn] = None
    check_out: Optional[CheckOut] = None
    closed: list[BreakSession] = []
    open_session: Optional[BreakSession] = None

    for event in items:
        if isinstance(event, CheckIn):
            if status is not DayStatus.NOT_STARTED:
                raise InvalidTransitionError(ErrorCode.ALREADY_CHECKED_IN, "Already checked in today")
            check_in = event
            status = DayStatus.CHECKED_IN

        elif isinstance(event, CheckOut):
            _reject_after_checkout(status)
            if status is DayStatus.NOT_STARTED:
                raise InvalidTransitionError(ErrorCode.NOT_CHECKED_IN, "Must check in before checking out")
            if open_session is not None:
                closed.append(
                    close_break(
                        open_session, ended_at=event.occurred_at, prior=closed, policy=policy.breaks, implicit=True
                    )
                )
                open_session = None
            check_out = event
            status = DayStatus.CHECKED_OUT

        elif isinstance(event, BreakStart):
            _reject_after_checkout(status)
            if status is DayStatus.NOT_STARTED:
                raise InvalidTransitionError(ErrorCode.NOT_CHECKED_IN, "Must check in before starting a break")
            if status is DayStatus.ON_BREAK:
                raise InvalidTransitionError(ErrorCode.BREAK_IN_PROGRESS, "A break is already in progress")
            open_session = BreakSession(
                seq=len(closed) + 1, break_type=event.break_type, started_at=event.occurred_at
            )
            status = DayStatus.ON_BREAK

        elif isinstance(event, BreakEnd):
            _reject_after_checkout(status)
            if open_session is None:
                raise InvalidTransitionError(ErrorCode.NO_ACTIVE_BREAK, "No active break to end")
            closed.append(close_break(open_session, ended_at=event.occurred_at, prior=closed, policy=policy.breaks))
            open_session = None
            status = DayStatus.CHECKED_IN

        else:
            raise TypeError(f"Unsupported attendance event: {type(event).__name__}")

    if check_in is None:
        return DailyAttendanceRecord(user_id=int(user_id), work_date=work_date)

    break_minutes = sum(s.duration_minutes for s in closed)
    breaks = tuple(closed) + ((open_session,) if open_session is not None else ())

    arrival = factory.for_checkin(at=check_in.occurred_at, work_date=work_date, policy=policy).decide_checkin(
        at=check_in.occurred_at, work_date=work_date, policy=policy
    )
    attendance_status = arrival.status
    early_minutes = 0
    work_minutes = 0
    overtime = 0

    if check_out is not None:
        out_at = check_out.occurred_at
        departure = factory.for_checkout(at=out_at, work_date=work_date, policy=policy).decide_checkout(
            at=out_at, work_date=work_date, policy=policy, current=arrival.status
        )
        attendance_status = departure.status
        early_minutes = departure.minutes
        work_minutes = calc.worked_minutes(check_in.occurred_at, out_at, break_minutes)
        if policy.overtime_enabled:
            overtime = whole_minutes(max(policy.shift_end_on(work_date), check_in.occurred_at), out_at)

    return DailyAttendanceRecord(
        user_id=int(user_id),
        work_date=work_date,
        status=status,
        clock_in=check_in.occurred_at,
        clock_out=check_out.occurred_at if check_out else None,
        breaks=breaks,
        break_minutes=break_minutes,
        is_late=arrival.status == AttendanceStatus.LATE,
        late_minutes=arrival.minutes,
        is_early_leave=early_minutes > 0,
        early_leave_minutes=early_minutes,
        work_minutes=work_minutes,
        overtime_minutes=overtime,
        attendance_status=attendance_status,
        check_in_confidence=check_in.match_confidence,
    )


def apply_adjustments(
    record: DailyAttendanceRecord, adjustments: Sequence[WorkHourAdjustment]
) -> DailyAttendanceRecord:
    """Overlay the most recent approved adjustment, if any.

    The adjustment is carried as a delta over the work total it was approved
    against, so one approved while the day was still open keeps its effect
    once check-out fills in the real total.
    """
    if not adjustments:
        return record
    latest = max(adjustments, key=lambda a: (a.created_at, a.adjustment_id or 0))
    return replace(
        record,
        adjusted_work_minutes=max(record.work_minutes + latest.delta_minutes, 0),
        adjustment_reason=latest.reason,
    )


def _reject_after_checkout(status: DayStatus) -> None:
    if status is DayStatus.CHECKED_OUT:
        raise InvalidTransitionError(ErrorCode.ALREADY_CHECKED_OUT, "Already checked out today")
