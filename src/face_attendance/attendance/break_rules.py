from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import whole_minutes
from ..core.enums import BreakStatus, DayStatus
from ..policy.model import BreakPolicy
from .model import BreakSession, DailyAttendanceRecord


def close_break(
    session: BreakSession,
    *,
    ended_at: datetime,
    prior: Sequence[BreakSession],
    policy: BreakPolicy,
    implicit: bool = False,
) -> BreakSession:
    """Close an in-progress session against the day's earlier completed sessions.

    ``exceeded_minutes`` is the cumulative excess over the day allowance.
    Paid minutes come out of whatever paid allowance the earlier sessions left.
    """
    duration = whole_minutes(session.started_at, ended_at)
    prior_total = sum(s.duration_minutes for s in prior)
    prior_paid = sum(s.paid_minutes for s in prior)

    exceeded_minutes = max(prior_total + duration - policy.total_duration_minutes, 0)
    paid = min(max(policy.paid_allowance_minutes - prior_paid, 0), duration)
    unpaid = duration - paid

    return BreakSession(
        seq=session.seq,
        break_type=session.break_type,
        started_at=session.started_at,
        ended_at=ended_at,
        duration_minutes=duration,
        status=BreakStatus.COMPLETED,
        exceeded=exceeded_minutes > 0,
        exceeded_minutes=exceeded_minutes,
        paid_minutes=paid,
        unpaid_minutes=unpaid,
        is_paid=unpaid == 0,
        implicitly_closed=implicit,
    )


@dataclass(frozen=True)
class BreakAdmission:
    allowed: bool
    reason: Optional[str] = None
    remaining_minutes: int = 0


def check_break_start(record: DailyAttendanceRecord, *, at: datetime, policy: BreakPolicy) -> BreakAdmission:
    """Admission rules for a new break on a checked-in day.

    Only meaningful for ``checked_in`` records; other states are left to the
    state machine so the caller gets the precise transition error.
    """
    if record.status is not DayStatus.CHECKED_IN or record.clock_in is None:
        return BreakAdmission(allowed=True)

    used = record.break_minutes
    remaining = max(policy.total_duration_minutes - used, 0)

    worked = whole_minutes(record.clock_in, at) - used
    required = int(round(policy.min_work_hours_required * 60))
    if worked < required:
        return BreakAdmission(
            allowed=False,
            reason=f"Must work at least {policy.min_work_hours_required:g} hours before taking a break",
            remaining_minutes=remaining,
        )

    if used >= policy.total_duration_minutes:
        return BreakAdmission(
            allowed=False,
            reason=f"Break time quota exhausted ({policy.total_duration_minutes} minutes)",
        )

    taken = len(record.breaks)
    if policy.is_flexible:
        if taken >= policy.max_splits:
            return BreakAdmission(
                allowed=False,
                reason=f"Maximum {policy.max_splits} break sessions allowed",
                remaining_minutes=remaining,
            )
    elif taken > 0:
        return BreakAdmission(allowed=False, reason="Break already taken (non-flexible policy)")

    if policy.earliest_break_time and at.time() < policy.earliest_break_time:
        return BreakAdmission(
            allowed=False,
            reason=f"Break can only be taken after {policy.earliest_break_time:%H:%M}",
            remaining_minutes=remaining,
        )
    if policy.latest_break_time and at.time() > policy.latest_break_time:
        return BreakAdmission(
            allowed=False,
            reason=f"Break must be taken before {policy.latest_break_time:%H:%M}",
        )

    return BreakAdmission(allowed=True, remaining_minutes=remaining)
