from __future__ import annotations

from datetime import date, datetime

from ...common.datetime_utils import minutes_past
from ...core.enums import AttendanceStatus
from ...policy.model import AttendancePolicy
from .base import AttendanceStrategy, StatusDecision


class EarlyLeaveStrategy(AttendanceStrategy):
    """Early leave on checkout; the day keeps LATE if arrival was already late."""

    def decide_checkin(self, *, at: datetime, work_date: date, policy: AttendancePolicy) -> StatusDecision:
        raise NotImplementedError("Early leave is only decided on check-out")

    def decide_checkout(
        self, *, at: datetime, work_date: date, policy: AttendancePolicy, current: AttendanceStatus
    ) -> StatusDecision:
        minutes = minutes_past(at, policy.early_leave_cutoff_on(work_date))
        status = AttendanceStatus.EARLY_LEAVE if current == AttendanceStatus.ON_TIME else current
        return StatusDecision(
            status=status,
            minutes=minutes,
            note=f"Left {minutes} min early (shift ends {policy.shift_end:%H:%M})",
        )
