from __future__ import annotations

from datetime import date, datetime

from ...common.datetime_utils import minutes_past
from ...core.enums import AttendanceStatus
from ...policy.model import AttendancePolicy
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Late check-in: minutes counted from shift start + late threshold."""

    def decide_checkin(self, *, at: datetime, work_date: date, policy: AttendancePolicy) -> StatusDecision:
        minutes = minutes_past(policy.late_cutoff_on(work_date), at)
        return StatusDecision(
            status=AttendanceStatus.LATE,
            minutes=minutes,
            note=f"Late by {minutes} min (shift starts {policy.shift_start:%H:%M})",
        )

    def decide_checkout(
        self, *, at: datetime, work_date: date, policy: AttendancePolicy, current: AttendanceStatus
    ) -> StatusDecision:
        return StatusDecision(status=current)
