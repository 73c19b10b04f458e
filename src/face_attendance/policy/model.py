from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Optional

from ..core.constants import (
    DEFAULT_BREAK_MAX_SPLITS,
    DEFAULT_BREAK_TOTAL_MINUTES,
    DEFAULT_EARLY_LEAVE_THRESHOLD_MINUTES,
    DEFAULT_LATE_THRESHOLD_MINUTES,
    DEFAULT_SHIFT_END,
    DEFAULT_SHIFT_START,
)


@dataclass(frozen=True)
class BreakPolicy:
    total_duration_minutes: int = DEFAULT_BREAK_TOTAL_MINUTES
    # None means every allowed break minute is paid.
    paid_duration_minutes: Optional[int] = None
    is_flexible: bool = True
    max_splits: int = DEFAULT_BREAK_MAX_SPLITS
    min_work_hours_required: float = 0.0
    earliest_break_time: Optional[time] = None
    latest_break_time: Optional[time] = None

    @property
    def paid_allowance_minutes(self) -> int:
        if self.paid_duration_minutes is None:
            return self.total_duration_minutes
        return min(self.paid_duration_minutes, self.total_duration_minutes)


@dataclass(frozen=True)
class AttendancePolicy:
    """Domain entity: per-organization attendance rules, effective from a date."""

    org_id: int
    effective_from: date
    shift_start: time = DEFAULT_SHIFT_START
    shift_end: time = DEFAULT_SHIFT_END
    late_threshold_minutes: int = DEFAULT_LATE_THRESHOLD_MINUTES
    early_leave_threshold_minutes: int = DEFAULT_EARLY_LEAVE_THRESHOLD_MINUTES
    overtime_enabled: bool = True
    overtime_rate: Decimal = Decimal("1.5")
    weekend_work_enabled: bool = False
    breaks: BreakPolicy = field(default_factory=BreakPolicy)
    is_default: bool = False
    policy_id: Optional[int] = None

    def shift_start_on(self, day: date) -> datetime:
        return datetime.combine(day, self.shift_start)

    def shift_end_on(self, day: date) -> datetime:
        end = datetime.combine(day, self.shift_end)
        if self.shift_end <= self.shift_start:
            end += timedelta(days=1)
        return end

    def late_cutoff_on(self, day: date) -> datetime:
        return self.shift_start_on(day) + timedelta(minutes=self.late_threshold_minutes)

    def early_leave_cutoff_on(self, day: date) -> datetime:
        return self.shift_end_on(day) - timedelta(minutes=self.early_leave_threshold_minutes)

    def is_working_day(self, day: date) -> bool:
        return self.weekend_work_enabled or day.weekday() < 5


def default_policy(org_id: int) -> AttendancePolicy:
    """Documented fallback: 08:00-17:00, 15 minute late threshold."""
    return AttendancePolicy(org_id=int(org_id), effective_from=date.min, is_default=True)
