from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from ..policy.model import AttendancePolicy
from .strategies.base import AttendanceStrategy
from .strategies.early_strategy import EarlyLeaveStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_checkin(self, *, at: datetime, work_date: date, policy: AttendancePolicy) -> AttendanceStrategy:
        if at <= policy.late_cutoff_on(work_date):
            return NormalStrategy()
        return LateStrategy()

    def for_checkout(self, *, at: datetime, work_date: date, policy: AttendancePolicy) -> AttendanceStrategy:
        if at < policy.early_leave_cutoff_on(work_date):
            return EarlyLeaveStrategy()
        return NormalStrategy()
