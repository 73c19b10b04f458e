from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from ...common.datetime_utils import whole_minutes
from .base import PayrollCalculator

CENT = Decimal("0.01")


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule: (out - in) - break_minutes, not below 0."""

    def worked_minutes(self, clock_in: datetime, clock_out: Optional[datetime], break_minutes: int) -> int:
        if not clock_out:
            return 0
        minutes = whole_minutes(clock_in, clock_out)
        minutes -= int(break_minutes or 0)
        return max(minutes, 0)

    def deduction(self, minutes: int, hourly_rate: Decimal) -> Decimal:
        """Pay for ``minutes`` at ``hourly_rate``, rounded to 2 decimal places."""
        if minutes <= 0:
            return Decimal("0.00")
        amount = Decimal(int(minutes)) / Decimal(60) * Decimal(hourly_rate)
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)
