from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import Optional


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def worked_minutes(self, clock_in: datetime, clock_out: Optional[datetime], break_minutes: int) -> int:
        raise NotImplementedError

    @abstractmethod
    def deduction(self, minutes: int, hourly_rate: Decimal) -> Decimal:
        raise NotImplementedError
