from __future__ import annotations

import logging
from decimal import Decimal
from typing import Callable, Iterable, Optional

from ..attendance.model import DailyAttendanceRecord
from ..core.constants import MASS_LATE_RATIO
from ..core.enums import ApprovalStatus, ExceptionType
from ..payroll.calculator.base import PayrollCalculator
from ..payroll.calculator.standard_calculator import StandardPayrollCalculator
from .model import ExceptionContext, ExceptionDecision, NewExceptionRequest

logger = logging.getLogger(__name__)

# A rule returns a short name when it auto-approves the request.
AutoApproveRule = Callable[[NewExceptionRequest, ExceptionContext], Optional[str]]

MASS_EVENT_TYPES = frozenset({ExceptionType.LATE_WEATHER})


def deviation_minutes(exception_type: ExceptionType, record: DailyAttendanceRecord) -> int:
    if exception_type.is_late:
        return int(record.late_minutes)
    if exception_type.is_early:
        return int(record.early_leave_minutes)
    return 0


def medical_with_document(request: NewExceptionRequest, context: ExceptionContext) -> Optional[str]:
    if request.exception_type is ExceptionType.EARLY_MEDICAL and context.has_supporting_document:
        return "medical_with_document"
    return None


def mass_late_event(threshold: float, types: Iterable[ExceptionType] = MASS_EVENT_TYPES) -> AutoApproveRule:
    mass_types = frozenset(types)

    def rule(request: NewExceptionRequest, context: ExceptionContext) -> Optional[str]:
        if request.exception_type in mass_types and context.org_late_ratio > threshold:
            return "mass_late_event"
        return None

    return rule


class ExceptionRuleEngine:
    """Decides auto-approval and computes the salary/performance impact.

    Rules run in order and the first one that fires wins. The engine only
    reads the attendance record.
    """

    def __init__(
        self,
        *,
        mass_late_ratio: float = MASS_LATE_RATIO,
        rules: Optional[Iterable[AutoApproveRule]] = None,
        calculator: Optional[PayrollCalculator] = None,
    ):
        self._rules = tuple(rules) if rules is not None else (medical_with_document, mass_late_event(mass_late_ratio))
        self._calculator = calculator or StandardPayrollCalculator()

    def evaluate(self, request: NewExceptionRequest, context: ExceptionContext) -> ExceptionDecision:
        record = context.record
        deviation = deviation_minutes(request.exception_type, record)

        if request.request_adjustment:
            impact = dict(
                time_adjustment_minutes=deviation,
                adjusted_work_minutes=record.work_minutes + deviation,
                affect_salary=False,
                salary_deduction=Decimal("0.00"),
                affect_performance=False,
                performance_penalty=0,
            )
        else:
            impact = dict(
                time_adjustment_minutes=deviation,
                adjusted_work_minutes=None,
                affect_salary=True,
                salary_deduction=self._calculator.deduction(deviation, context.hourly_rate),
                affect_performance=True,
                performance_penalty=1,
            )

        for rule in self._rules:
            name = rule(request, context)
            if name:
                logger.info(
                    "Auto-approving %s for user %s on %s (rule=%s)",
                    request.exception_type.value,
                    request.user_id,
                    request.work_date,
                    name,
                )
                return ExceptionDecision(status=ApprovalStatus.AUTO_APPROVED, rule=name, **impact)

        return ExceptionDecision(status=ApprovalStatus.PENDING, **impact)
