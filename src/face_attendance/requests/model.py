from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..attendance.model import DailyAttendanceRecord, record_id_for
from ..core.enums import ApprovalStatus, ExceptionType


@dataclass(frozen=True)
class NewExceptionRequest:
    user_id: int
    work_date: date
    exception_type: ExceptionType
    reason: str
    supporting_document: Optional[str] = None
    request_adjustment: bool = True


@dataclass(frozen=True)
class ExceptionContext:
    """Signals the rule engine reads; it never touches the record itself."""

    record: DailyAttendanceRecord
    org_late_ratio: float
    has_supporting_document: bool
    hourly_rate: Decimal


@dataclass(frozen=True)
class ExceptionDecision:
    status: ApprovalStatus
    time_adjustment_minutes: int
    adjusted_work_minutes: Optional[int]
    affect_salary: bool
    salary_deduction: Decimal
    affect_performance: bool
    performance_penalty: int
    rule: Optional[str] = None


@dataclass(frozen=True)
class ImpactOverrides:
    """Figures an approver may change when approving a request."""

    time_adjustment_minutes: Optional[int] = None
    affect_salary: Optional[bool] = None
    salary_deduction: Optional[Decimal] = None
    affect_performance: Optional[bool] = None
    performance_penalty: Optional[int] = None


@dataclass(frozen=True)
class ExceptionRequest:
    """Domain entity: an employee's request to excuse a late arrival or early leave."""

    request_id: int
    user_id: int
    work_date: date
    exception_type: ExceptionType
    reason: str
    status: ApprovalStatus
    created_at: datetime
    supporting_document: Optional[str] = None
    request_adjustment: bool = True
    time_adjustment_minutes: int = 0
    adjusted_work_minutes: Optional[int] = None
    affect_salary: bool = False
    salary_deduction: Decimal = Decimal("0.00")
    affect_performance: bool = False
    performance_penalty: int = 0
    decided_by: Optional[int] = None
    decided_at: Optional[datetime] = None
    decision_note: Optional[str] = None

    @property
    def record_id(self) -> str:
        return record_id_for(self.user_id, self.work_date)


@dataclass(frozen=True)
class AuditEntry:
    actor_id: Optional[int]
    action: str
    target: str
    details: str
    created_at: datetime
    audit_id: Optional[int] = None
