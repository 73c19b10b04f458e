from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class DomainEvent:
    """Something the surrounding system may forward to users as a notification."""

    occurred_at: datetime

    @property
    def name(self) -> str:
        return type(self).__name__


@dataclass(frozen=True)
class CheckInRecorded(DomainEvent):
    user_id: int
    work_date: date
    is_late: bool
    late_minutes: int
    match_confidence: Optional[float]


@dataclass(frozen=True)
class CheckOutRecorded(DomainEvent):
    user_id: int
    work_date: date
    work_minutes: int
    overtime_minutes: int
    is_early_leave: bool


@dataclass(frozen=True)
class BreakStarted(DomainEvent):
    user_id: int
    work_date: date
    break_type: str


@dataclass(frozen=True)
class BreakEnded(DomainEvent):
    user_id: int
    work_date: date
    duration_minutes: int
    exceeded: bool
    exceeded_minutes: int


@dataclass(frozen=True)
class ExceptionAutoApproved(DomainEvent):
    request_id: int
    user_id: int
    work_date: date
    exception_type: str


@dataclass(frozen=True)
class ExceptionDecided(DomainEvent):
    request_id: int
    user_id: int
    status: str
    decided_by: int


@dataclass(frozen=True)
class PolicyFallbackUsed(DomainEvent):
    org_id: int
    on_date: date
