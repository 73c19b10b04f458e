from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import ClassVar, Optional

from ..core.enums import AttendanceStatus, BreakStatus, DayStatus, EventKind


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float
    label: Optional[str] = None


@dataclass(frozen=True)
class AttendanceEvent:
    """Append-only fact about one identity's day.

    The union is closed: :class:`CheckIn`, :class:`CheckOut`,
    :class:`BreakStart` and :class:`BreakEnd`. ``match_confidence`` is only
    present for biometric events; manual entries leave it ``None``.
    """

    kind: ClassVar[EventKind]

    user_id: int
    occurred_at: datetime
    location: Optional[Location] = None
    match_confidence: Optional[float] = None
    verified: bool = False
    event_id: Optional[int] = None

    @property
    def work_date(self) -> date:
        return self.occurred_at.date()

    def with_id(self, event_id: int) -> "AttendanceEvent":
        return replace(self, event_id=int(event_id))


@dataclass(frozen=True)
class CheckIn(AttendanceEvent):
    kind: ClassVar[EventKind] = EventKind.CHECK_IN

    # Classification snapshot at recording time; feeds the org-wide late ratio only.
    late: bool = False


@dataclass(frozen=True)
class CheckOut(AttendanceEvent):
    kind: ClassVar[EventKind] = EventKind.CHECK_OUT


@dataclass(frozen=True)
class BreakStart(AttendanceEvent):
    kind: ClassVar[EventKind] = EventKind.BREAK_START

    break_type: str = "meal"


@dataclass(frozen=True)
class BreakEnd(AttendanceEvent):
    kind: ClassVar[EventKind] = EventKind.BREAK_END


EVENT_TYPES: dict[EventKind, type[AttendanceEvent]] = {
    EventKind.CHECK_IN: CheckIn,
    EventKind.CHECK_OUT: CheckOut,
    EventKind.BREAK_START: BreakStart,
    EventKind.BREAK_END: BreakEnd,
}


def make_event(kind: EventKind | str, **fields) -> AttendanceEvent:
    """Build the event variant for ``kind`` (raises ``ValueError`` for unknown kinds)."""
    return EVENT_TYPES[EventKind(kind)](**fields)


@dataclass(frozen=True)
class BreakSession:
    seq: int
    break_type: str
    started_at: datetime
    ended_at: Optional[datetime] = None
    duration_minutes: int = 0
    status: BreakStatus = BreakStatus.IN_PROGRESS
    exceeded: bool = False
    exceeded_minutes: int = 0
    paid_minutes: int = 0
    unpaid_minutes: int = 0
    is_paid: bool = True
    implicitly_closed: bool = False


def record_id_for(user_id: int, work_date: date) -> str:
    return f"{int(user_id)}:{work_date.isoformat()}"


@dataclass(frozen=True)
class DailyAttendanceRecord:
    """Domain entity: one identity's derived attendance for one calendar day."""

    user_id: int
    work_date: date
    status: DayStatus = DayStatus.NOT_STARTED
    clock_in: Optional[datetime] = None
    clock_out: Optional[datetime] = None
    breaks: tuple[BreakSession, ...] = ()
    break_minutes: int = 0
    is_late: bool = False
    late_minutes: int = 0
    is_early_leave: bool = False
    early_leave_minutes: int = 0
    work_minutes: int = 0
    overtime_minutes: int = 0
    attendance_status: AttendanceStatus = AttendanceStatus.ON_TIME
    check_in_confidence: Optional[float] = None
    adjusted_work_minutes: Optional[int] = None
    adjustment_reason: Optional[str] = None
    record_id: str = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "record_id", record_id_for(self.user_id, self.work_date))

    @property
    def open_break(self) -> Optional[BreakSession]:
        for b in self.breaks:
            if b.status is BreakStatus.IN_PROGRESS:
                return b
        return None

    @property
    def effective_work_minutes(self) -> int:
        if self.adjusted_work_minutes is not None:
            return self.adjusted_work_minutes
        return self.work_minutes


@dataclass(frozen=True)
class WorkHourAdjustment:
    """Approved correction overlaying a derived record; the events stay untouched."""

    user_id: int
    work_date: date
    exception_id: int
    original_minutes: int
    adjusted_minutes: int
    reason: str
    approved_by: Optional[int]
    created_at: datetime
    adjustment_id: Optional[int] = None

    @property
    def delta_minutes(self) -> int:
        return self.adjusted_minutes - self.original_minutes
