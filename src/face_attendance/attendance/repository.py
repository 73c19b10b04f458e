from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceEvent, WorkHourAdjustment


class AttendanceRepository(Protocol):
    def append_event(self, event: AttendanceEvent, *, expected_count: int) -> AttendanceEvent:
        """Append only if the identity's day still holds ``expected_count`` events.

        Returns the stored event (with ``event_id``); raises
        ``ConcurrentAppendError`` when another writer got there first.
        """

        raise NotImplementedError

    def get_events_for_day(self, user_id: int, work_date: date) -> Sequence[AttendanceEvent]:
        raise NotImplementedError

    def get_org_wide_late_ratio(self, work_date: date, *, org_id: Optional[int] = None) -> float:
        """Late check-ins / all check-ins on ``work_date`` (0.0 when nobody checked in)."""

        raise NotImplementedError

    def save_adjustment(self, adjustment: WorkHourAdjustment) -> WorkHourAdjustment:
        raise NotImplementedError

    def get_adjustments_for_day(self, user_id: int, work_date: date) -> Sequence[WorkHourAdjustment]:
        raise NotImplementedError
