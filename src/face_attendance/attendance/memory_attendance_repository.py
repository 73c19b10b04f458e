from __future__ import annotations

import threading
from collections import defaultdict
from dataclasses import replace
from datetime import date
from typing import Optional, Sequence

from ..core.exceptions import ConcurrentAppendError
from ..users.repository import UserRepository
from .model import AttendanceEvent, CheckIn, WorkHourAdjustment
from .repository import AttendanceRepository


class InMemoryAttendanceRepository(AttendanceRepository):
    """Process-local event log; ``users`` is only needed to scope the late ratio by org."""

    def __init__(self, users: Optional[UserRepository] = None):
        self._users = users
        self._lock = threading.Lock()
        self._events: dict[tuple[int, date], list[AttendanceEvent]] = defaultdict(list)
        self._adjustments: dict[tuple[int, date], list[WorkHourAdjustment]] = defaultdict(list)
        self._next_event_id = 1
        self._next_adjustment_id = 1

    def append_event(self, event: AttendanceEvent, *, expected_count: int) -> AttendanceEvent:
        key = (int(event.user_id), event.work_date)
        with self._lock:
            day = self._events[key]
            if len(day) != expected_count:
                raise ConcurrentAppendError(
                    f"Event log for user {event.user_id} on {event.work_date} changed "
                    f"(expected {expected_count}, found {len(day)})"
                )
            stored = event.with_id(self._next_event_id)
            self._next_event_id += 1
            day.append(stored)
            return stored

    def get_events_for_day(self, user_id: int, work_date: date) -> Sequence[AttendanceEvent]:
        with self._lock:
            return tuple(self._events.get((int(user_id), work_date), ()))

    def get_org_wide_late_ratio(self, work_date: date, *, org_id: Optional[int] = None) -> float:
        with self._lock:
            check_ins = [
                e
                for (_, day), events in self._events.items()
                if day == work_date
                for e in events
                if isinstance(e, CheckIn)
            ]
        if org_id is not None and self._users is not None:
            check_ins = [e for e in check_ins if self._org_of(e.user_id) == org_id]
        if not check_ins:
            return 0.0
        return sum(1 for e in check_ins if e.late) / len(check_ins)

    def _org_of(self, user_id: int) -> Optional[int]:
        user = self._users.get_by_id(user_id)
        return user.org_id if user else None

    def save_adjustment(self, adjustment: WorkHourAdjustment) -> WorkHourAdjustment:
        with self._lock:
            stored = replace(adjustment, adjustment_id=self._next_adjustment_id)
            self._next_adjustment_id += 1
            self._adjustments[(int(adjustment.user_id), adjustment.work_date)].append(stored)
            return stored

    def get_adjustments_for_day(self, user_id: int, work_date: date) -> Sequence[WorkHourAdjustment]:
        with self._lock:
            return tuple(self._adjustments.get((int(user_id), work_date), ()))
