from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import EventKind
from ..core.exceptions import ConcurrentAppendError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import AttendanceEvent, BreakStart, CheckIn, Location, WorkHourAdjustment, make_event
from .repository import AttendanceRepository


def _row_to_event(r: dict) -> AttendanceEvent:
    location = None
    if r.get("latitude") is not None and r.get("longitude") is not None:
        location = Location(
            latitude=float(r["latitude"]), longitude=float(r["longitude"]), label=r.get("location_label")
        )
    confidence = r.get("match_confidence")
    fields = dict(
        user_id=int(r["user_id"]),
        occurred_at=r["occurred_at"],
        location=location,
        match_confidence=float(confidence) if confidence is not None else None,
        verified=bool(r.get("verified", 0)),
        event_id=int(r["event_id"]),
    )
    kind = EventKind(r["kind"])
    if kind is EventKind.CHECK_IN:
        fields["late"] = bool(r.get("is_late", 0))
    elif kind is EventKind.BREAK_START:
        fields["break_type"] = r.get("break_type") or "meal"
    return make_event(kind, **fields)


def _row_to_adjustment(r: dict) -> WorkHourAdjustment:
    approved_by = r.get("approved_by")
    return WorkHourAdjustment(
        adjustment_id=int(r["adjustment_id"]),
        user_id=int(r["user_id"]),
        work_date=r["work_date"],
        exception_id=int(r["exception_id"]),
        original_minutes=int(r["original_minutes"]),
        adjusted_minutes=int(r["adjusted_minutes"]),
        reason=r["reason"],
        approved_by=int(approved_by) if approved_by is not None else None,
        created_at=r["created_at"],
    )


class MySQLAttendanceRepository(AttendanceRepository):
    """Event log in ``attendance_events``.

    ``seq`` numbers events per (user, day) and is covered by a unique key, so
    an append computed from a stale read fails instead of duplicating state.
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def append_event(self, event: AttendanceEvent, *, expected_count: int) -> AttendanceEvent:
        loc = event.location
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_events(
                        user_id, work_date, seq, kind, occurred_at,
                        latitude, longitude, location_label,
                        match_confidence, verified, is_late, break_type
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(event.user_id),
                        event.work_date,
                        int(expected_count) + 1,
                        event.kind.value,
                        event.occurred_at,
                        loc.latitude if loc else None,
                        loc.longitude if loc else None,
                        loc.label if loc else None,
                        event.match_confidence,
                        1 if event.verified else 0,
                        1 if isinstance(event, CheckIn) and event.late else 0,
                        event.break_type if isinstance(event, BreakStart) else None,
                    ),
                )
                event_id = int(cur.lastrowid)
        except Exception as e:
            if is_duplicate_key(e):
                raise ConcurrentAppendError(
                    f"Event log for user {event.user_id} on {event.work_date} changed (seq {expected_count + 1} taken)"
                ) from e
            raise
        return event.with_id(event_id)

    def get_events_for_day(self, user_id: int, work_date: date) -> Sequence[AttendanceEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT event_id, user_id, kind, occurred_at, latitude, longitude, location_label,
                       match_confidence, verified, is_late, break_type
                FROM attendance_events
                WHERE user_id=%s AND work_date=%s
                ORDER BY seq
                """,
                (int(user_id), work_date),
            )
            return [_row_to_event(r) for r in fetchall(cur)]

    def get_org_wide_late_ratio(self, work_date: date, *, org_id: Optional[int] = None) -> float:
        sql = """
            SELECT COUNT(*) AS total, COALESCE(SUM(e.is_late), 0) AS late
            FROM attendance_events e
        """
        params: list = []
        if org_id is not None:
            sql += " JOIN users u ON u.user_id = e.user_id AND u.org_id=%s"
            params.append(int(org_id))
        sql += " WHERE e.work_date=%s AND e.kind=%s"
        params.extend([work_date, EventKind.CHECK_IN.value])

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            r = fetchone(cur) or {}
            total = int(r.get("total") or 0)
            if total == 0:
                return 0.0
            return int(r.get("late") or 0) / total

    def save_adjustment(self, adjustment: WorkHourAdjustment) -> WorkHourAdjustment:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO work_hour_adjustments(
                    user_id, work_date, exception_id, original_minutes, adjusted_minutes,
                    reason, approved_by, created_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    adjustment.user_id,
                    adjustment.work_date,
                    adjustment.exception_id,
                    adjustment.original_minutes,
                    adjustment.adjusted_minutes,
                    adjustment.reason,
                    adjustment.approved_by,
                    adjustment.created_at,
                ),
            )
            new_id = int(cur.lastrowid)
        return WorkHourAdjustment(
            adjustment_id=new_id,
            user_id=adjustment.user_id,
            work_date=adjustment.work_date,
            exception_id=adjustment.exception_id,
            original_minutes=adjustment.original_minutes,
            adjusted_minutes=adjustment.adjusted_minutes,
            reason=adjustment.reason,
            approved_by=adjustment.approved_by,
            created_at=adjustment.created_at,
        )

    def get_adjustments_for_day(self, user_id: int, work_date: date) -> Sequence[WorkHourAdjustment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT adjustment_id, user_id, work_date, exception_id, original_minutes,
                       adjusted_minutes, reason, approved_by, created_at
                FROM work_hour_adjustments
                WHERE user_id=%s AND work_date=%s
                ORDER BY created_at, adjustment_id
                """,
                (int(user_id), work_date),
            )
            return [_row_to_adjustment(r) for r in fetchall(cur)]
