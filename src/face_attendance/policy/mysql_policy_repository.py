from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, normalize_mysql_time
from .model import AttendancePolicy, BreakPolicy
from .repository import PolicySource


class MySQLPolicySource(PolicySource):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_effective_policy(self, org_id: int, on_date: date) -> Optional[AttendancePolicy]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT *
                FROM attendance_policies
                WHERE org_id=%s AND effective_from<=%s
                ORDER BY effective_from DESC, policy_id DESC
                LIMIT 1
                """,
                (int(org_id), on_date),
            )
            r = fetchone(cur)
            if not r:
                return None
            paid = r.get("break_paid_minutes")
            return AttendancePolicy(
                policy_id=int(r["policy_id"]),
                org_id=int(r["org_id"]),
                effective_from=r["effective_from"],
                shift_start=normalize_mysql_time(r["shift_start"]),
                shift_end=normalize_mysql_time(r["shift_end"]),
                late_threshold_minutes=int(r["late_threshold_minutes"]),
                early_leave_threshold_minutes=int(r["early_leave_threshold_minutes"]),
                overtime_enabled=bool(r["overtime_enabled"]),
                overtime_rate=Decimal(str(r["overtime_rate"])),
                weekend_work_enabled=bool(r["weekend_work_enabled"]),
                breaks=BreakPolicy(
                    total_duration_minutes=int(r["break_total_minutes"]),
                    paid_duration_minutes=int(paid) if paid is not None else None,
                    is_flexible=bool(r["break_is_flexible"]),
                    max_splits=int(r["break_max_splits"]),
                    min_work_hours_required=float(r["break_min_work_hours"]),
                    earliest_break_time=normalize_mysql_time(r.get("break_earliest")),
                    latest_break_time=normalize_mysql_time(r.get("break_latest")),
                ),
            )

    def save(self, policy: AttendancePolicy) -> int:
        b = policy.breaks
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_policies(
                    org_id, effective_from, shift_start, shift_end,
                    late_threshold_minutes, early_leave_threshold_minutes,
                    overtime_enabled, overtime_rate, weekend_work_enabled,
                    break_total_minutes, break_paid_minutes, break_is_flexible, break_max_splits,
                    break_min_work_hours, break_earliest, break_latest
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    policy.org_id,
                    policy.effective_from,
                    policy.shift_start,
                    policy.shift_end,
                    policy.late_threshold_minutes,
                    policy.early_leave_threshold_minutes,
                    1 if policy.overtime_enabled else 0,
                    policy.overtime_rate,
                    1 if policy.weekend_work_enabled else 0,
                    b.total_duration_minutes,
                    b.paid_duration_minutes,
                    1 if b.is_flexible else 0,
                    b.max_splits,
                    b.min_work_hours_required,
                    b.earliest_break_time,
                    b.latest_break_time,
                ),
            )
            return int(cur.lastrowid)
