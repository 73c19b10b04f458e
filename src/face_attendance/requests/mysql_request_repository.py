from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import ApprovalStatus, ExceptionType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AuditEntry, ExceptionDecision, ExceptionRequest, NewExceptionRequest
from .repository import RequestRepository

_EXCEPTION_COLUMNS = """
    request_id, user_id, work_date, exception_type, reason, status, created_at,
    supporting_document, request_adjustment, time_adjustment_minutes, adjusted_work_minutes,
    affect_salary, salary_deduction, affect_performance, performance_penalty,
    decided_by, decided_at, decision_note
"""


def _row_to_exception(r: dict) -> ExceptionRequest:
    adjusted = r.get("adjusted_work_minutes")
    decided_by = r.get("decided_by")
    return ExceptionRequest(
        request_id=int(r["request_id"]),
        user_id=int(r["user_id"]),
        work_date=r["work_date"],
        exception_type=ExceptionType(r["exception_type"]),
        reason=r["reason"],
        status=ApprovalStatus(r["status"]),
        created_at=r["created_at"],
        supporting_document=r.get("supporting_document"),
        request_adjustment=bool(r.get("request_adjustment", 1)),
        time_adjustment_minutes=int(r.get("time_adjustment_minutes") or 0),
        adjusted_work_minutes=int(adjusted) if adjusted is not None else None,
        affect_salary=bool(r.get("affect_salary", 0)),
        salary_deduction=Decimal(str(r.get("salary_deduction") or "0.00")),
        affect_performance=bool(r.get("affect_performance", 0)),
        performance_penalty=int(r.get("performance_penalty") or 0),
        decided_by=int(decided_by) if decided_by is not None else None,
        decided_at=r.get("decided_at"),
        decision_note=r.get("decision_note"),
    )


class MySQLRequestRepository(RequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    # -------- Exception requests --------
    def create_exception(
        self,
        *,
        request: NewExceptionRequest,
        decision: ExceptionDecision,
        created_at: datetime,
    ) -> ExceptionRequest:
        decided_at = created_at if decision.status.is_terminal else None
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_exceptions(
                    user_id, work_date, exception_type, reason, status, created_at,
                    supporting_document, request_adjustment, time_adjustment_minutes, adjusted_work_minutes,
                    affect_salary, salary_deduction, affect_performance, performance_penalty,
                    decided_at, decision_note
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(request.user_id),
                    request.work_date,
                    request.exception_type.value,
                    request.reason,
                    decision.status.value,
                    created_at,
                    request.supporting_document,
                    1 if request.request_adjustment else 0,
                    decision.time_adjustment_minutes,
                    decision.adjusted_work_minutes,
                    1 if decision.affect_salary else 0,
                    decision.salary_deduction,
                    1 if decision.affect_performance else 0,
                    decision.performance_penalty,
                    decided_at,
                    decision.rule,
                ),
            )
            request_id = int(cur.lastrowid)

        return ExceptionRequest(
            request_id=request_id,
            user_id=int(request.user_id),
            work_date=request.work_date,
            exception_type=request.exception_type,
            reason=request.reason,
            status=decision.status,
            created_at=created_at,
            supporting_document=request.supporting_document,
            request_adjustment=request.request_adjustment,
            time_adjustment_minutes=decision.time_adjustment_minutes,
            adjusted_work_minutes=decision.adjusted_work_minutes,
            affect_salary=decision.affect_salary,
            salary_deduction=decision.salary_deduction,
            affect_performance=decision.affect_performance,
            performance_penalty=decision.performance_penalty,
            decided_at=decided_at,
            decision_note=decision.rule,
        )

    def get_exception(self, *, request_id: int) -> Optional[ExceptionRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_EXCEPTION_COLUMNS} FROM attendance_exceptions WHERE request_id=%s",
                (int(request_id),),
            )
            r = fetchone(cur)
            return _row_to_exception(r) if r else None

    def list_exceptions(
        self,
        *,
        status: Optional[ApprovalStatus] = None,
        user_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[ExceptionRequest]:
        where = []
        params: list = []
        if status is not None:
            where.append("status=%s")
            params.append(status.value)
        if user_id is not None:
            where.append("user_id=%s")
            params.append(int(user_id))

        sql = f"SELECT {_EXCEPTION_COLUMNS} FROM attendance_exceptions"
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY created_at DESC, request_id DESC LIMIT %s"
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_row_to_exception(r) for r in fetchall(cur)]

    def decide_exception(self, *, decided: ExceptionRequest) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_exceptions
                SET status=%s, decided_by=%s, decided_at=%s, decision_note=%s,
                    time_adjustment_minutes=%s, adjusted_work_minutes=%s,
                    affect_salary=%s, salary_deduction=%s,
                    affect_performance=%s, performance_penalty=%s
                WHERE request_id=%s AND status=%s
                """,
                (
                    decided.status.value,
                    decided.decided_by,
                    decided.decided_at,
                    decided.decision_note,
                    decided.time_adjustment_minutes,
                    decided.adjusted_work_minutes,
                    1 if decided.affect_salary else 0,
                    decided.salary_deduction,
                    1 if decided.affect_performance else 0,
                    decided.performance_penalty,
                    int(decided.request_id),
                    ApprovalStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0

    # -------- Audit trail --------
    def add_audit(self, entry: AuditEntry) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO audit_entries(actor_id, action, target, details, created_at)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (entry.actor_id, entry.action, entry.target, entry.details, entry.created_at),
            )
            return int(cur.lastrowid)

    def list_audit(self, *, target: Optional[str] = None, limit: int = 200) -> Sequence[AuditEntry]:
        sql = "SELECT audit_id, actor_id, action, target, details, created_at FROM audit_entries"
        params: list = []
        if target is not None:
            sql += " WHERE target=%s"
            params.append(target)
        sql += " ORDER BY audit_id DESC LIMIT %s"
        params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [
                AuditEntry(
                    audit_id=int(r["audit_id"]),
                    actor_id=int(r["actor_id"]) if r.get("actor_id") is not None else None,
                    action=r["action"],
                    target=r["target"],
                    details=r.get("details") or "",
                    created_at=r["created_at"],
                )
                for r in fetchall(cur)
            ]
