from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import ApprovalStatus
from .model import AuditEntry, ExceptionDecision, ExceptionRequest, NewExceptionRequest
from .repository import RequestRepository


class InMemoryRequestRepository(RequestRepository):
    def __init__(self):
        self._lock = threading.Lock()
        self._requests: dict[int, ExceptionRequest] = {}
        self._audit: list[AuditEntry] = []
        self._next_id = 1

    def create_exception(
        self,
        *,
        request: NewExceptionRequest,
        decision: ExceptionDecision,
        created_at: datetime,
    ) -> ExceptionRequest:
        with self._lock:
            stored = ExceptionRequest(
                request_id=self._next_id,
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
                decided_at=created_at if decision.status.is_terminal else None,
                decision_note=decision.rule,
            )
            self._requests[stored.request_id] = stored
            self._next_id += 1
            return stored

    def get_exception(self, *, request_id: int) -> Optional[ExceptionRequest]:
        with self._lock:
            return self._requests.get(int(request_id))

    def list_exceptions(
        self,
        *,
        status: Optional[ApprovalStatus] = None,
        user_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[ExceptionRequest]:
        with self._lock:
            rows = [
                r
                for r in self._requests.values()
                if (status is None or r.status == status) and (user_id is None or r.user_id == int(user_id))
            ]
        rows.sort(key=lambda r: (r.created_at, r.request_id), reverse=True)
        return rows[: int(limit)]

    def decide_exception(self, *, decided: ExceptionRequest) -> bool:
        with self._lock:
            current = self._requests.get(decided.request_id)
            if not current or current.status != ApprovalStatus.PENDING:
                return False
            self._requests[decided.request_id] = decided
            return True

    def add_audit(self, entry: AuditEntry) -> int:
        with self._lock:
            stored = replace(entry, audit_id=len(self._audit) + 1)
            self._audit.append(stored)
            return stored.audit_id

    def list_audit(self, *, target: Optional[str] = None, limit: int = 200) -> Sequence[AuditEntry]:
        with self._lock:
            rows = [a for a in self._audit if target is None or a.target == target]
        return list(reversed(rows))[: int(limit)]
