from __future__ import annotations

import json
import logging
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..attendance.engine import AttendanceStateEngine
from ..attendance.model import DailyAttendanceRecord, WorkHourAdjustment
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_HOURLY_RATE
from ..core.enums import ApprovalStatus, DayStatus, ErrorCode, ExceptionType
from ..core.exceptions import ValidationError
from ..core.result import Result
from ..notifications.model import ExceptionAutoApproved, ExceptionDecided
from ..notifications.sink import NotificationSink
from ..users.repository import UserRepository
from .model import AuditEntry, ExceptionContext, ExceptionRequest, ImpactOverrides, NewExceptionRequest
from .repository import RequestRepository
from .rules import ExceptionRuleEngine, deviation_minutes

logger = logging.getLogger(__name__)


class ExceptionRequestService:
    """Submission and approval workflow for late / early-leave exceptions.

    Approved and auto-approved requests are applied as a WorkHourAdjustment
    overlay; the attendance events themselves are never rewritten.
    """

    def __init__(
        self,
        requests: RequestRepository,
        engine: AttendanceStateEngine,
        attendance: AttendanceRepository,
        users: UserRepository,
        rules: ExceptionRuleEngine,
        *,
        sink: Optional[NotificationSink] = None,
        default_hourly_rate: Decimal = DEFAULT_HOURLY_RATE,
    ):
        self._requests = requests
        self._engine = engine
        self._attendance = attendance
        self._users = users
        self._rules = rules
        self._sink = sink
        self._default_rate = Decimal(default_hourly_rate)

    def submit(
        self,
        *,
        user_id: int,
        work_date: date,
        exception_type: ExceptionType | str,
        reason: str,
        supporting_document: Optional[str] = None,
        request_adjustment: bool = True,
        now: Optional[datetime] = None,
    ) -> Result[ExceptionRequest]:
        try:
            etype = ExceptionType(exception_type)
        except ValueError:
            return Result.fail(ErrorCode.INVALID_REQUEST, f"Unknown exception type: {exception_type!r}")
        try:
            reason = require_non_empty(reason, "Reason")
        except ValidationError as e:
            return Result.fail(ErrorCode.INVALID_REQUEST, str(e))

        user = self._users.get_by_id(int(user_id))
        if not user or not user.is_active:
            return Result.fail(ErrorCode.USER_INACTIVE, "User not found or inactive")

        current = self._engine.current_record(user.user_id, work_date)
        if not current.success:
            return Result.fail(current.error_code, current.message)
        record = current.data
        if record.status is DayStatus.NOT_STARTED:
            return Result.fail(ErrorCode.RECORD_NOT_FOUND, "No attendance record for that day")
        if deviation_minutes(etype, record) <= 0:
            kind = "late arrival" if etype.is_late else "early leave"
            return Result.fail(ErrorCode.NO_DEVIATION, f"The record shows no {kind} to excuse")

        document = (supporting_document or "").strip() or None
        new = NewExceptionRequest(
            user_id=user.user_id,
            work_date=work_date,
            exception_type=etype,
            reason=reason,
            supporting_document=document,
            request_adjustment=bool(request_adjustment),
        )
        context = ExceptionContext(
            record=record,
            org_late_ratio=self._attendance.get_org_wide_late_ratio(work_date, org_id=user.org_id),
            has_supporting_document=document is not None,
            hourly_rate=user.hourly_rate if user.hourly_rate is not None else self._default_rate,
        )
        decision = self._rules.evaluate(new, context)

        created_at = now or now_local()
        stored = self._requests.create_exception(request=new, decision=decision, created_at=created_at)
        self._audit(
            actor_id=user.user_id,
            action="exception.submitted",
            stored=stored,
            details={"status": stored.status.value, "time_adjustment_minutes": stored.time_adjustment_minutes},
            at=created_at,
        )

        if stored.status is ApprovalStatus.AUTO_APPROVED:
            self._apply(stored, record, approved_by=None, at=created_at)
            self._audit(
                actor_id=None,
                action="exception.auto_approved",
                stored=stored,
                details={"rule": decision.rule},
                at=created_at,
            )
            if self._sink is not None:
                self._sink.publish(
                    ExceptionAutoApproved(
                        occurred_at=created_at,
                        request_id=stored.request_id,
                        user_id=stored.user_id,
                        work_date=stored.work_date,
                        exception_type=stored.exception_type.value,
                    )
                )
            return Result.ok(stored, message="Exception auto-approved and applied")

        return Result.ok(stored, message="Exception request submitted for approval")

    def approve(
        self,
        *,
        actor_id: int,
        request_id: int,
        note: Optional[str] = None,
        overrides: Optional[ImpactOverrides] = None,
        now: Optional[datetime] = None,
    ) -> Result[ExceptionRequest]:
        checked = self._pending_for(actor_id, request_id)
        if not checked.success:
            return checked
        req = checked.data
        at = now or now_local()

        decided = replace(
            req,
            status=ApprovalStatus.APPROVED,
            decided_by=int(actor_id),
            decided_at=at,
            decision_note=(note or "").strip() or None,
        )
        record = None
        if overrides is not None:
            decided = _with_overrides(decided, overrides)
            if overrides.time_adjustment_minutes is not None and decided.request_adjustment:
                record = self._engine.current_record(req.user_id, req.work_date).data
                decided = replace(
                    decided, adjusted_work_minutes=record.work_minutes + decided.time_adjustment_minutes
                )

        if not self._requests.decide_exception(decided=decided):
            return Result.fail(ErrorCode.EXCEPTION_ALREADY_DECIDED, "Exception already processed")

        if record is None:
            record = self._engine.current_record(req.user_id, req.work_date).data
        self._apply(decided, record, approved_by=int(actor_id), at=at)
        self._after_decision(decided, at)
        return Result.ok(decided, message="Exception approved and applied")

    def reject(
        self,
        *,
        actor_id: int,
        request_id: int,
        note: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Result[ExceptionRequest]:
        checked = self._pending_for(actor_id, request_id)
        if not checked.success:
            return checked
        at = now or now_local()

        decided = replace(
            checked.data,
            status=ApprovalStatus.REJECTED,
            decided_by=int(actor_id),
            decided_at=at,
            decision_note=(note or "").strip() or "Rejected by HR",
        )
        if not self._requests.decide_exception(decided=decided):
            return Result.fail(ErrorCode.EXCEPTION_ALREADY_DECIDED, "Exception already processed")

        self._after_decision(decided, at)
        return Result.ok(decided, message="Exception rejected")

    def list_pending(self, *, limit: int = 500) -> Sequence[ExceptionRequest]:
        return self._requests.list_exceptions(status=ApprovalStatus.PENDING, limit=limit)

    def list_for_user(self, user_id: int, *, limit: int = 200) -> Sequence[ExceptionRequest]:
        return self._requests.list_exceptions(user_id=int(user_id), limit=limit)

    def _pending_for(self, actor_id: int, request_id: int) -> Result[ExceptionRequest]:
        actor = self._users.get_by_id(int(actor_id))
        if not actor or not actor.is_active or not actor.can_decide_exceptions:
            return Result.fail(ErrorCode.FORBIDDEN, "Only HR or Admin can decide exceptions")

        req = self._requests.get_exception(request_id=int(request_id))
        if not req:
            return Result.fail(ErrorCode.EXCEPTION_NOT_FOUND, "Exception not found")
        if req.status.is_terminal:
            return Result.fail(ErrorCode.EXCEPTION_ALREADY_DECIDED, "Exception already processed")
        return Result.ok(req)

    def _apply(
        self, req: ExceptionRequest, record: DailyAttendanceRecord, *, approved_by: Optional[int], at: datetime
    ) -> None:
        if req.adjusted_work_minutes is None:
            return
        adj = self._attendance.save_adjustment(
            WorkHourAdjustment(
                user_id=req.user_id,
                work_date=req.work_date,
                exception_id=req.request_id,
                original_minutes=record.work_minutes,
                adjusted_minutes=req.adjusted_work_minutes,
                reason=req.reason,
                approved_by=approved_by,
                created_at=at,
            )
        )
        logger.info(
            "Applied exception %s to %s: %d -> %d minutes",
            req.request_id,
            req.record_id,
            adj.original_minutes,
            adj.adjusted_minutes,
        )

    def _after_decision(self, decided: ExceptionRequest, at: datetime) -> None:
        self._audit(
            actor_id=decided.decided_by,
            action=f"exception.{decided.status.value}",
            stored=decided,
            details={"note": decided.decision_note},
            at=at,
        )
        if self._sink is not None:
            self._sink.publish(
                ExceptionDecided(
                    occurred_at=at,
                    request_id=decided.request_id,
                    user_id=decided.user_id,
                    status=decided.status.value,
                    decided_by=int(decided.decided_by),
                )
            )

    def _audit(
        self, *, actor_id: Optional[int], action: str, stored: ExceptionRequest, details: dict, at: datetime
    ) -> None:
        self._requests.add_audit(
            AuditEntry(
                actor_id=actor_id,
                action=action,
                target=f"exception:{stored.request_id}",
                details=json.dumps(details, default=str),
                created_at=at,
            )
        )


def _with_overrides(req: ExceptionRequest, o: ImpactOverrides) -> ExceptionRequest:
    changes = {
        name: value
        for name, value in (
            ("time_adjustment_minutes", o.time_adjustment_minutes),
            ("affect_salary", o.affect_salary),
            ("salary_deduction", o.salary_deduction),
            ("affect_performance", o.affect_performance),
            ("performance_penalty", o.performance_penalty),
        )
        if value is not None
    }
    return replace(req, **changes) if changes else req
