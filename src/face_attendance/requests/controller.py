from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation

from flask import Flask, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import current_user_id, fail, login_required, respond, roles_required
from ..common.validators import require_choice
from ..container import Container
from ..core.enums import ErrorCode, Role
from ..core.exceptions import ValidationError
from ..core.result import Result
from .model import ImpactOverrides

logger = logging.getLogger(__name__)

_ACTIONS = ("approve", "reject")


def _parse_overrides(payload) -> ImpactOverrides | None:
    if not payload:
        return None
    deduction = payload.get("salaryDeduction")
    minutes = payload.get("timeAdjustmentMinutes")
    penalty = payload.get("performancePenalty")
    return ImpactOverrides(
        time_adjustment_minutes=int(minutes) if minutes is not None else None,
        affect_salary=payload.get("affectSalary"),
        salary_deduction=Decimal(str(deduction)) if deduction is not None else None,
        affect_performance=payload.get("affectPerformance"),
        performance_penalty=int(penalty) if penalty is not None else None,
    )


def register(app: Flask, container: Container) -> None:
    @app.route("/api/exceptions", methods=["POST"], endpoint="api_exceptions_submit")
    @login_required
    def api_exceptions_submit():
        data = request.get_json(silent=True) or {}
        try:
            work_date = parse_iso_date(data["work_date"])
            exception_type = data["exception_type"]
        except (KeyError, TypeError, ValueError) as e:
            return fail(ErrorCode.INVALID_REQUEST, f"Invalid request: {e}")

        try:
            result = container.exception_service.submit(
                user_id=current_user_id(),
                work_date=work_date,
                exception_type=exception_type,
                reason=data.get("reason", ""),
                supporting_document=data.get("supporting_document"),
                request_adjustment=bool(data.get("request_adjustment", True)),
            )
        except Exception:
            logger.exception("Exception request submission failed")
            return fail(ErrorCode.INTERNAL_ERROR, "Failed to request exception")
        return respond(result, status=201 if result.success else None)

    @app.route("/api/exceptions/mine", methods=["GET"], endpoint="api_exceptions_mine")
    @login_required
    def api_exceptions_mine():
        return respond(Result.ok(list(container.exception_service.list_for_user(current_user_id()))))

    @app.route("/api/exceptions/pending", methods=["GET"], endpoint="api_exceptions_pending")
    @roles_required(Role.ADMIN, Role.HR)
    def api_exceptions_pending():
        return respond(Result.ok(list(container.exception_service.list_pending())))

    @app.route("/api/exceptions/<int:request_id>/decision", methods=["POST"], endpoint="api_exceptions_decide")
    @login_required
    def api_exceptions_decide(request_id: int):
        data = request.get_json(silent=True) or {}
        note = data.get("notes") or data.get("note")
        try:
            action = require_choice(str(data.get("action") or "approve"), _ACTIONS, "Action")
        except ValidationError as e:
            return fail(ErrorCode.INVALID_REQUEST, str(e))
        try:
            overrides = _parse_overrides(data.get("adjustments"))
        except (TypeError, ValueError, InvalidOperation) as e:
            return fail(ErrorCode.INVALID_REQUEST, f"Invalid adjustments: {e}")

        try:
            if action == "approve":
                result = container.exception_service.approve(
                    actor_id=current_user_id(), request_id=request_id, note=note, overrides=overrides
                )
            else:
                result = container.exception_service.reject(actor_id=current_user_id(), request_id=request_id, note=note)
        except Exception:
            logger.exception("Deciding exception %s failed", request_id)
            return fail(ErrorCode.INTERNAL_ERROR, "Failed to process exception")
        return respond(result)
