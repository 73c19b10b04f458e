from __future__ import annotations

import logging
from typing import Optional

from flask import Flask, request

from ..common.datetime_utils import now_local, parse_iso_date, parse_iso_datetime
from ..common.http import current_role, current_user_id, fail, login_required, respond
from ..container import Container
from ..core.enums import ErrorCode, Role
from .model import Location

logger = logging.getLogger(__name__)


def _parse_location(payload: Optional[dict]) -> Optional[Location]:
    if not payload:
        return None
    return Location(
        latitude=float(payload["latitude"]),
        longitude=float(payload["longitude"]),
        label=payload.get("label"),
    )


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/face", methods=["POST"], endpoint="api_attendance_face")
    def api_attendance_face():
        """Kiosk endpoint: the face is the credential, no session needed."""
        data = request.get_json(silent=True) or {}
        try:
            probe = data["embedding"]
            kind = data["kind"]
            at = parse_iso_datetime(data["timestamp"]) if data.get("timestamp") else None
            location = _parse_location(data.get("location"))
        except (KeyError, TypeError, ValueError) as e:
            return fail(ErrorCode.INVALID_REQUEST, f"Invalid request: {e}")

        result = container.attendance_service.face_event(
            probe=probe,
            kind=kind,
            at=at,
            location=location,
            break_type=data.get("break_type"),
        )
        return respond(result)

    @app.route("/api/attendance/events", methods=["POST"], endpoint="api_attendance_events")
    @login_required
    def api_attendance_events():
        data = request.get_json(silent=True) or {}
        try:
            user_id = int(data.get("user_id") or current_user_id())
            kind = data["kind"]
            at = parse_iso_datetime(data["timestamp"]) if data.get("timestamp") else None
            location = _parse_location(data.get("location"))
        except (KeyError, TypeError, ValueError) as e:
            return fail(ErrorCode.INVALID_REQUEST, f"Invalid request: {e}")

        if user_id != current_user_id() and current_role() not in {Role.ADMIN, Role.HR}:
            return fail(ErrorCode.FORBIDDEN, "Only HR or Admin can record events for someone else")

        result = container.attendance_service.manual_event(
            user_id=user_id,
            kind=kind,
            at=at,
            location=location,
            break_type=data.get("break_type"),
        )
        return respond(result)

    @app.route("/api/attendance/status/<int:user_id>", methods=["GET"], endpoint="api_attendance_status")
    @login_required
    def api_attendance_status(user_id: int):
        if user_id != current_user_id() and current_role() not in {Role.ADMIN, Role.HR}:
            return fail(ErrorCode.FORBIDDEN, "You can only view your own attendance")
        try:
            day = parse_iso_date(request.args["date"]) if request.args.get("date") else now_local().date()
        except ValueError:
            return fail(ErrorCode.INVALID_REQUEST, "date must be YYYY-MM-DD")
        return respond(container.attendance_service.today_status(user_id, day))
