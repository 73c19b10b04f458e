from __future__ import annotations

from functools import wraps
from typing import Any, Optional

from flask import jsonify, session

from ..core.enums import ErrorCode, Role
from ..core.result import Result
from .serialization import to_jsonable

HTTP_STATUS: dict[ErrorCode, int] = {
    ErrorCode.NO_FACES_ENROLLED: 404,
    ErrorCode.FACE_NOT_RECOGNIZED: 404,
    ErrorCode.LOW_CONFIDENCE: 422,
    ErrorCode.FAILED_TO_MATCH: 503,
    ErrorCode.DIMENSION_MISMATCH: 400,
    ErrorCode.ALREADY_CHECKED_IN: 409,
    ErrorCode.ALREADY_CHECKED_OUT: 409,
    ErrorCode.NOT_CHECKED_IN: 409,
    ErrorCode.BREAK_IN_PROGRESS: 409,
    ErrorCode.NO_ACTIVE_BREAK: 409,
    ErrorCode.BREAK_NOT_ALLOWED: 422,
    ErrorCode.USER_INACTIVE: 403,
    ErrorCode.POLICY_NOT_CONFIGURED: 200,
    ErrorCode.POOR_ENROLLMENT_QUALITY: 422,
    ErrorCode.RECORD_NOT_FOUND: 404,
    ErrorCode.NO_DEVIATION: 422,
    ErrorCode.NON_WORKING_DAY: 422,
    ErrorCode.EXCEPTION_NOT_FOUND: 404,
    ErrorCode.EXCEPTION_ALREADY_DECIDED: 409,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.INVALID_REQUEST: 400,
    ErrorCode.INTERNAL_ERROR: 500,
}


def respond(result: Result[Any], *, status: Optional[int] = None):
    """JSON response for a Result; the HTTP status follows the error code."""
    if status is None:
        status = 200 if result.success else HTTP_STATUS.get(result.error_code, 400)
    return jsonify(to_jsonable(result.to_dict())), status


def fail(code: ErrorCode, message: str, *, status: Optional[int] = None):
    return respond(Result.fail(code, message), status=status)


def current_user_id() -> int:
    return int(session["user_id"])


def current_role() -> Optional[Role]:
    try:
        return Role(session.get("role"))
    except ValueError:
        return None


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return fail(ErrorCode.FORBIDDEN, "Authentication required", status=401)
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: Role):
    allowed = set(roles)

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return fail(ErrorCode.FORBIDDEN, "Authentication required", status=401)
            if current_role() not in allowed:
                return fail(ErrorCode.FORBIDDEN, "You do not have permission for this action")
            return view(*args, **kwargs)

        return wrapper

    return decorator
