from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for approval permissions."""

    ADMIN = "admin"
    HR = "hr"
    STAFF = "staff"


class EventKind(str, Enum):
    CHECK_IN = "check_in"
    CHECK_OUT = "check_out"
    BREAK_START = "break_start"
    BREAK_END = "break_end"


class DayStatus(str, Enum):
    """State of one identity's attendance day."""

    NOT_STARTED = "not_started"
    CHECKED_IN = "checked_in"
    ON_BREAK = "on_break"
    CHECKED_OUT = "checked_out"


class AttendanceStatus(str, Enum):
    """Policy classification of a day (arrival / departure)."""

    ON_TIME = "ON_TIME"
    LATE = "LATE"
    EARLY_LEAVE = "EARLY_LEAVE"


class BreakStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class QualityTier(str, Enum):
    POOR = "poor"
    FAIR = "fair"
    GOOD = "good"


class MatchMetric(str, Enum):
    COSINE = "cosine"
    EUCLIDEAN = "euclidean"


class ApprovalStatus(str, Enum):
    """Approval flow of an exception request."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    AUTO_APPROVED = "auto_approved"

    @property
    def is_terminal(self) -> bool:
        return self is not ApprovalStatus.PENDING


class ExceptionType(str, Enum):
    LATE_TRAFFIC = "late_traffic"
    LATE_MEDICAL = "late_medical"
    LATE_EMERGENCY = "late_emergency"
    LATE_VEHICLE = "late_vehicle"
    LATE_TRANSPORT = "late_transport"
    LATE_WEATHER = "late_weather"
    EARLY_MEDICAL = "early_medical"
    EARLY_PERSONAL = "early_personal"

    @property
    def is_late(self) -> bool:
        return self.value.startswith("late_")

    @property
    def is_early(self) -> bool:
        return self.value.startswith("early_")


class ErrorCode(str, Enum):
    """Stable codes returned to callers so UIs can branch without parsing messages."""

    NO_FACES_ENROLLED = "NO_FACES_ENROLLED"
    FACE_NOT_RECOGNIZED = "FACE_NOT_RECOGNIZED"
    LOW_CONFIDENCE = "LOW_CONFIDENCE"
    FAILED_TO_MATCH = "FAILED_TO_MATCH"
    DIMENSION_MISMATCH = "DIMENSION_MISMATCH"
    ALREADY_CHECKED_IN = "ALREADY_CHECKED_IN"
    ALREADY_CHECKED_OUT = "ALREADY_CHECKED_OUT"
    NOT_CHECKED_IN = "NOT_CHECKED_IN"
    BREAK_IN_PROGRESS = "BREAK_IN_PROGRESS"
    NO_ACTIVE_BREAK = "NO_ACTIVE_BREAK"
    BREAK_NOT_ALLOWED = "BREAK_NOT_ALLOWED"
    USER_INACTIVE = "USER_INACTIVE"
    POLICY_NOT_CONFIGURED = "POLICY_NOT_CONFIGURED"
    POOR_ENROLLMENT_QUALITY = "POOR_ENROLLMENT_QUALITY"
    RECORD_NOT_FOUND = "RECORD_NOT_FOUND"
    NO_DEVIATION = "NO_DEVIATION"
    NON_WORKING_DAY = "NON_WORKING_DAY"
    EXCEPTION_NOT_FOUND = "EXCEPTION_NOT_FOUND"
    EXCEPTION_ALREADY_DECIDED = "EXCEPTION_ALREADY_DECIDED"
    FORBIDDEN = "FORBIDDEN"
    INVALID_REQUEST = "INVALID_REQUEST"
    INTERNAL_ERROR = "INTERNAL_ERROR"
