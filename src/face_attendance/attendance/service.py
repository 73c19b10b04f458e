from __future__ import annotations

import logging
import uuid
from datetime import date, datetime
from typing import Callable, Optional, Sequence, TypeVar

from ..common.datetime_utils import now_local
from ..core.enums import ErrorCode, EventKind, QualityTier
from ..core.result import Result
from ..faces.matcher import IdentityMatcher
from ..faces.store import EmbeddingStore
from ..users.repository import UserRepository
from .engine import AttendanceStateEngine
from .model import DailyAttendanceRecord, Location, make_event

logger = logging.getLogger(__name__)

T = TypeVar("T")

_LABELS = {
    EventKind.CHECK_IN: "Check-in",
    EventKind.CHECK_OUT: "Check-out",
    EventKind.BREAK_START: "Break start",
    EventKind.BREAK_END: "Break end",
}


class AttendanceService:
    """Boundary used by controllers: identifies the person, then records the event.

    Business outcomes come back as failed results with an error code.
    Anything unexpected is logged with a correlation id and reported as
    ``INTERNAL_ERROR``; the message only carries that id.
    """

    def __init__(
        self,
        engine: AttendanceStateEngine,
        matcher: IdentityMatcher,
        store: EmbeddingStore,
        users: UserRepository,
        *,
        require_fair_confidence: bool = False,
    ):
        self._engine = engine
        self._matcher = matcher
        self._store = store
        self._users = users
        self._require_fair = bool(require_fair_confidence)

    def _guard(self, operation: str, fn: Callable[[], Result[T]]) -> Result[T]:
        correlation_id = uuid.uuid4().hex[:12]
        try:
            return fn()
        except Exception:
            logger.exception("[%s] %s failed", correlation_id, operation)
            return Result.fail(ErrorCode.INTERNAL_ERROR, f"Internal error (ref {correlation_id})")

    def face_event(
        self,
        *,
        probe: Sequence[float],
        kind: EventKind | str,
        at: Optional[datetime] = None,
        location: Optional[Location] = None,
        break_type: Optional[str] = None,
    ) -> Result[DailyAttendanceRecord]:
        def run() -> Result[DailyAttendanceRecord]:
            event_kind = _parse_kind(kind)
            if event_kind is None:
                return Result.fail(ErrorCode.INVALID_REQUEST, f"Unknown event kind: {kind!r}")

            matched = self._matcher.identify(probe, self._store.snapshot())
            if not matched.success:
                return Result.fail(matched.error_code, matched.message, data=matched.data)
            match = matched.data

            if self._require_fair and match.tier is QualityTier.POOR:
                logger.info("Rejected poor-tier match for user %s (%.4f)", match.user_id, match.confidence)
                return Result.fail(
                    ErrorCode.LOW_CONFIDENCE,
                    "Match confidence too low, please try again",
                    data={"confidence": round(match.confidence, 4)},
                )

            user = self._users.get_by_id(match.user_id)
            if not user or not user.is_active:
                return Result.fail(ErrorCode.USER_INACTIVE, "User not found or inactive")

            event = make_event(
                event_kind,
                **_event_fields(
                    event_kind,
                    user_id=user.user_id,
                    occurred_at=at or now_local(),
                    location=location,
                    match_confidence=match.confidence,
                    verified=True,
                    break_type=break_type,
                ),
            )
            result = self._engine.record_event(event)
            if not result.success:
                return result
            return Result.ok(result.data, message=f"{_LABELS[event_kind]} recorded for {user.full_name}")

        return self._guard("face_event", run)

    def manual_event(
        self,
        *,
        user_id: int,
        kind: EventKind | str,
        at: Optional[datetime] = None,
        location: Optional[Location] = None,
        break_type: Optional[str] = None,
    ) -> Result[DailyAttendanceRecord]:
        def run() -> Result[DailyAttendanceRecord]:
            event_kind = _parse_kind(kind)
            if event_kind is None:
                return Result.fail(ErrorCode.INVALID_REQUEST, f"Unknown event kind: {kind!r}")
            event = make_event(
                event_kind,
                **_event_fields(
                    event_kind,
                    user_id=int(user_id),
                    occurred_at=at or now_local(),
                    location=location,
                    match_confidence=None,
                    verified=False,
                    break_type=break_type,
                ),
            )
            result = self._engine.record_event(event)
            if not result.success:
                return result
            return Result.ok(result.data, message=f"{_LABELS[event_kind]} recorded")

        return self._guard("manual_event", run)

    def today_status(self, user_id: int, day: Optional[date] = None) -> Result[DailyAttendanceRecord]:
        return self._guard(
            "today_status", lambda: self._engine.current_record(int(user_id), day or now_local().date())
        )


def _parse_kind(kind: EventKind | str) -> Optional[EventKind]:
    try:
        return EventKind(kind)
    except ValueError:
        return None


def _event_fields(kind: EventKind, *, break_type: Optional[str], **fields) -> dict:
    if kind is EventKind.BREAK_START and break_type:
        fields["break_type"] = break_type
    return fields
