from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Optional

from ..common.datetime_utils import now_local
from ..core.enums import ErrorCode
from ..core.exceptions import DimensionMismatchError, ValidationError
from ..core.result import Result
from ..users.repository import UserRepository
from .model import DetectionResult, Embedding
from .quality import EnrollmentQualityScorer
from .store import EmbeddingStore

logger = logging.getLogger(__name__)


class EnrollmentService:
    """Gate between enrolment captures and the EmbeddingStore."""

    def __init__(self, store: EmbeddingStore, users: UserRepository, scorer: EnrollmentQualityScorer):
        self._store = store
        self._users = users
        self._scorer = scorer

    def enroll(
        self,
        *,
        user_id: int,
        vector: Iterable[float],
        detection: Optional[DetectionResult],
        label: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Result[Embedding]:
        user = self._users.get_by_id(int(user_id))
        if not user or not user.is_active:
            return Result.fail(ErrorCode.USER_INACTIVE, "User not found or inactive")

        report = self._scorer.score(detection)
        if not report.is_good_quality:
            logger.info(
                "Rejected enrolment for user %s: score=%d warnings=%s", user_id, report.score, list(report.warnings)
            )
            return Result.fail(
                ErrorCode.POOR_ENROLLMENT_QUALITY,
                "; ".join(report.warnings) or "Capture quality too low",
                data=report,
            )

        try:
            emb = self._store.add(user_id=user.user_id, vector=vector, captured_at=now or now_local(), label=label)
        except DimensionMismatchError as e:
            return Result.fail(ErrorCode.DIMENSION_MISMATCH, str(e))
        except ValidationError as e:
            return Result.fail(ErrorCode.INVALID_REQUEST, str(e))
        return Result.ok(emb, message=f"Face enrolled ({report.level}, score {report.score})")

    def revoke(self, embedding_id: int) -> Result[None]:
        if not self._store.revoke(int(embedding_id)):
            return Result.fail(ErrorCode.INVALID_REQUEST, "Embedding not found or already revoked")
        return Result.ok(message="Embedding revoked")

    def list_for_user(self, user_id: int) -> tuple[Embedding, ...]:
        return self._store.for_user(int(user_id))
