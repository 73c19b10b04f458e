from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeout
from typing import Sequence

import numpy as np

from ..core.constants import EMBEDDING_DIMENSION, MATCH_THRESHOLD, MATCH_TIMEOUT_SECONDS
from ..core.enums import ErrorCode, MatchMetric, QualityTier
from ..core.result import Result
from .model import Embedding, MatchResult, tier_for

logger = logging.getLogger(__name__)


class IdentityMatcher:
    """Nearest-neighbour search of a probe embedding over enrolled embeddings.

    Confidence is a monotonic mapping of the metric into [0, 1]:
    cosine similarity clamped at zero, or ``1 - euclidean distance``.
    A candidate is accepted when ``confidence >= threshold`` (closed boundary).

    The matcher owns a small worker pool used to bound searches by a timeout;
    call :meth:`close` (or use it as a context manager) when done.
    """

    def __init__(
        self,
        *,
        dimension: int = EMBEDDING_DIMENSION,
        threshold: float = MATCH_THRESHOLD,
        metric: MatchMetric = MatchMetric.COSINE,
        timeout_seconds: float = MATCH_TIMEOUT_SECONDS,
        max_workers: int = 2,
    ):
        if not 0.0 <= threshold <= 1.0:
            raise ValueError("threshold must be within [0, 1]")
        self._dimension = int(dimension)
        self._threshold = float(threshold)
        self._metric = MatchMetric(metric)
        self._timeout = float(timeout_seconds)
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="face-matcher")

    @property
    def threshold(self) -> float:
        return self._threshold

    @property
    def dimension(self) -> int:
        return self._dimension

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)

    def __enter__(self) -> "IdentityMatcher":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _scores(self, probe: np.ndarray, matrix: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        if self._metric is MatchMetric.EUCLIDEAN:
            distances = np.linalg.norm(matrix - probe, axis=1)
            return distances, np.clip(1.0 - distances, 0.0, 1.0)

        norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(probe)
        dots = matrix @ probe
        with np.errstate(divide="ignore", invalid="ignore"):
            similarities = np.where(norms > 0, dots / norms, 0.0)
        return similarities, np.clip(similarities, 0.0, 1.0)

    def find_best_match(self, probe: Sequence[float], candidates: Sequence[Embedding]) -> Result[MatchResult]:
        probe_vec = np.asarray(probe, dtype=np.float64)
        if probe_vec.ndim != 1 or probe_vec.shape[0] != self._dimension:
            size = probe_vec.shape[0] if probe_vec.ndim == 1 else probe_vec.size
            return Result.fail(
                ErrorCode.DIMENSION_MISMATCH,
                f"Invalid descriptor dimensions. Expected {self._dimension}, got {size}",
            )

        if not candidates:
            return Result.fail(ErrorCode.NO_FACES_ENROLLED, "No enrolled faces")

        usable: list[Embedding] = []
        for emb in candidates:
            if emb.dimension != probe_vec.shape[0]:
                # A corrupted enrolment must not fail the whole search.
                logger.warning(
                    "Skipping embedding %s of user %s: dimension %d != %d",
                    emb.embedding_id,
                    emb.user_id,
                    emb.dimension,
                    probe_vec.shape[0],
                )
                continue
            usable.append(emb)

        if not usable:
            logger.error("All %d enrolled embeddings have an invalid dimension", len(candidates))
            return Result.fail(ErrorCode.NO_FACES_ENROLLED, "No usable enrolled faces")

        matrix = np.asarray([e.vector for e in usable], dtype=np.float64)
        raw, confidences = self._scores(probe_vec, matrix)

        # Best capture per identity; ties go to the most recent capture.
        best: dict[int, tuple[float, Embedding, float]] = {}
        for emb, score, conf in zip(usable, raw, confidences):
            entry = (float(conf), emb, float(score))
            current = best.get(emb.user_id)
            if current is None or _rank(entry) > _rank(current):
                best[emb.user_id] = entry

        confidence, emb, score = max(best.values(), key=_rank)
        logger.debug(
            "Matched probe against %d embeddings of %d identities, best=%s (%.4f)",
            len(usable),
            len(best),
            emb.user_id,
            confidence,
        )

        if confidence < self._threshold:
            logger.info("No match found. Best confidence %.4f below threshold %.2f", confidence, self._threshold)
            return Result.fail(
                ErrorCode.FACE_NOT_RECOGNIZED,
                "Face not recognized",
                data={"best_confidence": round(confidence, 4)},
            )

        tier = tier_for(confidence)
        if tier is QualityTier.POOR:
            logger.warning(
                "Accepted poor-tier match for user %s (confidence %.4f, threshold %.2f)",
                emb.user_id,
                confidence,
                self._threshold,
            )

        return Result.ok(
            MatchResult(
                user_id=emb.user_id,
                embedding_id=emb.embedding_id,
                score=score,
                confidence=confidence,
                tier=tier,
            )
        )

    def identify(self, probe: Sequence[float], candidates: Sequence[Embedding]) -> Result[MatchResult]:
        """:meth:`find_best_match` bounded by the matcher timeout."""
        snapshot = tuple(candidates)
        future = self._executor.submit(self.find_best_match, probe, snapshot)
        try:
            return future.result(timeout=self._timeout)
        except FuturesTimeout:
            future.cancel()
            logger.warning("Face match timed out after %.2fs (%d embeddings)", self._timeout, len(snapshot))
            return Result.fail(ErrorCode.FAILED_TO_MATCH, "Face matching timed out, please try again")

    def verify(self, probe: Sequence[float], candidates: Sequence[Embedding], user_id: int) -> Result[MatchResult]:
        """1:1 check of a claimed identity against that identity's embeddings only."""
        own = [e for e in candidates if e.user_id == user_id]
        if not own:
            return Result.fail(ErrorCode.NO_FACES_ENROLLED, "No face embeddings found for user")
        return self.identify(probe, own)


def _rank(entry: tuple[float, Embedding, float]):
    confidence, emb, _ = entry
    return confidence, emb.captured_at, emb.embedding_id
