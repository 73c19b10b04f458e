from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.constants import GOOD_TIER_FLOOR, POOR_TIER_CEILING
from ..core.enums import QualityTier


@dataclass(frozen=True)
class Embedding:
    """Domain entity: one enrolled face capture of an identity.

    Immutable once stored; an identity may own several captured under
    different conditions.
    """

    embedding_id: int
    user_id: int
    vector: tuple[float, ...]
    captured_at: datetime
    label: Optional[str] = None

    @property
    def dimension(self) -> int:
        return len(self.vector)


@dataclass(frozen=True)
class MatchResult:
    """Transient evidence produced by one match call; never persisted on its own."""

    user_id: int
    embedding_id: int
    score: float
    confidence: float
    tier: QualityTier


def tier_for(confidence: float) -> QualityTier:
    if confidence < POOR_TIER_CEILING:
        return QualityTier.POOR
    if confidence > GOOD_TIER_FLOOR:
        return QualityTier.GOOD
    return QualityTier.FAIR


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class BoundingBox:
    x: float
    y: float
    width: float
    height: float

    @property
    def center(self) -> Point:
        return Point(self.x + self.width / 2, self.y + self.height / 2)


@dataclass(frozen=True)
class Landmarks:
    left_eye: tuple[Point, ...] = ()
    right_eye: tuple[Point, ...] = ()
    mouth: tuple[Point, ...] = ()


@dataclass(frozen=True)
class DetectionResult:
    """Output of the external face detector for one enrolment frame."""

    frame_width: int
    frame_height: int
    box: Optional[BoundingBox] = None
    confidence: float = 0.0
    landmarks: Optional[Landmarks] = None

    @property
    def detected(self) -> bool:
        return self.box is not None

    @classmethod
    def from_dict(cls, payload: dict) -> "DetectionResult":
        def points(items) -> tuple[Point, ...]:
            return tuple(Point(float(p["x"]), float(p["y"])) for p in (items or []))

        box = payload.get("box")
        marks = payload.get("landmarks")
        return cls(
            frame_width=int(payload["frame_width"]),
            frame_height=int(payload["frame_height"]),
            box=BoundingBox(
                x=float(box["x"]), y=float(box["y"]), width=float(box["width"]), height=float(box["height"])
            )
            if box
            else None,
            confidence=float(payload.get("confidence") or 0.0),
            landmarks=Landmarks(
                left_eye=points(marks.get("left_eye")),
                right_eye=points(marks.get("right_eye")),
                mouth=points(marks.get("mouth")),
            )
            if marks
            else None,
        )


@dataclass(frozen=True)
class QualityDetails:
    face_detected: bool = False
    confidence: float = 0.0
    face_centered: bool = False
    face_size: float = 0.0
    lighting: str = "unknown"
    angle: str = "unknown"
    landmarks_detected: bool = False
    eyes_visible: bool = False
    mouth_visible: bool = False


@dataclass(frozen=True)
class QualityReport:
    score: int
    is_good_quality: bool
    warnings: tuple[str, ...] = ()
    feedback: tuple[str, ...] = ()
    details: QualityDetails = field(default_factory=QualityDetails)

    @property
    def level(self) -> str:
        if self.score >= 90:
            return "Excellent"
        if self.score >= 80:
            return "Good"
        if self.score >= 60:
            return "Fair"
        if self.score >= 40:
            return "Poor"
        return "Very Poor"
