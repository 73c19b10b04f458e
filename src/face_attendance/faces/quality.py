from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from ..core.constants import QUALITY_MAX_SCORE, QUALITY_PASS_SCORE
from .model import DetectionResult, Point, QualityDetails, QualityReport


@dataclass(frozen=True)
class QualityThresholds:
    min_confidence: float = 0.7
    min_face_size: float = 150
    max_face_ratio: float = 0.8
    max_center_distance: float = 0.3
    max_tilt_degrees: float = 15.0
    require_both_eyes: bool = True
    require_mouth: bool = True


DEFAULT_THRESHOLDS = QualityThresholds()


def _centroid(points: tuple[Point, ...]) -> Point:
    return Point(sum(p.x for p in points) / len(points), sum(p.y for p in points) / len(points))


class EnrollmentQualityScorer:
    """Additive 0..100 score of an enrolment capture.

    A capture is good only with score >= 80 AND no warnings, so a high score
    cannot hide a single disqualifying defect such as occluded eyes.
    Only used at enrolment time, never on check-in probes.
    """

    def __init__(self, thresholds: Optional[QualityThresholds] = None):
        self._t = thresholds or DEFAULT_THRESHOLDS

    def score(self, detection: Optional[DetectionResult]) -> QualityReport:
        t = self._t
        warnings: list[str] = []
        feedback: list[str] = []

        if detection is None or not detection.detected:
            return QualityReport(
                score=0,
                is_good_quality=False,
                warnings=("No face detected",),
                feedback=("Please position your face in the frame",),
            )

        score = 20
        confidence = float(detection.confidence)
        if confidence < t.min_confidence:
            warnings.append(f"Low detection confidence: {confidence * 100:.1f}%")
            feedback.append("Face detection unclear - improve lighting")
        else:
            score += 20

        box = detection.box
        face_size = min(box.width, box.height)
        if face_size < t.min_face_size:
            warnings.append(f"Face too small: {face_size:.0f}px")
            feedback.append("Move closer to the camera")
        elif face_size > detection.frame_width * t.max_face_ratio:
            warnings.append("Face too large")
            feedback.append("Move back from the camera")
        else:
            score += 15

        center = box.center
        dx = abs(center.x - detection.frame_width / 2) / detection.frame_width
        dy = abs(center.y - detection.frame_height / 2) / detection.frame_height
        face_centered = math.hypot(dx, dy) <= t.max_center_distance
        if face_centered:
            score += 15
        else:
            warnings.append("Face not centered")
            feedback.append("Move your face to the center of the frame")

        landmarks_detected = eyes_visible = mouth_visible = False
        angle = "unknown"
        marks = detection.landmarks
        if marks is not None:
            landmarks_detected = True
            score += 10

            eyes_visible = bool(marks.left_eye) and bool(marks.right_eye)
            if t.require_both_eyes and not eyes_visible:
                warnings.append("Eyes not clearly visible")
                feedback.append("Ensure both eyes are visible")
            elif eyes_visible:
                score += 10

            mouth_visible = bool(marks.mouth)
            if t.require_mouth and not mouth_visible:
                warnings.append("Mouth not visible")
                feedback.append("Show your mouth clearly")
            elif mouth_visible:
                score += 5

            if eyes_visible:
                left, right = _centroid(marks.left_eye), _centroid(marks.right_eye)
                tilt = abs(math.degrees(math.atan2(right.y - left.y, right.x - left.x)))
                if tilt > t.max_tilt_degrees:
                    angle = "turned"
                    warnings.append("Face tilted")
                    feedback.append("Keep your head straight")
                else:
                    angle = "good"
                    score += 5

        if confidence > 0.85:
            lighting = "good"
        elif confidence < 0.6:
            lighting = "low"
        else:
            lighting = "unknown"

        score = min(QUALITY_MAX_SCORE, score)
        return QualityReport(
            score=score,
            is_good_quality=score >= QUALITY_PASS_SCORE and not warnings,
            warnings=tuple(warnings),
            feedback=tuple(feedback),
            details=QualityDetails(
                face_detected=True,
                confidence=confidence,
                face_centered=face_centered,
                face_size=face_size,
                lighting=lighting,
                angle=angle,
                landmarks_detected=landmarks_detected,
                eyes_visible=eyes_visible,
                mouth_visible=mouth_visible,
            ),
        )
