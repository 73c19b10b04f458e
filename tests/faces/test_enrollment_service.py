from datetime import datetime

from face_attendance.core.enums import ErrorCode, Role
from face_attendance.faces.memory_embedding_repository import InMemoryEmbeddingRepository
from face_attendance.faces.model import BoundingBox, DetectionResult, Landmarks, Point
from face_attendance.faces.quality import EnrollmentQualityScorer
from face_attendance.faces.service import EnrollmentService
from face_attendance.faces.store import EmbeddingStore
from face_attendance.users.memory_user_repository import InMemoryUserRepository
from face_attendance.users.model import User

GOOD = DetectionResult(
    frame_width=640,
    frame_height=480,
    box=BoundingBox(x=220, y=140, width=200, height=200),
    confidence=0.97,
    landmarks=Landmarks(left_eye=(Point(280, 200),), right_eye=(Point(360, 200),), mouth=(Point(320, 290),)),
)


def make_service(*users):
    store = EmbeddingStore(InMemoryEmbeddingRepository(), dimension=4)
    repo = InMemoryUserRepository(users or [User(1, "Alice", org_id=1, role=Role.STAFF)])
    return EnrollmentService(store, repo, EnrollmentQualityScorer()), store


def test_enroll_good_capture():
    service, store = make_service()

    result = service.enroll(user_id=1, vector=[1, 0, 0, 0], detection=GOOD, now=datetime(2024, 1, 1, 9, 0))

    assert result.success
    assert result.data.captured_at == datetime(2024, 1, 1, 9, 0)
    assert "Excellent" in result.message
    assert service.list_for_user(1) == (result.data,)
    assert store.snapshot() == (result.data,)


def test_enroll_rejects_poor_capture():
    service, store = make_service()

    result = service.enroll(user_id=1, vector=[1, 0, 0, 0], detection=None)

    assert result.error_code is ErrorCode.POOR_ENROLLMENT_QUALITY
    assert result.data.score == 0
    assert store.snapshot() == ()


def test_enroll_inactive_user():
    service, _ = make_service(User(1, "Alice", org_id=1, role=Role.STAFF, is_active=False))

    result = service.enroll(user_id=1, vector=[1, 0, 0, 0], detection=GOOD)

    assert result.error_code is ErrorCode.USER_INACTIVE


def test_enroll_wrong_dimension():
    service, _ = make_service()

    result = service.enroll(user_id=1, vector=[1, 0, 0], detection=GOOD)

    assert result.error_code is ErrorCode.DIMENSION_MISMATCH


def test_revoke_unknown_embedding():
    service, _ = make_service()

    assert service.revoke(99).error_code is ErrorCode.INVALID_REQUEST
