from datetime import date
from types import SimpleNamespace

import pytest

from face_attendance.core.enums import Role
from face_attendance.main import create_app, get_container
from face_attendance.users.model import User

GOOD_DETECTION = {
    "frame_width": 640,
    "frame_height": 480,
    "box": {"x": 220, "y": 140, "width": 200, "height": 200},
    "confidence": 0.97,
    "landmarks": {
        "left_eye": [{"x": 280, "y": 200}],
        "right_eye": [{"x": 360, "y": 200}],
        "mouth": [{"x": 320, "y": 290}],
    },
}


@pytest.fixture
def app():
    settings = SimpleNamespace(
        STORAGE_BACKEND="memory", SECRET_KEY="test-secret", TESTING=True, EMBEDDING_DIMENSION=4, LOG_LEVEL="WARNING"
    )
    app = create_app(settings)
    container = get_container(app)
    container.users_repo.save(User(1, "Alice", org_id=1, role=Role.STAFF))
    container.users_repo.save(User(2, "Binh", org_id=1, role=Role.HR))
    return app


def login(client, user_id, role):
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["role"] = role.value


def enroll_alice(client):
    login(client, 2, Role.HR)
    return client.post(
        "/api/faces/enroll", json={"user_id": 1, "embedding": [1, 0, 0, 0], "detection": GOOD_DETECTION}
    )


def test_enroll_requires_hr(app):
    client = app.test_client()

    assert client.post("/api/faces/enroll", json={}).status_code == 401
    login(client, 1, Role.STAFF)
    assert client.post("/api/faces/enroll", json={}).status_code == 403


def test_enroll_and_face_checkin(app):
    client = app.test_client()
    resp = enroll_alice(client)
    assert resp.status_code == 201
    assert resp.get_json()["data"]["dimension"] == 4

    kiosk = app.test_client()
    resp = kiosk.post(
        "/api/attendance/face",
        json={"embedding": [1, 0.02, 0, 0], "kind": "check_in", "timestamp": "2024-03-04T08:20:00"},
    )
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["success"]
    assert body["data"]["status"] == "checked_in"
    assert body["data"]["late_minutes"] == 5
    assert body["data"]["record_id"] == "1:2024-03-04"

    again = kiosk.post(
        "/api/attendance/face",
        json={"embedding": [1, 0, 0, 0], "kind": "check_in", "timestamp": "2024-03-04T08:30:00"},
    )
    assert again.status_code == 409
    assert again.get_json()["errorCode"] == "ALREADY_CHECKED_IN"


def test_enroll_poor_capture(app):
    client = app.test_client()
    login(client, 2, Role.HR)

    resp = client.post("/api/faces/enroll", json={"user_id": 1, "embedding": [1, 0, 0, 0]})

    assert resp.status_code == 422
    assert resp.get_json()["errorCode"] == "POOR_ENROLLMENT_QUALITY"


def test_face_event_without_enrolment(app):
    resp = app.test_client().post("/api/attendance/face", json={"embedding": [1, 0, 0, 0], "kind": "check_in"})

    assert resp.status_code == 404
    assert resp.get_json()["errorCode"] == "NO_FACES_ENROLLED"


def test_face_event_bad_payload(app):
    resp = app.test_client().post("/api/attendance/face", json={"kind": "check_in"})

    assert resp.status_code == 400
    assert resp.get_json()["errorCode"] == "INVALID_REQUEST"


def test_status_is_private(app):
    client = app.test_client()
    login(client, 1, Role.STAFF)

    assert client.get("/api/attendance/status/2?date=2024-03-04").status_code == 403
    own = client.get("/api/attendance/status/1?date=2024-03-04")
    assert own.status_code == 200
    assert own.get_json()["data"]["status"] == "not_started"


def test_staff_cannot_record_for_others(app):
    client = app.test_client()
    login(client, 1, Role.STAFF)

    resp = client.post("/api/attendance/events", json={"user_id": 2, "kind": "check_in"})

    assert resp.status_code == 403


def test_exception_submit_and_decide(app):
    client = app.test_client()
    login(client, 2, Role.HR)
    client.post(
        "/api/attendance/events", json={"user_id": 1, "kind": "check_in", "timestamp": "2024-03-04T08:45:00"}
    )
    client.post(
        "/api/attendance/events", json={"user_id": 1, "kind": "check_out", "timestamp": "2024-03-04T17:00:00"}
    )

    login(client, 1, Role.STAFF)
    resp = client.post(
        "/api/exceptions", json={"work_date": "2024-03-04", "exception_type": "late_traffic", "reason": "Jam"}
    )
    assert resp.status_code == 201
    request_id = resp.get_json()["data"]["request_id"]
    assert client.get("/api/exceptions/pending").status_code == 403
    assert len(client.get("/api/exceptions/mine").get_json()["data"]) == 1

    login(client, 2, Role.HR)
    pending = client.get("/api/exceptions/pending").get_json()["data"]
    assert [p["request_id"] for p in pending] == [request_id]

    resp = client.post(
        f"/api/exceptions/{request_id}/decision",
        json={"action": "approve", "notes": "ok", "adjustments": {"timeAdjustmentMinutes": 20}},
    )
    body = resp.get_json()
    assert resp.status_code == 200
    assert body["data"]["status"] == "approved"
    assert body["data"]["adjusted_work_minutes"] == 495 + 20

    twice = client.post(f"/api/exceptions/{request_id}/decision", json={"action": "reject"})
    assert twice.status_code == 409

    status = client.get("/api/attendance/status/1?date=2024-03-04").get_json()["data"]
    assert status["adjusted_work_minutes"] == 515


def test_invalid_decision_action(app):
    client = app.test_client()
    login(client, 2, Role.HR)

    resp = client.post("/api/exceptions/1/decision", json={"action": "maybe"})

    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Action must be one of: approve, reject"
    assert client.post("/api/exceptions/1/decision", json={"action": " REJECT "}).status_code == 404


def test_utc_timestamp_is_accepted(app):
    client = app.test_client()
    login(client, 1, Role.STAFF)

    resp = client.post("/api/attendance/events", json={"kind": "check_in", "timestamp": "2024-03-04T12:00:00Z"})

    assert resp.status_code == 200
    assert resp.get_json()["success"]


def test_weekend_check_in_refused_by_default_policy(app):
    client = app.test_client()
    login(client, 1, Role.STAFF)

    resp = client.post("/api/attendance/events", json={"kind": "check_in", "timestamp": "2024-03-09T08:00:00"})

    assert resp.status_code == 422
    assert resp.get_json()["errorCode"] == "NON_WORKING_DAY"
