"""Example: drive the service layer directly (no Flask, in-memory storage).

Controllers are thin; enrolment, check-in and exception handling all live
in the services wired by ``build_container``.
"""

from datetime import datetime
from decimal import Decimal
from types import SimpleNamespace

import numpy as np

from face_attendance.common.logging_setup import configure_logging
from face_attendance.container import build_container
from face_attendance.core.enums import Role
from face_attendance.faces.model import BoundingBox, DetectionResult, Landmarks, Point
from face_attendance.notifications.sink import CollectingSink
from face_attendance.users.model import User


def good_detection() -> DetectionResult:
    return DetectionResult(
        frame_width=640,
        frame_height=480,
        box=BoundingBox(x=220, y=140, width=200, height=200),
        confidence=0.97,
        landmarks=Landmarks(
            left_eye=(Point(280, 200),),
            right_eye=(Point(360, 200),),
            mouth=(Point(320, 290),),
        ),
    )


def main():
    configure_logging("INFO")
    settings = SimpleNamespace(STORAGE_BACKEND="memory", EMBEDDING_DIMENSION=128)
    sink = CollectingSink()
    container = build_container(settings, sink=sink)

    container.users_repo.save(User(1, "Alice Nguyen", org_id=1, role=Role.STAFF, hourly_rate=Decimal("125000")))
    container.users_repo.save(User(2, "Binh Tran", org_id=1, role=Role.HR))

    rng = np.random.default_rng(7)
    alice = rng.normal(size=128)
    print(container.enrollment_service.enroll(user_id=1, vector=alice.tolist(), detection=good_detection()).message)

    probe = (alice + rng.normal(scale=0.05, size=128)).tolist()
    day = datetime(2024, 3, 4)
    checked_in = container.attendance_service.face_event(probe=probe, kind="check_in", at=day.replace(hour=8, minute=40))
    record = checked_in.data
    print(checked_in.message, "- late:", record.is_late, record.late_minutes, "min")

    container.attendance_service.face_event(probe=probe, kind="check_out", at=day.replace(hour=17, minute=30))

    submitted = container.exception_service.submit(
        user_id=1, work_date=day.date(), exception_type="late_traffic", reason="Accident on the bridge"
    )
    print(submitted.message)
    approved = container.exception_service.approve(actor_id=2, request_id=submitted.data.request_id)
    print(approved.message)

    final = container.attendance_service.today_status(1, day.date()).data
    print("work minutes:", final.work_minutes, "adjusted:", final.adjusted_work_minutes)
    print("events:", [e.name for e in sink.events])

    container.close()


if __name__ == "__main__":
    main()
