import json
from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest

from face_attendance.container import build_container
from face_attendance.core.enums import ApprovalStatus, ErrorCode, Role
from face_attendance.notifications.model import ExceptionAutoApproved, ExceptionDecided
from face_attendance.notifications.sink import CollectingSink
from face_attendance.requests.model import ImpactOverrides
from face_attendance.users.model import User

DAY = date(2024, 3, 4)
NOW = datetime(2024, 3, 5, 9, 0)


def at(hour, minute=0):
    return datetime(2024, 3, 4, hour, minute)


@pytest.fixture
def container():
    c = build_container(SimpleNamespace(STORAGE_BACKEND="memory", EMBEDDING_DIMENSION=4), sink=CollectingSink())
    c.users_repo.save(User(1, "Alice", org_id=1, role=Role.STAFF, hourly_rate=Decimal("60")))
    c.users_repo.save(User(2, "Binh", org_id=1, role=Role.HR))
    c.users_repo.save(User(3, "Chi", org_id=1, role=Role.STAFF))
    c.users_repo.save(User(4, "Dung", org_id=1, role=Role.ADMIN))
    return c


def work_day(c, user_id, check_in, check_out=at(17)):
    c.attendance_service.manual_event(user_id=user_id, kind="check_in", at=check_in)
    if check_out is not None:
        c.attendance_service.manual_event(user_id=user_id, kind="check_out", at=check_out)


def submit(c, **overrides):
    fields = dict(user_id=1, work_date=DAY, exception_type="late_traffic", reason="Accident on the bridge", now=NOW)
    fields.update(overrides)
    return c.exception_service.submit(**fields)


def test_submit_creates_pending_request(container):
    work_day(container, 1, at(8, 45))

    result = submit(container)

    assert result.success
    assert result.message == "Exception request submitted for approval"
    req = result.data
    assert req.status is ApprovalStatus.PENDING
    assert req.time_adjustment_minutes == 30
    assert req.adjusted_work_minutes == 495 + 30
    assert req.record_id == "1:2024-03-04"
    assert container.exception_service.list_pending() == [req]
    assert container.exception_service.list_for_user(1) == [req]
    (audit,) = container.requests_repo.list_audit(target=f"exception:{req.request_id}")
    assert audit.action == "exception.submitted"
    assert json.loads(audit.details)["status"] == "pending"
    assert container.engine.current_record(1, DAY).data.adjusted_work_minutes is None


def test_submit_validation(container):
    work_day(container, 1, at(8, 0))

    assert submit(container, exception_type="late_alien").error_code is ErrorCode.INVALID_REQUEST
    assert submit(container, reason="   ").error_code is ErrorCode.INVALID_REQUEST
    assert submit(container, user_id=99).error_code is ErrorCode.USER_INACTIVE
    assert submit(container, work_date=date(2024, 3, 1)).error_code is ErrorCode.RECORD_NOT_FOUND
    assert submit(container).error_code is ErrorCode.NO_DEVIATION


def test_approve_applies_adjustment_overlay(container):
    work_day(container, 1, at(8, 45))
    req = submit(container).data

    result = container.exception_service.approve(actor_id=2, request_id=req.request_id, note="ok", now=NOW)

    assert result.success
    assert result.message == "Exception approved and applied"
    assert result.data.status is ApprovalStatus.APPROVED
    assert result.data.decided_by == 2
    record = container.engine.current_record(1, DAY).data
    assert record.work_minutes == 495
    assert record.adjusted_work_minutes == 525
    assert record.adjustment_reason == "Accident on the bridge"
    assert container.exception_service.list_pending() == []
    actions = [a.action for a in container.requests_repo.list_audit()]
    assert actions == ["exception.approved", "exception.submitted"]
    (decided,) = container.sink.of_type(ExceptionDecided)
    assert decided.status == "approved"


def test_approve_with_overrides(container):
    work_day(container, 1, at(8, 45))
    req = submit(container).data

    result = container.exception_service.approve(
        actor_id=4,
        request_id=req.request_id,
        overrides=ImpactOverrides(time_adjustment_minutes=10, performance_penalty=0),
        now=NOW,
    )

    assert result.data.time_adjustment_minutes == 10
    assert result.data.adjusted_work_minutes == 505
    assert container.engine.current_record(1, DAY).data.adjusted_work_minutes == 505


def test_only_hr_or_admin_can_decide(container):
    work_day(container, 1, at(8, 45))
    req = submit(container).data

    result = container.exception_service.approve(actor_id=3, request_id=req.request_id)

    assert result.error_code is ErrorCode.FORBIDDEN
    assert container.requests_repo.get_exception(request_id=req.request_id).status is ApprovalStatus.PENDING


def test_decided_request_cannot_be_decided_again(container):
    work_day(container, 1, at(8, 45))
    req = submit(container).data
    container.exception_service.reject(actor_id=2, request_id=req.request_id)

    again = container.exception_service.approve(actor_id=2, request_id=req.request_id)

    assert again.error_code is ErrorCode.EXCEPTION_ALREADY_DECIDED
    assert container.engine.current_record(1, DAY).data.adjusted_work_minutes is None


def test_unknown_request(container):
    assert container.exception_service.reject(actor_id=2, request_id=42).error_code is ErrorCode.EXCEPTION_NOT_FOUND


def test_reject_default_note(container):
    work_day(container, 1, at(8, 45))
    req = submit(container).data

    result = container.exception_service.reject(actor_id=2, request_id=req.request_id, now=NOW)

    assert result.message == "Exception rejected"
    assert result.data.status is ApprovalStatus.REJECTED
    assert result.data.decision_note == "Rejected by HR"


def test_mass_late_weather_is_auto_approved_and_applied(container):
    work_day(container, 1, at(8, 45))
    work_day(container, 3, at(9, 0))
    work_day(container, 2, at(8, 0))

    result = submit(container, exception_type="late_weather", reason="Flooded streets")

    assert result.message == "Exception auto-approved and applied"
    req = result.data
    assert req.status is ApprovalStatus.AUTO_APPROVED
    assert req.decision_note == "mass_late_event"
    assert not req.affect_salary
    assert container.engine.current_record(1, DAY).data.adjusted_work_minutes == 525
    assert container.sink.of_type(ExceptionAutoApproved)[0].request_id == req.request_id
    assert container.exception_service.list_pending() == []
    actions = [a.action for a in container.requests_repo.list_audit()]
    assert actions == ["exception.auto_approved", "exception.submitted"]


def test_salary_deduction_uses_user_rate(container):
    work_day(container, 1, at(8, 45))

    req = submit(container, request_adjustment=False).data

    assert req.salary_deduction == Decimal("30.00")
    assert req.adjusted_work_minutes is None

    container.exception_service.approve(actor_id=2, request_id=req.request_id)
    assert container.engine.current_record(1, DAY).data.adjusted_work_minutes is None


def test_early_medical_with_document(container):
    work_day(container, 1, at(8, 0), at(15, 0))

    result = submit(container, exception_type="early_medical", reason="Clinic", supporting_document="scan-17.pdf")

    assert result.data.status is ApprovalStatus.AUTO_APPROVED
    assert result.data.time_adjustment_minutes == 105


def test_adjustment_filed_before_check_out_follows_the_final_total(container):
    work_day(container, 1, at(8, 45), check_out=None)
    work_day(container, 3, at(9, 0), check_out=None)
    work_day(container, 2, at(8, 0), check_out=None)

    req = submit(container, exception_type="late_weather", reason="Flooded streets", now=at(9, 30)).data
    assert req.status is ApprovalStatus.AUTO_APPROVED
    assert container.engine.current_record(1, DAY).data.adjusted_work_minutes == 30

    container.attendance_service.manual_event(user_id=1, kind="check_out", at=at(17))

    record = container.engine.current_record(1, DAY).data
    assert record.work_minutes == 495
    assert record.adjusted_work_minutes == 525
    assert record.effective_work_minutes == 525


def test_approval_before_check_out_follows_the_final_total(container):
    work_day(container, 1, at(8, 45), check_out=None)
    req = submit(container, now=at(9, 30)).data
    container.exception_service.approve(actor_id=2, request_id=req.request_id, now=at(10))

    container.attendance_service.manual_event(user_id=1, kind="check_out", at=at(17))

    assert container.engine.current_record(1, DAY).data.adjusted_work_minutes == 525
