from datetime import date, datetime, time

from face_attendance.attendance.break_rules import check_break_start, close_break
from face_attendance.attendance.model import BreakSession, DailyAttendanceRecord
from face_attendance.core.enums import BreakStatus, DayStatus
from face_attendance.policy.model import BreakPolicy

DAY = date(2024, 3, 4)


def at(hour, minute=0):
    return datetime(2024, 3, 4, hour, minute)


def done(seq, start, minutes):
    return BreakSession(
        seq=seq,
        break_type="meal",
        started_at=start,
        duration_minutes=minutes,
        status=BreakStatus.COMPLETED,
        paid_minutes=minutes,
    )


def checked_in(*breaks, clock_in=at(8)):
    return DailyAttendanceRecord(
        user_id=1,
        work_date=DAY,
        status=DayStatus.CHECKED_IN,
        clock_in=clock_in,
        breaks=tuple(breaks),
        break_minutes=sum(b.duration_minutes for b in breaks),
    )


def test_close_break_within_allowance():
    session = BreakSession(seq=1, break_type="meal", started_at=at(12))

    closed = close_break(session, ended_at=at(12, 40), prior=(), policy=BreakPolicy())

    assert closed.status is BreakStatus.COMPLETED
    assert closed.duration_minutes == 40
    assert not closed.exceeded
    assert closed.is_paid
    assert not closed.implicitly_closed


def test_close_break_over_allowance():
    session = BreakSession(seq=2, break_type="meal", started_at=at(14))

    closed = close_break(session, ended_at=at(14, 30), prior=(done(1, at(12), 45),), policy=BreakPolicy())

    assert closed.exceeded_minutes == 15
    assert closed.paid_minutes == 15
    assert closed.unpaid_minutes == 15


def test_break_allowed_reports_remaining_quota():
    admission = check_break_start(checked_in(done(1, at(10), 20)), at=at(12), policy=BreakPolicy())

    assert admission.allowed
    assert admission.remaining_minutes == 40


def test_minimum_work_hours():
    admission = check_break_start(checked_in(), at=at(9), policy=BreakPolicy(min_work_hours_required=2))

    assert not admission.allowed
    assert "at least 2 hours" in admission.reason


def test_quota_exhausted():
    admission = check_break_start(checked_in(done(1, at(12), 60)), at=at(15), policy=BreakPolicy())

    assert not admission.allowed
    assert admission.reason == "Break time quota exhausted (60 minutes)"
    assert admission.remaining_minutes == 0


def test_max_splits_on_flexible_policy():
    record = checked_in(done(1, at(10), 10), done(2, at(12), 10))

    admission = check_break_start(record, at=at(15), policy=BreakPolicy(max_splits=2))

    assert not admission.allowed
    assert admission.reason == "Maximum 2 break sessions allowed"


def test_single_break_on_fixed_policy():
    admission = check_break_start(checked_in(done(1, at(12), 10)), at=at(15), policy=BreakPolicy(is_flexible=False))

    assert not admission.allowed
    assert "non-flexible" in admission.reason


def test_break_window():
    policy = BreakPolicy(earliest_break_time=time(11, 0), latest_break_time=time(14, 0))

    assert not check_break_start(checked_in(), at=at(10, 30), policy=policy).allowed
    assert check_break_start(checked_in(), at=at(12), policy=policy).allowed
    assert not check_break_start(checked_in(), at=at(14, 30), policy=policy).allowed


def test_other_states_are_left_to_the_state_machine():
    record = DailyAttendanceRecord(user_id=1, work_date=DAY)

    assert check_break_start(record, at=at(12), policy=BreakPolicy(min_work_hours_required=8)).allowed
