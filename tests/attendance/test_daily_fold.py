import random
from datetime import date, datetime

import pytest

from face_attendance.attendance.fold import apply_adjustments, derive_daily_record
from face_attendance.attendance.model import (
    BreakEnd,
    BreakStart,
    CheckIn,
    CheckOut,
    WorkHourAdjustment,
)
from face_attendance.core.enums import AttendanceStatus, BreakStatus, DayStatus, ErrorCode
from face_attendance.core.exceptions import InvalidTransitionError
from face_attendance.policy.model import AttendancePolicy, BreakPolicy

DAY = date(2024, 3, 4)
POLICY = AttendancePolicy(org_id=1, effective_from=date(2024, 1, 1))


def at(hour, minute=0, second=0):
    return datetime(2024, 3, 4, hour, minute, second)


def fold(*events, policy=POLICY):
    return derive_daily_record(list(events), policy, user_id=1, work_date=DAY)


def test_no_events_is_not_started():
    record = fold()

    assert record.status is DayStatus.NOT_STARTED
    assert record.record_id == "1:2024-03-04"
    assert record.clock_in is None


def test_empty_list_needs_identity_and_date():
    with pytest.raises(ValueError):
        derive_daily_record([], POLICY)


def test_checkin_within_threshold_is_on_time():
    record = fold(CheckIn(1, at(8, 10)))

    assert record.status is DayStatus.CHECKED_IN
    assert not record.is_late
    assert record.attendance_status is AttendanceStatus.ON_TIME


def test_checkin_after_threshold_is_late():
    record = fold(CheckIn(1, at(8, 20), match_confidence=0.91))

    assert record.is_late
    assert record.late_minutes == 5
    assert record.attendance_status is AttendanceStatus.LATE
    assert record.check_in_confidence == 0.91


def test_full_day_with_break_and_overtime():
    record = fold(
        CheckIn(1, at(8, 0)),
        BreakStart(1, at(12, 0)),
        BreakEnd(1, at(12, 45)),
        CheckOut(1, at(17, 30)),
    )

    assert record.status is DayStatus.CHECKED_OUT
    assert record.break_minutes == 45
    assert record.work_minutes == 9 * 60 + 30 - 45
    assert record.overtime_minutes == 30
    assert not record.is_early_leave
    assert record.attendance_status is AttendanceStatus.ON_TIME


def test_overtime_disabled():
    policy = AttendancePolicy(org_id=1, effective_from=date(2024, 1, 1), overtime_enabled=False)

    record = fold(CheckIn(1, at(8, 0)), CheckOut(1, at(18, 0)), policy=policy)

    assert record.overtime_minutes == 0


def test_early_leave_after_on_time_arrival():
    record = fold(CheckIn(1, at(8, 0)), CheckOut(1, at(16, 0)))

    assert record.is_early_leave
    assert record.early_leave_minutes == 45
    assert record.attendance_status is AttendanceStatus.EARLY_LEAVE


def test_early_leave_after_late_arrival_stays_late():
    record = fold(CheckIn(1, at(9, 0)), CheckOut(1, at(16, 0)))

    assert record.is_late
    assert record.is_early_leave
    assert record.attendance_status is AttendanceStatus.LATE


def test_fold_is_deterministic_and_order_independent():
    events = [
        CheckIn(1, at(8, 0), event_id=1),
        BreakStart(1, at(10, 0), event_id=2),
        BreakEnd(1, at(10, 15), event_id=3),
        BreakStart(1, at(12, 0), event_id=4),
        BreakEnd(1, at(12, 30), event_id=5),
        CheckOut(1, at(17, 0), event_id=6),
    ]
    shuffled = list(events)
    random.Random(3).shuffle(shuffled)

    first = derive_daily_record(events, POLICY)
    assert derive_daily_record(events, POLICY) == first
    assert derive_daily_record(shuffled, POLICY) == first


@pytest.mark.parametrize(
    "events, code",
    [
        ([CheckIn(1, at(8)), CheckIn(1, at(9))], ErrorCode.ALREADY_CHECKED_IN),
        ([CheckOut(1, at(17))], ErrorCode.NOT_CHECKED_IN),
        ([BreakStart(1, at(12))], ErrorCode.NOT_CHECKED_IN),
        ([CheckIn(1, at(8)), BreakEnd(1, at(12))], ErrorCode.NO_ACTIVE_BREAK),
        ([CheckIn(1, at(8)), BreakStart(1, at(12)), BreakStart(1, at(12, 5))], ErrorCode.BREAK_IN_PROGRESS),
        ([CheckIn(1, at(8)), CheckOut(1, at(17)), BreakStart(1, at(18))], ErrorCode.ALREADY_CHECKED_OUT),
        ([CheckIn(1, at(8)), CheckOut(1, at(17)), CheckOut(1, at(18))], ErrorCode.ALREADY_CHECKED_OUT),
        ([CheckIn(1, at(8)), CheckOut(1, at(17)), CheckIn(1, at(18))], ErrorCode.ALREADY_CHECKED_IN),
    ],
)
def test_illegal_transitions(events, code):
    with pytest.raises(InvalidTransitionError) as exc:
        fold(*events)

    assert exc.value.code is code


def test_checkout_during_break_closes_it_implicitly():
    record = fold(CheckIn(1, at(8, 0)), BreakStart(1, at(12, 0)), CheckOut(1, at(13, 0)))

    assert record.status is DayStatus.CHECKED_OUT
    assert record.open_break is None
    (session,) = record.breaks
    assert session.implicitly_closed
    assert session.duration_minutes == 60
    assert record.work_minutes == 5 * 60 - 60


def test_open_break_is_reported():
    record = fold(CheckIn(1, at(8, 0)), BreakStart(1, at(12, 0), break_type="rest"))

    assert record.status is DayStatus.ON_BREAK
    assert record.open_break.break_type == "rest"
    assert record.open_break.status is BreakStatus.IN_PROGRESS
    assert record.break_minutes == 0


def test_cumulative_break_excess_lands_on_last_session():
    record = fold(
        CheckIn(1, at(8, 0)),
        BreakStart(1, at(10, 0)),
        BreakEnd(1, at(10, 20)),
        BreakStart(1, at(12, 0)),
        BreakEnd(1, at(12, 20)),
        BreakStart(1, at(15, 0)),
        BreakEnd(1, at(15, 25)),
    )

    first, second, third = record.breaks
    assert not first.exceeded and not second.exceeded
    assert third.exceeded
    assert third.exceeded_minutes == 5
    assert third.paid_minutes == 20
    assert third.unpaid_minutes == 5
    assert not third.is_paid
    assert record.break_minutes == 65


def test_paid_allowance_smaller_than_total():
    policy = AttendancePolicy(
        org_id=1, effective_from=date(2024, 1, 1), breaks=BreakPolicy(total_duration_minutes=60, paid_duration_minutes=30)
    )

    record = fold(CheckIn(1, at(8, 0)), BreakStart(1, at(12, 0)), BreakEnd(1, at(12, 45)), policy=policy)

    (session,) = record.breaks
    assert session.paid_minutes == 30
    assert session.unpaid_minutes == 15
    assert not session.exceeded


def test_same_instant_events_keep_storage_order():
    record = derive_daily_record(
        [BreakStart(1, at(12, 0), event_id=3), CheckIn(1, at(8, 0), event_id=1), BreakEnd(1, at(12, 0), event_id=4)],
        POLICY,
    )

    assert record.status is DayStatus.CHECKED_IN
    assert record.breaks[0].duration_minutes == 0


def test_latest_adjustment_is_overlaid():
    record = fold(CheckIn(1, at(8, 30)), CheckOut(1, at(17, 0)))
    adjustments = [
        WorkHourAdjustment(1, DAY, 1, record.work_minutes, 500, "traffic", 2, datetime(2024, 3, 5, 9), 1),
        WorkHourAdjustment(1, DAY, 2, record.work_minutes, 510, "re-approved", 2, datetime(2024, 3, 6, 9), 2),
    ]

    adjusted = apply_adjustments(record, adjustments)

    assert adjusted.adjusted_work_minutes == 510
    assert adjusted.adjustment_reason == "re-approved"
    assert adjusted.effective_work_minutes == 510
    assert adjusted.work_minutes == record.work_minutes
    assert apply_adjustments(record, []) is record


def test_adjustment_made_on_open_day_is_a_delta():
    open_day = fold(CheckIn(1, at(8, 30)))
    excuse = WorkHourAdjustment(1, DAY, 1, open_day.work_minutes, 15, "traffic", None, at(9), 1)

    assert apply_adjustments(open_day, [excuse]).adjusted_work_minutes == 15

    closed = fold(CheckIn(1, at(8, 30)), CheckOut(1, at(17, 0)))
    assert apply_adjustments(closed, [excuse]).adjusted_work_minutes == closed.work_minutes + 15
