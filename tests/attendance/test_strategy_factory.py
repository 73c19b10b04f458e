from datetime import date, datetime

from face_attendance.attendance.factory import AttendanceStrategyFactory
from face_attendance.attendance.strategies.early_strategy import EarlyLeaveStrategy
from face_attendance.attendance.strategies.late_strategy import LateStrategy
from face_attendance.attendance.strategies.normal_strategy import NormalStrategy
from face_attendance.core.enums import AttendanceStatus
from face_attendance.policy.model import AttendancePolicy

POLICY = AttendancePolicy(org_id=1, effective_from=date(2024, 1, 1))
DAY = date(2024, 3, 4)


def test_factory_checkin_on_time_at_threshold():
    factory = AttendanceStrategyFactory()
    strategy = factory.for_checkin(at=datetime(2024, 3, 4, 8, 15), work_date=DAY, policy=POLICY)

    assert isinstance(strategy, NormalStrategy)


def test_factory_checkin_late_after_threshold():
    at = datetime(2024, 3, 4, 8, 16)
    factory = AttendanceStrategyFactory()
    strategy = factory.for_checkin(at=at, work_date=DAY, policy=POLICY)

    assert isinstance(strategy, LateStrategy)
    decision = strategy.decide_checkin(at=at, work_date=DAY, policy=POLICY)
    assert decision.status == AttendanceStatus.LATE
    assert decision.minutes == 1


def test_late_minutes_count_a_started_minute():
    at = datetime(2024, 3, 4, 8, 15, 1)
    decision = LateStrategy().decide_checkin(at=at, work_date=DAY, policy=POLICY)

    assert decision.minutes == 1


def test_factory_checkout_early_before_cutoff():
    at = datetime(2024, 3, 4, 16, 30)
    factory = AttendanceStrategyFactory()
    strategy = factory.for_checkout(at=at, work_date=DAY, policy=POLICY)

    assert isinstance(strategy, EarlyLeaveStrategy)
    decision = strategy.decide_checkout(at=at, work_date=DAY, policy=POLICY, current=AttendanceStatus.ON_TIME)
    assert decision.status == AttendanceStatus.EARLY_LEAVE
    assert decision.minutes == 15


def test_early_leave_keeps_late_status():
    at = datetime(2024, 3, 4, 16, 0)
    decision = EarlyLeaveStrategy().decide_checkout(
        at=at, work_date=DAY, policy=POLICY, current=AttendanceStatus.LATE
    )

    assert decision.status == AttendanceStatus.LATE
    assert decision.minutes == 45


def test_factory_checkout_at_cutoff_is_normal():
    factory = AttendanceStrategyFactory()
    strategy = factory.for_checkout(at=datetime(2024, 3, 4, 16, 45), work_date=DAY, policy=POLICY)

    assert isinstance(strategy, NormalStrategy)
