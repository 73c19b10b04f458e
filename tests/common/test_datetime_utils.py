from datetime import date, datetime, time, timedelta, timezone

from face_attendance.common.datetime_utils import (
    as_local_naive,
    minutes_past,
    parse_hhmm,
    parse_iso_date,
    parse_iso_datetime,
    whole_minutes,
)
from face_attendance.common.locks import KeyedLock


def test_whole_minutes_floors_and_never_negative():
    start = datetime(2024, 3, 4, 8, 0)

    assert whole_minutes(start, start + timedelta(minutes=10, seconds=59)) == 10
    assert whole_minutes(start, start - timedelta(minutes=5)) == 0


def test_minutes_past_counts_started_minutes():
    ref = datetime(2024, 3, 4, 8, 15)

    assert minutes_past(ref, ref) == 0
    assert minutes_past(ref, ref + timedelta(seconds=1)) == 1
    assert minutes_past(ref, ref + timedelta(minutes=5)) == 5
    assert minutes_past(ref, ref - timedelta(minutes=5)) == 0


def test_parsers():
    assert parse_iso_date("2024-03-04") == date(2024, 3, 4)
    assert parse_iso_datetime("2024-03-04T08:20:00") == datetime(2024, 3, 4, 8, 20)
    assert parse_hhmm("08:30:00") == time(8, 30)


def test_offset_timestamps_become_naive_local_time():
    utc = datetime(2024, 3, 4, 8, 20, tzinfo=timezone.utc)
    expected = utc.astimezone().replace(tzinfo=None)

    parsed = parse_iso_datetime("2024-03-04T08:20:00Z")

    assert parsed.tzinfo is None
    assert parsed == expected
    assert parse_iso_datetime("2024-03-04T15:20:00+07:00") == expected
    assert as_local_naive(datetime(2024, 3, 4, 8, 20)) == datetime(2024, 3, 4, 8, 20)


def test_keyed_lock_is_reentrant_per_key():
    locks = KeyedLock()

    with locks.hold(1):
        with locks.hold(1):
            pass
        with locks.hold(2):
            pass
