from datetime import datetime, timedelta, timezone

from common.core.clock import FixedClock, SystemClock, add_days, ensure_utc


def test_fixed_clock_advances():
    clock = FixedClock(datetime(2025, 1, 31, 23, 0, tzinfo=timezone.utc))

    clock.advance(hours=2)

    assert clock.now() == datetime(2025, 2, 1, 1, 0, tzinfo=timezone.utc)


def test_naive_datetimes_are_utc():
    naive = datetime(2025, 6, 1, 12, 0)

    assert ensure_utc(naive).tzinfo == timezone.utc
    assert FixedClock(naive).now() == datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def test_aware_datetimes_are_normalised():
    plus_two = timezone(timedelta(hours=2))

    assert ensure_utc(datetime(2025, 6, 1, 14, 0, tzinfo=plus_two)) == datetime(
        2025, 6, 1, 12, 0, tzinfo=timezone.utc
    )


def test_add_days_keeps_time_of_day():
    start = datetime(2025, 2, 27, 8, 15, tzinfo=timezone.utc)

    assert add_days(start, 30) == datetime(2025, 3, 29, 8, 15, tzinfo=timezone.utc)


def test_system_clock_is_aware():
    assert SystemClock().now().tzinfo is not None
