from datetime import date, datetime

import pytest

from src.shift_scheduler.shift_scheduler.business_day.clock import BusinessDayClock
from src.shift_scheduler.shift_scheduler.business_day.model import BusinessDayConfig, WallClockTime
from src.shift_scheduler.shift_scheduler.core.enums import TimeBoundary
from src.shift_scheduler.shift_scheduler.core.exceptions import InvalidRangeError

D = date(2025, 3, 4)


def late_night_clock():
    return BusinessDayClock(BusinessDayConfig(start_hour=8, end_hour=28))


def test_early_morning_reading_belongs_to_previous_business_day():
    clock = late_night_clock()

    assert clock.to_business_minute(WallClockTime(3, 0)) == 1620
    assert clock.to_business_minute(WallClockTime(8, 0)) == 480
    assert clock.to_business_minute(WallClockTime(7, 59)) == 1919


def test_closing_time_is_a_valid_end_but_not_a_valid_start():
    clock = late_night_clock()

    assert clock.is_allowed_end(WallClockTime(4, 0))
    assert not clock.is_allowed_start(WallClockTime(4, 0))
    assert clock.is_allowed(WallClockTime(3, 45), TimeBoundary.START)
    assert not clock.is_allowed(WallClockTime(5, 0), TimeBoundary.END)


def test_validate_range_across_midnight():
    rng = late_night_clock().validate_range(D, WallClockTime(22, 0), WallClockTime(2, 0))

    assert rng.start_minute == 1320
    assert rng.end_minute == 1560
    assert rng.duration_minutes == 240
    assert rng.start_at == datetime(2025, 3, 4, 22, 0)
    assert rng.end_at == datetime(2025, 3, 5, 2, 0)
    assert str(rng.end) == "02:00"


def test_validate_range_rejects_start_at_closing_time():
    with pytest.raises(InvalidRangeError) as exc:
        late_night_clock().validate_range(D, WallClockTime(4, 0), WallClockTime(5, 0))

    assert "Start time 04:00 is outside business hours. (08:00 ~ 04:00)" in str(exc.value)


def test_validate_range_rejects_end_not_after_start():
    clock = BusinessDayClock(BusinessDayConfig())

    with pytest.raises(InvalidRangeError, match="End time must be after start time"):
        clock.validate_range(D, WallClockTime(12, 0), WallClockTime(12, 0))


def test_default_window_rejects_times_after_midnight():
    clock = BusinessDayClock(BusinessDayConfig())

    assert clock.is_allowed_end(WallClockTime(0, 0))
    assert not clock.is_allowed_end(WallClockTime(0, 15))
    with pytest.raises(InvalidRangeError):
        clock.validate_range(D, WallClockTime(7, 0), WallClockTime(9, 0))


def test_from_raw_reads_small_end_hour_as_next_day():
    config = BusinessDayConfig.from_raw(8, 4)

    assert config.end_hour == 28
    assert config.label() == "08:00 ~ 04:00"


def test_from_raw_fills_missing_values_and_clamps():
    assert BusinessDayConfig.from_raw(None, None) == BusinessDayConfig(8, 24)
    assert BusinessDayConfig.from_raw(10, 60).end_hour == 34


def test_config_rejects_window_longer_than_a_day():
    with pytest.raises(InvalidRangeError):
        BusinessDayConfig(start_hour=8, end_hour=40)


def test_wall_clock_time_validation_and_wrap():
    with pytest.raises(InvalidRangeError):
        WallClockTime(24, 0)

    assert WallClockTime.from_minutes(1620) == WallClockTime(3, 0)
