from datetime import date

from src.shift_scheduler.shift_scheduler.business_day.clock import BusinessDayClock
from src.shift_scheduler.shift_scheduler.business_day.model import BusinessDayConfig, WallClockTime
from src.shift_scheduler.shift_scheduler.core.enums import Granularity, TimeBoundary
from src.shift_scheduler.shift_scheduler.shifts.conflicts import ConflictDetector
from src.shift_scheduler.shift_scheduler.shifts.model import Shift

D = date(2025, 3, 4)
CLOCK = BusinessDayClock(BusinessDayConfig(8, 24))


def shift(shift_id, start, end, *, approved=True):
    return Shift(
        shift_id=shift_id,
        user_id=1,
        user_type="Barista",
        work_date=D,
        start=WallClockTime(*start),
        end=WallClockTime(*end),
        approved=approved,
    )


def test_boundaries_of_an_approved_shift_are_free():
    detector = ConflictDetector(CLOCK, D, [shift(1, (10, 0), (14, 0))])

    assert not detector.is_conflicted(WallClockTime(10, 0))
    assert not detector.is_conflicted(WallClockTime(14, 0))
    assert detector.is_conflicted(WallClockTime(10, 15))
    assert detector.is_conflicted(WallClockTime(13, 45))


def test_pending_and_excluded_shifts_never_block():
    existing = [shift(1, (10, 0), (14, 0), approved=False), shift(2, (15, 0), (18, 0))]
    detector = ConflictDetector(CLOCK, D, existing, exclude_ids=[2])

    assert not detector.is_conflicted(WallClockTime(12, 0))
    assert not detector.is_conflicted(WallClockTime(16, 0))


def test_minute_outside_business_hours_is_disabled():
    detector = ConflictDetector(CLOCK, D, [])

    assert detector.is_minute_disabled(WallClockTime(7, 45), TimeBoundary.START)
    assert not detector.is_minute_disabled(WallClockTime(0, 0), TimeBoundary.END)
    assert detector.is_minute_disabled(WallClockTime(0, 0), TimeBoundary.START)


def test_hour_disabled_only_when_every_quarter_is():
    detector = ConflictDetector(CLOCK, D, [shift(1, (10, 0), (12, 0))])

    # 10:00 is the boundary and still free
    assert not detector.is_hour_disabled(10, TimeBoundary.START)
    # every quarter of 11:00 falls strictly inside the shift
    assert detector.is_hour_disabled(11, TimeBoundary.START)
    assert detector.is_slot_disabled(WallClockTime(11, 30), Granularity.HOURS, TimeBoundary.START)
    assert not detector.is_slot_disabled(WallClockTime(12, 0), Granularity.MINUTES, TimeBoundary.END)


def test_find_overlap_returns_conflicting_shift():
    existing = shift(7, (10, 0), (14, 0))
    detector = ConflictDetector(CLOCK, D, [existing])

    overlapping = CLOCK.validate_range(D, WallClockTime(13, 0), WallClockTime(16, 0))
    touching = CLOCK.validate_range(D, WallClockTime(14, 0), WallClockTime(16, 0))

    assert detector.find_overlap(overlapping) == existing
    assert detector.find_overlap(touching) is None


def test_find_overlap_skips_stored_ranges_outside_the_window():
    detector = ConflictDetector(CLOCK, D, [shift(1, (6, 0), (7, 0))])
    candidate = CLOCK.validate_range(D, WallClockTime(9, 0), WallClockTime(10, 0))

    assert detector.find_overlap(candidate) is None
