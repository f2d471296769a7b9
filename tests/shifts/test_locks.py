from __future__ import annotations

import threading
from datetime import date

from src.shift_scheduler.shift_scheduler.shifts.locks import DayLockRegistry

D = date(2025, 3, 4)


def _hold_in_thread(locks: DayLockRegistry, user_id: int, work_date: date, entered: threading.Event):
    def run():
        with locks.hold(user_id, work_date):
            entered.set()

    t = threading.Thread(target=run, daemon=True)
    t.start()
    return t


def test_second_holder_of_same_day_waits():
    locks = DayLockRegistry()
    entered = threading.Event()

    with locks.hold(1, D):
        t = _hold_in_thread(locks, 1, D, entered)
        assert not entered.wait(0.2)

    t.join(timeout=2)
    assert entered.is_set()
    assert not t.is_alive()


def test_other_days_and_workers_do_not_block():
    locks = DayLockRegistry()
    other_day = threading.Event()
    other_worker = threading.Event()

    with locks.hold(1, D):
        t1 = _hold_in_thread(locks, 1, date(2025, 3, 5), other_day)
        t2 = _hold_in_thread(locks, 2, D, other_worker)
        assert other_day.wait(2)
        assert other_worker.wait(2)

    t1.join(timeout=2)
    t2.join(timeout=2)


def test_released_days_are_forgotten():
    locks = DayLockRegistry()

    for offset in range(1000):
        with locks.hold(1, date.fromordinal(D.toordinal() + offset)):
            pass

    assert len(locks) == 0


def test_entry_is_dropped_once_the_last_waiter_leaves():
    locks = DayLockRegistry()
    entered = threading.Event()

    with locks.hold(1, D):
        t = _hold_in_thread(locks, 1, D, entered)
        assert not entered.wait(0.1)
        assert len(locks) == 1

    t.join(timeout=2)
    assert entered.is_set()
    assert len(locks) == 0
