from __future__ import annotations

from typing import Optional

from src.shift_scheduler.shift_scheduler.business_day.model import BusinessDayConfig
from src.shift_scheduler.shift_scheduler.business_day.service import BusinessDayService
from src.shift_scheduler.shift_scheduler.core.exceptions import PersistenceError
from src.shift_scheduler.shift_scheduler.users.model import Worker


class FakeHoursRepo:
    def __init__(self, hours: dict[int, tuple], *, fail: bool = False):
        self._hours = hours
        self._fail = fail

    def get_hours_for_corporation(self, corporation_id: int) -> Optional[tuple]:
        if self._fail:
            raise PersistenceError("timeout")
        return self._hours.get(corporation_id)


class FakeWorkers:
    def __init__(self, workers: list[Worker]):
        self._by_id = {w.user_id: w for w in workers}

    def get_by_id(self, user_id: int) -> Optional[Worker]:
        return self._by_id.get(user_id)

    def list_active(self):
        return list(self._by_id.values())


WORKERS = FakeWorkers(
    [
        Worker(user_id=1, name="Anna", corporation_id=10),
        Worker(user_id=2, name="Ben", corporation_id=None),
        Worker(user_id=3, name="Chloe", corporation_id=99),
    ]
)


def test_worker_gets_corporation_window():
    svc = BusinessDayService(FakeHoursRepo({10: (17, 4)}), WORKERS)

    assert svc.for_user(1) == BusinessDayConfig(17, 28)
    assert svc.clock_for_user(1).config.label() == "17:00 ~ 04:00"


def test_falls_back_to_default_without_corporation_or_row():
    default = BusinessDayConfig(9, 21)
    svc = BusinessDayService(FakeHoursRepo({}), WORKERS, default=default)

    assert svc.for_user(2) == default
    assert svc.for_user(3) == default
    assert svc.for_user(404) == default


def test_null_columns_fall_back_per_value():
    svc = BusinessDayService(FakeHoursRepo({10: (None, 2)}), WORKERS)

    assert svc.for_corporation(10) == BusinessDayConfig(8, 26)


def test_lookup_failure_uses_default():
    svc = BusinessDayService(FakeHoursRepo({10: (6, 22)}, fail=True), WORKERS)

    assert svc.for_user(1) == BusinessDayConfig()
