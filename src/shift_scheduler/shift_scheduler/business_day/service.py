from __future__ import annotations

import logging
from typing import Optional

from ..core.exceptions import PersistenceError
from ..users.repository import WorkerRepository
from .clock import BusinessDayClock
from .model import BusinessDayConfig
from .repository import BusinessHoursRepository

logger = logging.getLogger(__name__)


class BusinessDayService:
    """Resolve the business-day window that applies to a worker.

    Falls back to the process default when the worker has no corporation or the
    lookup fails, so a directory outage never blocks scheduling.
    """

    def __init__(
        self,
        hours: BusinessHoursRepository,
        workers: WorkerRepository,
        *,
        default: Optional[BusinessDayConfig] = None,
    ):
        self._hours = hours
        self._workers = workers
        self._default = default or BusinessDayConfig()

    def default(self) -> BusinessDayConfig:
        return self._default

    def for_corporation(self, corporation_id: Optional[int]) -> BusinessDayConfig:
        if corporation_id is None:
            return self._default

        try:
            raw = self._hours.get_hours_for_corporation(int(corporation_id))
        except PersistenceError as e:
            logger.warning("Business hours lookup failed for corporation %s, using default: %s", corporation_id, e)
            return self._default

        if raw is None:
            return self._default

        start_hour, end_hour = raw
        return BusinessDayConfig.from_raw(
            self._default.start_hour if start_hour is None else start_hour,
            self._default.end_hour if end_hour is None else end_hour,
        )

    def for_user(self, user_id: int) -> BusinessDayConfig:
        try:
            worker = self._workers.get_by_id(int(user_id))
        except PersistenceError as e:
            logger.warning("Worker lookup failed for user %s, using default business day: %s", user_id, e)
            return self._default

        if not worker:
            return self._default
        return self.for_corporation(worker.corporation_id)

    def clock_for_user(self, user_id: int) -> BusinessDayClock:
        return BusinessDayClock(self.for_user(user_id))
