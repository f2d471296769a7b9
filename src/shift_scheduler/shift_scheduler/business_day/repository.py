from __future__ import annotations

from typing import Optional, Protocol, Tuple


class BusinessHoursRepository(Protocol):
    def get_hours_for_corporation(self, corporation_id: int) -> Optional[Tuple[Optional[int], Optional[int]]]:
        """Return the raw (start_hour, end_hour) stored for a corporation, or None."""

        raise NotImplementedError
