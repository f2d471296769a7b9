from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import NewShift, Shift, ShiftChanges


class ShiftRepository(Protocol):
    """Persistence contract for shift records.

    Every call may raise PersistenceError (storage failure or timeout).
    """

    def list_shifts(
        self,
        *,
        user_id: Optional[int] = None,
        work_date: Optional[date] = None,
        user_type: Optional[str] = None,
    ) -> Sequence[Shift]:
        raise NotImplementedError

    def list_between(self, *, start: date, end: date) -> Sequence[Shift]:
        """All shifts with start <= work_date <= end."""

        raise NotImplementedError

    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        raise NotImplementedError

    def create(self, shift: NewShift) -> Shift:
        raise NotImplementedError

    def update(self, shift_id: int, changes: ShiftChanges) -> Optional[Shift]:
        """Apply changes; returns None when the shift no longer exists."""

        raise NotImplementedError

    def delete(self, shift_id: int) -> bool:
        raise NotImplementedError

    def delete_all_for_day(self, *, user_id: int, work_date: date) -> int:
        """Returns the number of deleted shifts."""

        raise NotImplementedError
