from __future__ import annotations

import threading
from contextlib import contextmanager
from datetime import date
from typing import Iterator


class DayLockRegistry:
    """One lock per (user_id, work_date).

    Two mutations of the same worker's same day must not interleave, or a
    split-approve could race a plain edit and leave overlapping records.
    Entries are reference-counted and dropped when the last holder leaves.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[tuple[int, date], threading.Lock] = {}
        self._holders: dict[tuple[int, date], int] = {}

    def _acquire_entry(self, key: tuple[int, date]) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            self._holders[key] = self._holders.get(key, 0) + 1
            return lock

    def _release_entry(self, key: tuple[int, date]) -> None:
        with self._guard:
            remaining = self._holders[key] - 1
            if remaining:
                self._holders[key] = remaining
            else:
                del self._holders[key]
                del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    @contextmanager
    def hold(self, user_id: int, work_date: date) -> Iterator[None]:
        key = (int(user_id), work_date)
        lock = self._acquire_entry(key)
        try:
            with lock:
                yield
        finally:
            self._release_entry(key)
