from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Worker


class WorkerRepository(Protocol):
    """Read-only worker directory.

    Note (DIP): services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[Worker]:
        raise NotImplementedError

    def list_active(self) -> Sequence[Worker]:
        raise NotImplementedError
