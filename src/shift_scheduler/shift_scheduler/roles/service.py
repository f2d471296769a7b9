from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import Iterable, Sequence

from ..common.validators import normalize_user_types
from ..shifts.model import Shift
from ..shifts.repository import ShiftRepository
from .model import Role
from .repository import RoleRepository


class RoleService:
    def __init__(self, roles: RoleRepository, shifts: ShiftRepository, *, max_workers: int = 4):
        self._roles = roles
        self._shifts = shifts
        self._max_workers = max(1, int(max_workers))

    def list_roles(self) -> Sequence[Role]:
        return self._roles.list_roles()

    def roles_for_worker(self, user_types: Iterable[str]) -> list[Role]:
        """Roles whose key matches one of the worker's user types (case-insensitive)."""
        wanted = normalize_user_types(user_types)
        return [r for r in self._roles.list_roles() if r.key.lower() in wanted]

    def shifts_by_role(self, work_date: date, roles: Sequence[Role]) -> dict[str, list[Shift]]:
        """Shifts of every role on ``work_date``, keyed by role name.

        The reads are independent, so they run in parallel.
        """
        if not roles:
            return {}

        def load(role: Role) -> list[Shift]:
            return list(self._shifts.list_shifts(work_date=work_date, user_type=role.name))

        with ThreadPoolExecutor(max_workers=min(self._max_workers, len(roles))) as pool:
            results = list(pool.map(load, roles))

        return {role.name: shifts for role, shifts in zip(roles, results)}
