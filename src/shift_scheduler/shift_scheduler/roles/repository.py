from __future__ import annotations

from typing import Protocol, Sequence

from .model import Role


class RoleRepository(Protocol):
    def list_roles(self) -> Sequence[Role]:
        raise NotImplementedError
