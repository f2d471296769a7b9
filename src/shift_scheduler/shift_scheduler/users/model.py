from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from ..common.validators import normalize_user_types
from ..core.enums import Position


@dataclass(frozen=True)
class Identity:
    """The acting user, as handed over by the authentication collaborator.

    Read-only; permission checks take it explicitly on every call.
    """

    user_id: int
    position: Position = Position.EMPLOYEE
    user_types: frozenset[str] = field(default_factory=frozenset)

    @property
    def is_admin(self) -> bool:
        return self.position == Position.ADMIN

    @classmethod
    def from_session(cls, data: Mapping[str, Any]) -> "Identity":
        raw_position = str(data.get("position") or Position.EMPLOYEE.value).lower()
        try:
            position = Position(raw_position)
        except ValueError:
            position = Position.EMPLOYEE

        return cls(
            user_id=int(data["user_id"]),
            position=position,
            user_types=normalize_user_types(data.get("user_types") or data.get("userType")),
        )


@dataclass(frozen=True)
class Worker:
    """Directory entry of a schedulable employee (used for reports and business-day lookup)."""

    user_id: int
    name: str
    corporation_id: Optional[int] = None
    corporation: str = ""
    eid: str = ""
    category: str = ""
    user_types: tuple[str, ...] = ()

    @property
    def position_label(self) -> str:
        return ", ".join(self.user_types) if self.user_types else "Employee"
