from __future__ import annotations

from typing import Iterable

from ..core.constants import ELEVATED_USER_TYPES
from ..core.exceptions import AuthorizationError
from ..users.model import Identity


class PermissionGate:
    """Who may view, add/edit and approve a worker's shifts.

    Evaluated on every call; role data may change between dialog open and submit.
    """

    def __init__(self, elevated_user_types: Iterable[str] = ELEVATED_USER_TYPES):
        self._elevated = frozenset(t.lower() for t in elevated_user_types)

    def _is_elevated(self, identity: Identity) -> bool:
        return any(t.lower() in self._elevated for t in identity.user_types)

    def can_view(self, identity: Identity, owner_id: int) -> bool:
        return identity.is_admin or identity.user_id == int(owner_id) or self._is_elevated(identity)

    def can_add_or_edit(self, identity: Identity, owner_id: int) -> bool:
        return identity.is_admin or identity.user_id == int(owner_id) or self._is_elevated(identity)

    def can_approve(self, identity: Identity, owner_id: int) -> bool:
        if identity.is_admin:
            return True
        # Elevated roles approve other workers only, never themselves.
        return identity.user_id != int(owner_id) and self._is_elevated(identity)

    def can_reset(self, identity: Identity) -> bool:
        return identity.is_admin

    def require_view(self, identity: Identity, owner_id: int) -> None:
        if not self.can_view(identity, owner_id):
            raise AuthorizationError("You don't have permission to view this schedule.")

    def require_add_or_edit(self, identity: Identity, owner_id: int) -> None:
        if not self.can_add_or_edit(identity, owner_id):
            raise AuthorizationError("You don't have permission to edit this schedule.")

    def require_approve(self, identity: Identity, owner_id: int) -> None:
        if not self.can_approve(identity, owner_id):
            raise AuthorizationError(
                "Only admins, managers, supervisors, team leads and HR can approve schedules."
            )

    def require_reset(self, identity: Identity) -> None:
        if not self.can_reset(identity):
            raise AuthorizationError("Only admins can reset a schedule to pending.")
