from __future__ import annotations

from typing import Sequence


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidRangeError(ValidationError):
    """Raised when a time range is malformed or outside business hours."""


class ConflictError(ValidationError):
    """Raised when a candidate range overlaps an approved shift of the same worker."""

    def __init__(self, message: str, *, conflicting=None):
        super().__init__(message)
        self.conflicting = conflicting


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when the target shift no longer exists."""


class PersistenceError(DomainError):
    """Raised when the storage call failed or timed out."""


class PartialCompletionError(PersistenceError):
    """A compound replace stopped half way.

    The original record(s) in ``deleted_ids`` are gone. ``created_ids`` are
    replacement sessions still stored and ``restored_ids`` are originals put back
    under a new id. Callers must surface this for manual re-add, never retry blindly.
    """

    def __init__(
        self,
        message: str,
        *,
        deleted_ids: Sequence[int] = (),
        created_ids: Sequence[int] = (),
        restored_ids: Sequence[int] = (),
    ):
        super().__init__(message)
        self.deleted_ids = list(deleted_ids)
        self.created_ids = list(created_ids)
        self.restored_ids = list(restored_ids)
