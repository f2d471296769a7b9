from __future__ import annotations

from enum import Enum


class Position(str, Enum):
    """Position of the acting identity, as supplied by the auth collaborator."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class ShiftStatus(str, Enum):
    """Persisted lifecycle state of a shift record."""

    PENDING = "pending"
    APPROVED = "approved"


class TimeBoundary(str, Enum):
    START = "start"
    END = "end"


class Granularity(str, Enum):
    """Picker view a slot query is made for."""

    HOURS = "hours"
    MINUTES = "minutes"
