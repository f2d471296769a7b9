from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..business_day.model import ShiftRange, WallClockTime
from ..core.enums import ShiftStatus


@dataclass(frozen=True)
class Shift:
    """Domain entity: one persisted work shift of one worker on one date."""

    shift_id: int
    user_id: int
    user_type: str
    work_date: date
    start: WallClockTime
    end: WallClockTime
    approved: bool = False
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None

    @property
    def status(self) -> ShiftStatus:
        return ShiftStatus.APPROVED if self.approved else ShiftStatus.PENDING

    @property
    def time_range(self) -> ShiftRange:
        return ShiftRange(work_date=self.work_date, start=self.start, end=self.end)


@dataclass(frozen=True)
class NewShift:
    user_id: int
    user_type: str
    work_date: date
    start: WallClockTime
    end: WallClockTime
    approved: bool = False
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None


@dataclass(frozen=True)
class ShiftChanges:
    """Partial update; None leaves a field untouched.

    ``approved=False`` also clears approval metadata in storage.
    """

    start: Optional[WallClockTime] = None
    end: Optional[WallClockTime] = None
    user_type: Optional[str] = None
    approved: Optional[bool] = None
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None


@dataclass(frozen=True)
class WorkSession:
    """One half of a split shift; lives in memory until persisted."""

    start: datetime
    end: datetime

    @property
    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)


@dataclass(frozen=True)
class SplitPlan:
    first: WorkSession
    second: WorkSession

    @property
    def break_start(self) -> datetime:
        return self.first.end

    @property
    def break_end(self) -> datetime:
        return self.second.start

    @property
    def break_minutes(self) -> int:
        return int((self.break_end - self.break_start).total_seconds() // 60)
