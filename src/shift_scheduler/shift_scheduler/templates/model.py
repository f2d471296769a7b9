from __future__ import annotations

from dataclasses import dataclass

from ..business_day.model import WallClockTime


@dataclass(frozen=True)
class ScheduleTemplate:
    """A named preset (e.g. "Opening 07:00-15:00") used to pre-fill a shift."""

    template_id: int
    name: str
    display_name: str
    start_time: WallClockTime
    end_time: WallClockTime
    is_active: bool = True
    order: int = 0
