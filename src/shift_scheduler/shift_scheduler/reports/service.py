from __future__ import annotations

import io
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional, Protocol, Sequence

import pandas as pd

from ..business_day.clock import BusinessDayClock
from ..business_day.model import BusinessDayConfig
from ..common.datetime_utils import week_start_of
from ..core.exceptions import InvalidRangeError, ValidationError
from ..shifts.model import Shift
from ..shifts.repository import ShiftRepository
from ..users.model import Worker
from ..users.repository import WorkerRepository
from .calculator.base import DurationCalculator
from .calculator.raw_calculator import RawDurationCalculator

FILTER_FIELDS = {"name", "corporation", "eid", "category", "position"}
DAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


class BusinessDaySource(Protocol):
    def default(self) -> BusinessDayConfig:
        raise NotImplementedError

    def for_corporation(self, corporation_id: Optional[int]) -> BusinessDayConfig:
        raise NotImplementedError


@dataclass(frozen=True)
class WeeklyBoard:
    title: str
    range_label: str
    dates: list[str]
    rows: list[dict]


@dataclass(frozen=True)
class HourlyStaffing:
    date: str
    hours: list[dict]
    workers: list[dict]


def _fmt_minutes(total: int) -> str:
    return f"{total // 60:02d}:{total % 60:02d}"


def _worker_field(worker: Worker, field: str) -> str:
    if field == "position":
        return worker.position_label
    return str(getattr(worker, field, "") or "")


class ScheduleReportService:
    def __init__(
        self,
        shifts: ShiftRepository,
        workers: WorkerRepository,
        business_days: BusinessDaySource,
        *,
        calculator: Optional[DurationCalculator] = None,
    ):
        self._shifts = shifts
        self._workers = workers
        self._business_days = business_days
        self._calculator = calculator or RawDurationCalculator()

    def _clocks(self):
        cache: dict[Optional[int], BusinessDayClock] = {}

        def clock_for(worker: Optional[Worker]) -> BusinessDayClock:
            corp = worker.corporation_id if worker else None
            if corp not in cache:
                cache[corp] = BusinessDayClock(self._business_days.for_corporation(corp))
            return cache[corp]

        return clock_for

    @staticmethod
    def _week_dates(week_of: date) -> list[date]:
        start = week_start_of(week_of)
        return [start + timedelta(days=i) for i in range(7)]

    def weekly_board(self, week_of: date, *, field: Optional[str] = None, keyword: Optional[str] = None) -> WeeklyBoard:
        keyword = (keyword or "").strip().lower()
        if keyword and field not in FILTER_FIELDS:
            raise ValidationError(f"Unknown filter field {field!r}")

        dates = self._week_dates(week_of)
        shifts = self._shifts.list_between(start=dates[0], end=dates[-1])
        workers = {w.user_id: w for w in self._workers.list_active()}
        clock_for = self._clocks()

        by_user: dict[int, list[Shift]] = {}
        for s in shifts:
            by_user.setdefault(s.user_id, []).append(s)

        rows: list[dict] = []
        for user_id, user_shifts in by_user.items():
            worker = workers.get(user_id)
            if keyword and (not worker or keyword not in _worker_field(worker, field).lower()):
                continue

            clock = clock_for(worker)
            total = 0
            days: dict[date, list[dict]] = {}
            for s in sorted(user_shifts, key=lambda s: (s.work_date, clock.to_business_minute(s.start))):
                total += self._calculator.scheduled_minutes(s, clock)
                days.setdefault(s.work_date, []).append(
                    {
                        "shift_id": s.shift_id,
                        "start": s.start.format(),
                        "end": s.end.format(),
                        "status": s.status.value,
                    }
                )

            rows.append(
                {
                    "user_id": user_id,
                    "name": worker.name if worker else "Unknown",
                    "position": worker.position_label if worker else "Employee",
                    "corporation": worker.corporation if worker else "Unknown",
                    "eid": worker.eid if worker else "Unknown",
                    "category": worker.category if worker else "Unknown",
                    "shifts": [{"date": d.isoformat(), "slots": slots} for d, slots in days.items()],
                    "total_minutes": total,
                    "total_hours": _fmt_minutes(total),
                }
            )

        rows.sort(key=lambda r: r["name"].lower())
        span = f"{dates[0]:%b} {dates[0].day} – {dates[-1]:%b} {dates[-1].day}"
        return WeeklyBoard(
            title=f"Week of {span}",
            range_label=span,
            dates=[d.isoformat() for d in dates],
            rows=rows,
        )

    def hourly_staffing(self, work_date: date) -> HourlyStaffing:
        """Head count per business hour (start inclusive, end exclusive).

        The hour axis spans the widest business day among the reported workers,
        so a corporation open past midnight shows its early-morning hours too.
        """
        workers = list(self._workers.list_active())
        by_id = {w.user_id: w for w in workers}
        clock_for = self._clocks()
        windows = [clock_for(w).config for w in workers] or [self._business_days.default()]
        hours = list(range(min(c.start_hour for c in windows), max(c.end_hour for c in windows)))

        ranges: dict[int, list[tuple[Shift, int, int]]] = {}
        for s in self._shifts.list_shifts(work_date=work_date):
            clock = clock_for(by_id.get(s.user_id))
            try:
                rng = clock.validate_range(work_date, s.start, s.end)
            except InvalidRangeError:
                continue
            ranges.setdefault(s.user_id, []).append((s, rng.start_minute, rng.end_minute))

        hourly: list[dict] = []
        for h in hours:
            top = h * 60
            employees = []
            for user_id, items in ranges.items():
                worker = by_id.get(user_id)
                if not worker:
                    continue
                for s, start_m, end_m in items:
                    if start_m <= top < end_m:
                        employees.append(
                            {
                                "name": worker.name,
                                "position": worker.position_label,
                                "shift": f"{s.start}-{s.end}",
                            }
                        )
                        break
            hourly.append({"hour": h % 24, "count": len(employees), "employees": employees})

        per_worker: list[dict] = []
        for w in workers:
            items = ranges.get(w.user_id, [])
            status = []
            for h in hours:
                lo, hi = h * 60, (h + 1) * 60
                worked = 0
                covering = None
                for s, start_m, end_m in items:
                    overlap = min(end_m, hi) - max(start_m, lo)
                    if overlap > 0:
                        worked += overlap
                        covering = covering or s
                ratio = round(min(worked, 60) / 60, 2)
                status.append(
                    {
                        "hour": h % 24,
                        "is_working": ratio > 0,
                        "working_ratio": ratio,
                        "shift": f"{covering.start}-{covering.end}" if covering else None,
                        "approved": bool(covering and covering.approved),
                    }
                )
            per_worker.append(
                {
                    "user_id": w.user_id,
                    "name": w.name,
                    "position": w.position_label,
                    "hourly_status": status,
                    "has_schedule": bool(items),
                }
            )

        per_worker.sort(key=lambda r: (not r["has_schedule"], r["name"].lower()))
        return HourlyStaffing(date=work_date.isoformat(), hours=hourly, workers=per_worker)

    def export_weekly_xlsx(self, week_of: date, *, user_ids: Optional[Sequence[int]] = None) -> bytes:
        """Weekly grid as an Excel workbook: one row per worker, OFF on empty days."""
        dates = self._week_dates(week_of)
        shifts = self._shifts.list_between(start=dates[0], end=dates[-1])
        workers = sorted(self._workers.list_active(), key=lambda w: w.name.lower())
        if user_ids:
            wanted = {int(u) for u in user_ids}
            workers = [w for w in workers if w.user_id in wanted]
        clock_for = self._clocks()

        by_key: dict[tuple[int, date], list[Shift]] = {}
        for s in shifts:
            by_key.setdefault((s.user_id, s.work_date), []).append(s)

        day_headers = [f"{DAY_NAMES[i]} {d:%d.%b}" for i, d in enumerate(dates)]
        data = []
        for w in workers:
            clock = clock_for(w)
            row = {
                "Corp": w.corporation,
                "EID": w.eid,
                "Name": w.name,
                "Category": w.category,
                "Position": w.position_label,
            }
            for header, d in zip(day_headers, dates):
                day = sorted(by_key.get((w.user_id, d), []), key=lambda s: clock.to_business_minute(s.start))
                row[header] = "\n".join(f"{s.start}–{s.end}" for s in day) if day else "OFF"
            data.append(row)

        df = pd.DataFrame(data, columns=["Corp", "EID", "Name", "Category", "Position", *day_headers])

        output = io.BytesIO()
        with pd.ExcelWriter(output, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name="Weekly Schedule")
        return output.getvalue()
