from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..business_day.model import WallClockTime
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import NewShift, Shift, ShiftChanges
from .repository import ShiftRepository

_COLUMNS = "shift_id, user_id, user_type, work_date, start_time, end_time, approved, approved_by, approved_at"


def _row_to_shift(r: dict) -> Shift:
    return Shift(
        shift_id=int(r["shift_id"]),
        user_id=int(r["user_id"]),
        user_type=r.get("user_type") or "",
        work_date=r["work_date"],
        start=WallClockTime.from_time(normalize_mysql_time(r["start_time"])),
        end=WallClockTime.from_time(normalize_mysql_time(r["end_time"])),
        approved=bool(r.get("approved")),
        approved_by=int(r["approved_by"]) if r.get("approved_by") is not None else None,
        approved_at=r.get("approved_at"),
    )


class MySQLShiftRepository(ShiftRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_shifts(
        self,
        *,
        user_id: Optional[int] = None,
        work_date: Optional[date] = None,
        user_type: Optional[str] = None,
    ) -> Sequence[Shift]:
        clauses = ["1=1"]
        params: list[object] = []
        if user_id is not None:
            clauses.append("user_id=%s")
            params.append(int(user_id))
        if work_date is not None:
            clauses.append("work_date=%s")
            params.append(work_date)
        if user_type:
            clauses.append("user_type=%s")
            params.append(user_type)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM shifts WHERE {where} ORDER BY work_date, user_id, start_time",
                tuple(params),
            )
            return [_row_to_shift(r) for r in fetchall(cur)]

    def list_between(self, *, start: date, end: date) -> Sequence[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM shifts
                WHERE work_date BETWEEN %s AND %s
                ORDER BY work_date, user_id, start_time
                """,
                (start, end),
            )
            return [_row_to_shift(r) for r in fetchall(cur)]

    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM shifts WHERE shift_id=%s", (int(shift_id),))
            r = fetchone(cur)
            return _row_to_shift(r) if r else None

    def create(self, shift: NewShift) -> Shift:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO shifts(user_id, user_type, work_date, start_time, end_time, approved, approved_by, approved_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(shift.user_id),
                    shift.user_type,
                    shift.work_date,
                    shift.start.to_time(),
                    shift.end.to_time(),
                    1 if shift.approved else 0,
                    shift.approved_by,
                    shift.approved_at,
                ),
            )
            shift_id = int(cur.lastrowid)

        return Shift(
            shift_id=shift_id,
            user_id=int(shift.user_id),
            user_type=shift.user_type,
            work_date=shift.work_date,
            start=shift.start,
            end=shift.end,
            approved=shift.approved,
            approved_by=shift.approved_by,
            approved_at=shift.approved_at,
        )

    def update(self, shift_id: int, changes: ShiftChanges) -> Optional[Shift]:
        sets: list[str] = []
        params: list[object] = []
        if changes.start is not None:
            sets.append("start_time=%s")
            params.append(changes.start.to_time())
        if changes.end is not None:
            sets.append("end_time=%s")
            params.append(changes.end.to_time())
        if changes.user_type is not None:
            sets.append("user_type=%s")
            params.append(changes.user_type)
        if changes.approved is not None:
            sets.extend(["approved=%s", "approved_by=%s", "approved_at=%s"])
            if changes.approved:
                params.extend([1, changes.approved_by, changes.approved_at])
            else:
                params.extend([0, None, None])

        with db_cursor(self._conn_factory) as (_, cur):
            if sets:
                cur.execute(
                    f"UPDATE shifts SET {', '.join(sets)} WHERE shift_id=%s",
                    (*params, int(shift_id)),
                )
            cur.execute(f"SELECT {_COLUMNS} FROM shifts WHERE shift_id=%s", (int(shift_id),))
            r = fetchone(cur)
            return _row_to_shift(r) if r else None

    def delete(self, shift_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM shifts WHERE shift_id=%s", (int(shift_id),))
            return cur.rowcount > 0

    def delete_all_for_day(self, *, user_id: int, work_date: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM shifts WHERE user_id=%s AND work_date=%s", (int(user_id), work_date))
            return int(cur.rowcount or 0)
