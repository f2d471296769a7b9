from __future__ import annotations

from typing import Optional, Sequence

from ..business_day.model import WallClockTime
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import ScheduleTemplate
from .repository import TemplateRepository

_COLUMNS = "template_id, name, display_name, start_time, end_time, is_active, sort_order"


def _row_to_template(r: dict) -> ScheduleTemplate:
    return ScheduleTemplate(
        template_id=int(r["template_id"]),
        name=r["name"],
        display_name=r.get("display_name") or r["name"],
        start_time=WallClockTime.from_time(normalize_mysql_time(r["start_time"])),
        end_time=WallClockTime.from_time(normalize_mysql_time(r["end_time"])),
        is_active=bool(r.get("is_active", 1)),
        order=int(r.get("sort_order") or 0),
    )


class MySQLTemplateRepository(TemplateRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_templates(self) -> Sequence[ScheduleTemplate]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM schedule_templates ORDER BY sort_order, name")
            return [_row_to_template(r) for r in fetchall(cur)]

    def get_by_id(self, template_id: int) -> Optional[ScheduleTemplate]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM schedule_templates WHERE template_id=%s", (int(template_id),))
            r = fetchone(cur)
            return _row_to_template(r) if r else None
