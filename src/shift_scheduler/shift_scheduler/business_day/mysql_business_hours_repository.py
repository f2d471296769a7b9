from __future__ import annotations

from typing import Optional, Tuple

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .repository import BusinessHoursRepository


class MySQLBusinessHoursRepository(BusinessHoursRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_hours_for_corporation(self, corporation_id: int) -> Optional[Tuple[Optional[int], Optional[int]]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT business_day_start_hour, business_day_end_hour
                FROM corporations
                WHERE corporation_id=%s
                """,
                (int(corporation_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return r.get("business_day_start_hour"), r.get("business_day_end_hour")
