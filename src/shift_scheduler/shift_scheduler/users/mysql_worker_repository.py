from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Worker
from .repository import WorkerRepository

_SELECT = """
    SELECT u.user_id, u.name, u.corporation_id, c.name AS corporation, u.eid, u.category, u.user_types
    FROM workers u
    LEFT JOIN corporations c ON c.corporation_id = u.corporation_id
"""


def _row_to_worker(r: dict) -> Worker:
    types = tuple(t.strip() for t in (r.get("user_types") or "").split(",") if t.strip())
    return Worker(
        user_id=int(r["user_id"]),
        name=r["name"],
        corporation_id=int(r["corporation_id"]) if r.get("corporation_id") is not None else None,
        corporation=r.get("corporation") or "",
        eid=str(r.get("eid") or ""),
        category=r.get("category") or "",
        user_types=types,
    )


class MySQLWorkerRepository(WorkerRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[Worker]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE u.user_id=%s", (int(user_id),))
            r = fetchone(cur)
            return _row_to_worker(r) if r else None

    def list_active(self) -> Sequence[Worker]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE u.is_active=1 ORDER BY u.name")
            return [_row_to_worker(r) for r in fetchall(cur)]
