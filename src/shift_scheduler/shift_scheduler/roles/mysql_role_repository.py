from __future__ import annotations

from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import Role
from .repository import RoleRepository


class MySQLRoleRepository(RoleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_roles(self) -> Sequence[Role]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT role_id, role_key, name, category FROM user_roles ORDER BY name")
            return [
                Role(
                    role_id=int(r["role_id"]),
                    key=r["role_key"],
                    name=r["name"],
                    category=r.get("category"),
                )
                for r in fetchall(cur)
            ]
