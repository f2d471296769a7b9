from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

import mysql.connector

from ..core.constants import DEFAULT_DB_TIMEOUT_SECONDS
from ..core.exceptions import ValidationError

DEFAULT_MYSQL_PORT = 3306


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    connect_timeout: int = DEFAULT_DB_TIMEOUT_SECONDS

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "DBConfig":
        """Build from a settings ``DB_CONFIG`` dict; port and timeout are optional."""
        missing = [k for k in ("host", "user", "database") if not raw.get(k)]
        if missing:
            raise ValidationError(f"DB_CONFIG is missing {', '.join(missing)}")
        timeout = int(raw.get("connect_timeout") or DEFAULT_DB_TIMEOUT_SECONDS)
        if timeout <= 0:
            raise ValidationError("DB_CONFIG connect_timeout must be positive")
        return cls(
            host=str(raw["host"]),
            port=int(raw.get("port") or DEFAULT_MYSQL_PORT),
            user=str(raw["user"]),
            password=str(raw.get("password") or ""),
            database=str(raw["database"]),
            connect_timeout=timeout,
        )


class DatabaseConnection:
    """Connection factory bound to one DBConfig.

    Every repository call opens its own short-lived connection through
    ``connect()``; the ``connect_timeout`` bounds how long an unreachable
    server may stall a request.
    """

    def __init__(self, config: DBConfig):
        self._config = config

    @property
    def config(self) -> DBConfig:
        return self._config

    def connect(self):
        cfg = self._config
        return mysql.connector.connect(
            host=cfg.host,
            port=cfg.port,
            user=cfg.user,
            password=cfg.password,
            database=cfg.database,
            connection_timeout=cfg.connect_timeout,
        )
