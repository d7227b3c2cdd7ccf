from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from mysql.connector import pooling

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DBConfig:
    host: str
    port: int
    user: str
    password: str
    database: str
    pool_size: int = 5

    @classmethod
    def from_mapping(cls, values: dict) -> "DBConfig":
        return cls(
            host=str(values["host"]),
            port=int(values.get("port", 3306)),
            user=str(values["user"]),
            password=str(values.get("password", "")),
            database=str(values["database"]),
            pool_size=int(values.get("pool_size", 5)),
        )


class DatabaseConnection:
    """Pooled connection factory shared by the MySQL repositories.

    Sessions run with ``time_zone='+00:00'`` so DATETIME columns round-trip
    as UTC. Connections are borrowed per repository call; ``close()`` on a
    pooled connection returns it to the pool.
    """

    _instance: Optional["DatabaseConnection"] = None

    def __init__(self, config: DBConfig):
        self._config = config
        self._pool: Optional[pooling.MySQLConnectionPool] = None

    @classmethod
    def get_instance(cls, config: DBConfig) -> "DatabaseConnection":
        if cls._instance is None:
            cls._instance = DatabaseConnection(config)
        return cls._instance

    def _get_pool(self) -> pooling.MySQLConnectionPool:
        if self._pool is None:
            logger.info(
                "opening mysql pool %s@%s:%s/%s size=%s",
                self._config.user,
                self._config.host,
                self._config.port,
                self._config.database,
                self._config.pool_size,
            )
            self._pool = pooling.MySQLConnectionPool(
                pool_name="timeclock",
                pool_size=self._config.pool_size,
                host=self._config.host,
                port=self._config.port,
                user=self._config.user,
                password=self._config.password,
                database=self._config.database,
                time_zone="+00:00",
            )
        return self._pool

    def connect(self):
        return self._get_pool().get_connection()
