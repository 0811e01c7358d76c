from __future__ import annotations

from typing import Any, List

import psycopg2

from query_hub.data.models import ConnectionConfig, Row
from query_hub.db.base import BackendAdapter, port_number, rows_from_cursor
from query_hub.logging.logger import get_logger


log = get_logger("db.postgres")


class PostgresAdapter(BackendAdapter):
    ENGINE = "postgres"

    def _open(self, config: ConnectionConfig) -> Any:
        conn = psycopg2.connect(
            host=config.host,
            port=port_number(config, 5432),
            dbname=config.database,
            user=config.user,
            password=config.password,
            connect_timeout=self.settings.connect_timeout,
        )
        # Every statement commits on its own, like a pooled client would
        conn.autocommit = True
        return conn

    def _run(self, handle: Any, statement: str) -> List[Row]:
        log.debug("Postgres execute", extra={"sql_head": statement[:300]})
        with handle.cursor() as cur:
            cur.execute(statement)
            if cur.description is None:
                return []
            return rows_from_cursor(cur.description, cur.fetchall())

    def _close(self, handle: Any) -> None:
        handle.close()
