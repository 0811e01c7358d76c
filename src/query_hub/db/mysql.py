from __future__ import annotations

from typing import Any, List

import mysql.connector

from query_hub.data.models import ConnectionConfig, Row
from query_hub.db.base import BackendAdapter, port_number
from query_hub.logging.logger import get_logger


log = get_logger("db.mysql")


class MySQLAdapter(BackendAdapter):
    ENGINE = "mysql"

    def _open(self, config: ConnectionConfig) -> Any:
        return mysql.connector.connect(
            host=config.host,
            port=port_number(config, 3306),
            user=config.user,
            password=config.password,
            database=config.database or None,
            connection_timeout=self.settings.connect_timeout,
            autocommit=True,
        )

    def _run(self, handle: Any, statement: str) -> List[Row]:
        log.debug("MySQL execute", extra={"sql_head": statement[:300]})
        cur = handle.cursor(dictionary=True)
        try:
            cur.execute(statement)
            if not cur.with_rows:
                return []
            return [dict(r) for r in cur.fetchall()]
        finally:
            cur.close()

    def _close(self, handle: Any) -> None:
        handle.close()
