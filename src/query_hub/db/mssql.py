from __future__ import annotations

from typing import Any, List

import pymssql

from query_hub.data.models import ConnectionConfig, Row
from query_hub.db.base import BackendAdapter, port_number
from query_hub.logging.logger import get_logger


log = get_logger("db.mssql")


class SqlServerAdapter(BackendAdapter):
    ENGINE = "mssql"

    def _open(self, config: ConnectionConfig) -> Any:
        return pymssql.connect(
            server=config.host,
            port=str(port_number(config, 1433)),
            user=config.user,
            password=config.password,
            database=config.database,
            login_timeout=self.settings.connect_timeout,
            autocommit=True,
        )

    def _run(self, handle: Any, statement: str) -> List[Row]:
        log.debug("SQL Server execute", extra={"sql_head": statement[:300]})
        cur = handle.cursor(as_dict=True)
        try:
            cur.execute(statement)
            if cur.description is None:
                return []
            return [dict(r) for r in cur.fetchall()]
        finally:
            cur.close()

    def _close(self, handle: Any) -> None:
        handle.close()
