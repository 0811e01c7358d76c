from __future__ import annotations

from typing import Any, List

import duckdb

from query_hub.data.models import ConnectionConfig, Row
from query_hub.db.base import BackendAdapter, rows_from_cursor
from query_hub.logging.logger import get_logger


log = get_logger("db.duckdb")


class DuckDBAdapter(BackendAdapter):
    """Local engine: ``database`` is a DuckDB file path (or ``:memory:``).

    host/port/user/password are not used.
    """

    ENGINE = "duckdb"

    def _open(self, config: ConnectionConfig) -> Any:
        return duckdb.connect(database=config.database or ":memory:")

    def _run(self, handle: Any, statement: str) -> List[Row]:
        log.debug("DuckDB execute", extra={"sql_head": statement[:300]})
        cur = handle.execute(statement)
        if cur.description is None:
            return []
        return rows_from_cursor(cur.description, cur.fetchall())

    def _close(self, handle: Any) -> None:
        handle.close()
