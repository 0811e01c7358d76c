"""
Pytest configuration and shared fixtures for query_hub tests.
"""

from typing import Any, Dict, List, Set

import pytest

from query_hub.config.settings import Settings
from query_hub.data.models import ConnectionConfig, DbConfigSet
from query_hub.db.base import BackendAdapter


class ScriptedAdapter(BackendAdapter):
    """In-memory adapter driven by a script of reachable databases and canned results."""

    ENGINE = "scripted"

    def __init__(self, settings: Settings, script: Dict[str, Any]):
        super().__init__(settings)
        self.unreachable: Set[str] = set(script.get("unreachable", ()))
        self.rows: Dict[str, List[Dict[str, Any]]] = script.get("rows", {})
        self.failing: Dict[str, str] = script.get("failing", {})
        self.close_fails: bool = script.get("close_fails", False)
        self.events: List[tuple] = []
        self.open_handles = 0
        self.max_open_handles = 0

    def _open(self, config: ConnectionConfig) -> Any:
        self.events.append(("connect", config.name))
        if config.name in self.unreachable:
            raise OSError(f"connect ECONNREFUSED {config.host}:{config.port}")
        self.open_handles += 1
        self.max_open_handles = max(self.max_open_handles, self.open_handles)
        return {"db": config.name}

    def _run(self, handle: Any, statement: str) -> List[Dict[str, Any]]:
        self.events.append(("execute", handle["db"], statement))
        key = f"{handle['db']}:{statement}"
        if key in self.failing or statement in self.failing:
            raise RuntimeError(self.failing.get(key) or self.failing[statement])
        return [dict(r) for r in self.rows.get(key, self.rows.get(statement, []))]

    def _close(self, handle: Any) -> None:
        self.events.append(("disconnect", handle["db"]))
        self.open_handles -= 1
        if self.close_fails:
            raise RuntimeError("socket already closed")


@pytest.fixture
def settings(tmp_path):
    """Settings whose every directory lives under the test's tmp_path."""
    return Settings(
        env="test",
        log_level="DEBUG",
        log_file=str(tmp_path / "logs" / "query_hub.log"),
        execution_dir=str(tmp_path / "queries-execution"),
        upload_dir=str(tmp_path / "uploads"),
        saved_query_dir=str(tmp_path / "queries"),
        connect_timeout=2,
        db_engine="duckdb",
        db_configs=[{"name": "local", "database": str(tmp_path / "local.duckdb")}],
    )


@pytest.fixture
def make_adapter():
    """Return a factory building a ScriptedAdapter; the last one built is kept on ``.last``."""

    def factory(script: Dict[str, Any]):
        def adapter_factory(engine: str, settings: Settings) -> ScriptedAdapter:
            adapter = ScriptedAdapter(settings, script)
            factory.last = adapter
            return adapter

        return adapter_factory

    factory.last = None
    return factory


@pytest.fixture
def two_databases():
    return DbConfigSet(
        engine_type="postgres",
        configs=(
            ConnectionConfig(name="east", host="db-east", port=5432, user="u", password="p", database="app"),
            ConnectionConfig(name="west", host="db-west", port=5432, user="u", password="p", database="app"),
        ),
    )
