from __future__ import annotations

from typing import Dict, List

from query_hub.config.settings import Settings
from query_hub.db.base import BackendAdapter
from query_hub.exceptions.errors import ConfigurationError


_ENGINE_ALIASES: Dict[str, str] = {
    "mysql": "mysql",
    "mariadb": "mysql",
    "postgres": "postgres",
    "postgresql": "postgres",
    "pg": "postgres",
    "mssql": "mssql",
    "sqlserver": "mssql",
    "duckdb": "duckdb",
}


def supported_engines() -> List[str]:
    return sorted(set(_ENGINE_ALIASES.values()))


def normalize_engine(engine_type: str) -> str:
    t = (engine_type or "").strip().lower()
    if t not in _ENGINE_ALIASES:
        raise ConfigurationError(
            f"Unsupported database type: {engine_type!r}. Supported: {', '.join(supported_engines())}"
        )
    return _ENGINE_ALIASES[t]


def adapter_for(engine_type: str, settings: Settings) -> BackendAdapter:
    """Pick the adapter once per run; drivers are imported only for the engine in use."""
    engine = normalize_engine(engine_type)
    if engine == "mysql":
        from query_hub.db.mysql import MySQLAdapter
        return MySQLAdapter(settings)
    if engine == "postgres":
        from query_hub.db.postgres import PostgresAdapter
        return PostgresAdapter(settings)
    if engine == "mssql":
        from query_hub.db.mssql import SqlServerAdapter
        return SqlServerAdapter(settings)
    from query_hub.db.duckdb_local import DuckDBAdapter
    return DuckDBAdapter(settings)
