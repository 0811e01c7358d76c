from __future__ import annotations

import os
from typing import Any, Dict, List, Mapping, Optional

from query_hub.config.settings import Settings
from query_hub.data.models import ConnectionConfig, DbConfigSet
from query_hub.db.factory import normalize_engine
from query_hub.exceptions.errors import ConfigurationError
from query_hub.logging.logger import get_logger

log = get_logger("config.db_configs")

# Environment overrides applied to the first default config (key -> env var)
_LOCAL_OVERRIDES = {
    "host": "DB_HOST",
    "port": "DB_PORT",
    "user": "DB_USER",
    "password": "DB_PASSWORD",
    "database": "DB_NAME",
}


def _str(v: Any) -> str:
    return "" if v is None else str(v)


def _connection_config(raw: Any, position: int) -> ConnectionConfig:
    if not isinstance(raw, Mapping):
        raise ConfigurationError(f"Database config #{position + 1} must be a mapping")
    name = _str(raw.get("name")).strip()
    if not name:
        raise ConfigurationError(f"Database config #{position + 1} has no name")
    return ConnectionConfig(
        name=name,
        host=_str(raw.get("host") or raw.get("server")),
        port=raw.get("port"),
        user=_str(raw.get("user")),
        password=_str(raw.get("password")),
        database=_str(raw.get("database")),
    )


def parse_db_config_set(payload: Any) -> DbConfigSet:
    """Validate a ``{"type": ..., "configs": [...]}`` payload into a DbConfigSet.

    Raises ConfigurationError before anything is executed: unknown engine type,
    empty or non-list configs, unnamed entries and duplicate names are rejected.
    Reachability (host, port, credentials) is not checked here.
    """
    if not isinstance(payload, Mapping):
        raise ConfigurationError("Invalid database configuration")
    engine = normalize_engine(_str(payload.get("type") or payload.get("engine")))

    raw_configs = payload.get("configs")
    if not isinstance(raw_configs, (list, tuple)) or not raw_configs:
        raise ConfigurationError("Database configuration must contain a non-empty 'configs' list")

    configs = [_connection_config(c, i) for i, c in enumerate(raw_configs)]
    seen = set()
    for c in configs:
        if c.name in seen:
            raise ConfigurationError(f"Duplicate database config name: {c.name}")
        seen.add(c.name)

    return DbConfigSet(engine_type=engine, configs=tuple(configs))


def default_db_config_set(settings: Settings, environ: Optional[Mapping[str, str]] = None) -> DbConfigSet:
    env = os.environ if environ is None else environ
    configs: List[Dict[str, Any]] = [dict(c) for c in settings.db_configs]
    if configs:
        for key, var in _LOCAL_OVERRIDES.items():
            if env.get(var):
                configs[0][key] = env[var]
    log.info("Loaded default database configs", extra={"engine": settings.db_engine, "count": len(configs)})
    return parse_db_config_set({"type": settings.db_engine, "configs": configs})
