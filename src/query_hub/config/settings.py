from __future__ import annotations
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional
import yaml
from dotenv import load_dotenv

load_dotenv()

def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key, default)

def _env_bool(key: str, default: bool = False) -> bool:
    val = os.environ.get(key)
    if val is None:
        return default
    return val.strip().lower() in ("1", "true", "yes", "y", "on")

def _env_list(key: str, default: List[str]) -> List[str]:
    val = os.environ.get(key)
    if not val:
        return default
    return [x.strip() for x in val.split(",") if x.strip()]

@dataclass(frozen=True)
class Settings:
    env: str
    log_level: str
    log_file: str = "logs/query_hub.log"
    log_max_bytes: int = 5 * 1024 * 1024
    log_backup_count: int = 0

    # Run artifacts: session folders and their zip archives live under execution_dir
    execution_dir: str = "queries-execution"
    upload_dir: str = "uploads"
    saved_query_dir: str = "queries"
    fallback_encodings: List[str] = field(default_factory=lambda: ["utf-8", "latin-1"])
    keep_execution_folders: bool = True
    archive_compression_level: int = 9

    # ------------------------------------------------------------------
    # Database backends (mysql / postgres / mssql / duckdb)
    # ------------------------------------------------------------------
    connect_timeout: int = 10

    # Default DbConfigSet used when a request does not carry one
    db_engine: str = "mysql"
    db_configs: List[Dict[str, Any]] = field(default_factory=list)

def load_settings(config_dir: str = "config") -> Settings:
    app_env = _env("APP_ENV", "dev")
    cfg_path = Path(config_dir) / f"{app_env}.yaml"
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config not found: {cfg_path}")

    cfg = yaml.safe_load(cfg_path.read_text(encoding="utf-8")) or {}

    app_cfg = cfg.get("app") or {}
    log_cfg = cfg.get("logging") or {}
    run_cfg = cfg.get("execution") or {}
    db_cfg = cfg.get("database") or {}

    log_level = _env("LOG_LEVEL", str(app_cfg.get("log_level", "INFO")))
    log_file = _env("LOG_FILE", str(log_cfg.get("file", "logs/query_hub.log")))
    log_max_bytes = int(_env("LOG_MAX_BYTES", str(log_cfg.get("max_bytes", 5 * 1024 * 1024))))
    log_backup_count = int(_env("LOG_BACKUP_COUNT", str(log_cfg.get("backup_count", 0))))

    execution_dir = _env("EXECUTION_DIR", str(run_cfg.get("execution_dir", "queries-execution")))
    upload_dir = _env("UPLOAD_DIR", str(run_cfg.get("upload_dir", "uploads")))
    saved_query_dir = _env("SAVED_QUERY_DIR", str(run_cfg.get("saved_query_dir", "queries")))
    fallback_encodings = _env_list(
        "FALLBACK_ENCODINGS", list(run_cfg.get("fallback_encodings", ["utf-8", "latin-1"]))
    )
    keep_execution_folders = _env_bool(
        "KEEP_EXECUTION_FOLDERS", bool(run_cfg.get("keep_execution_folders", True))
    )
    archive_compression_level = int(
        _env("ARCHIVE_COMPRESSION_LEVEL", str(run_cfg.get("archive_compression_level", 9)))
    )

    # ------------------------------ Database ------------------------------
    connect_timeout = int(_env("DB_CONNECT_TIMEOUT", str(db_cfg.get("connect_timeout", 10))))
    db_engine = (_env("DB_TYPE", str(db_cfg.get("engine", "mysql"))) or "mysql").strip().lower()
    db_configs = [dict(c) for c in (db_cfg.get("configs") or [])]

    return Settings(
        env=app_env,
        log_level=log_level,
        log_file=log_file,
        log_max_bytes=log_max_bytes,
        log_backup_count=log_backup_count,
        execution_dir=execution_dir,
        upload_dir=upload_dir,
        saved_query_dir=saved_query_dir,
        fallback_encodings=fallback_encodings,
        keep_execution_folders=keep_execution_folders,
        archive_compression_level=archive_compression_level,
        connect_timeout=connect_timeout,
        db_engine=db_engine,
        db_configs=db_configs,
    )
