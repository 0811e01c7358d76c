"""Request-level entry points shared by the CLI and the Streamlit app.

Validates input, runs the orchestrator, hands the session folder to the
archive builder and takes care of the files a request leaves behind.
"""
from __future__ import annotations

import shutil
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from query_hub.agents.orchestrator import QueryOrchestrator
from query_hub.config.db_configs import default_db_config_set, parse_db_config_set
from query_hub.config.settings import Settings
from query_hub.exceptions.errors import ConfigurationError
from query_hub.export.archive import create_zip_from_folder
from query_hub.export.saved_queries import save_query_file as _save_query_file
from query_hub.ingestion.reader import read_sql_file
from query_hub.logging.logger import get_logger

log = get_logger("service.query_service")

PathLike = Union[str, Path, None]


def as_bool(value: Any) -> bool:
    """Form fields arrive as strings ("true", "1", ...)."""
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "y", "on")
    return bool(value)


def cleanup_paths(*paths: PathLike) -> None:
    for p in paths:
        if not p:
            continue
        path = Path(p)
        try:
            if path.is_dir():
                shutil.rmtree(path)
            elif path.exists():
                path.unlink()
        except OSError as e:
            log.error("Error cleaning up file", extra={"path": str(path), "error": str(e)})


def _validate_queries(queries: Any) -> List[str]:
    if not isinstance(queries, (list, tuple)):
        raise ConfigurationError("Queries must be provided as an array")
    if not all(isinstance(q, str) for q in queries):
        raise ConfigurationError("Every query must be a string")
    return list(queries)


def _run_and_package(
    settings: Settings,
    statements: Sequence[str],
    should_export: bool,
    db_config: Optional[Dict[str, Any]],
) -> Dict[str, Any]:
    config_set = parse_db_config_set(db_config) if db_config is not None else default_db_config_set(settings)

    folder: Optional[str] = None
    zip_path: Optional[str] = None
    try:
        result = QueryOrchestrator(settings).run(config_set, statements, export_requested=should_export)
        folder = result.session_folder
        payload = result.to_dict()

        if should_export:
            zip_path = create_zip_from_folder(
                folder, Path(folder).name, compression_level=settings.archive_compression_level
            )
            payload["zip_path"] = zip_path
            cleanup_paths(folder)
        elif not settings.keep_execution_folders:
            cleanup_paths(folder)
        return payload
    except Exception:
        log.exception("Error executing queries")
        cleanup_paths(zip_path, folder)
        raise


def execute_queries(
    settings: Settings,
    queries: Any,
    should_export: Any = False,
    db_config: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Run an explicit list of statements; ``db_config`` falls back to the configured defaults."""
    statements = _validate_queries(queries)
    return _run_and_package(settings, statements, as_bool(should_export), db_config)


def execute_file(
    settings: Settings,
    file_path: str,
    should_export: Any = False,
    db_config: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Run every statement of an uploaded SQL file; the upload is deleted afterwards."""
    try:
        sql_file = read_sql_file(file_path, settings.fallback_encodings)
        return _run_and_package(settings, sql_file.statements, as_bool(should_export), db_config)
    finally:
        cleanup_paths(file_path)


def store_upload(settings: Settings, file_name: str, data: bytes) -> str:
    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    target = upload_dir / f"query_{int(time.time() * 1000)}{Path(file_name).suffix or '.sql'}"
    target.write_bytes(data)
    return str(target)


def save_query_file(settings: Settings, content: str) -> str:
    return _save_query_file(settings.saved_query_dir, content)


def resolve_download(settings: Settings, zip_path: str) -> str:
    """Return ``zip_path`` if it is an existing archive under the execution directory."""
    if not zip_path:
        raise FileNotFoundError("ZIP file not found")
    root = Path(settings.execution_dir).resolve()
    target = Path(zip_path).resolve()
    if root not in target.parents or target.suffix != ".zip" or not target.is_file():
        raise FileNotFoundError("ZIP file not found")
    return str(target)
