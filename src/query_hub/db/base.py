"""Capability interface shared by every engine family.

An adapter is chosen once per run and holds no connection state of its own:
``connect`` hands back a driver handle, the caller threads that handle through
``execute_statement`` and finally gives it back to ``disconnect``.

Subclasses implement the three driver-facing hooks (``_open``, ``_run``,
``_close``). The public methods wrap whatever the driver raises into
DbConnectionError / StatementError / DisconnectError so callers never see
driver exception types, and ``disconnect`` never raises at all.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, List, Optional, Sequence

from query_hub.config.settings import Settings
from query_hub.data.models import ConnectionConfig, Row
from query_hub.exceptions.errors import DbConnectionError, DisconnectError, StatementError
from query_hub.logging.logger import get_logger

log = get_logger("db.base")


def rows_from_cursor(description: Optional[Sequence[Sequence[Any]]], records: Sequence[Sequence[Any]]) -> List[Row]:
    """Turn DB-API ``cursor.description`` + tuple records into column-keyed dicts."""
    if not description:
        return []
    cols = [d[0] for d in description]
    return [dict(zip(cols, rec)) for rec in records]


def port_number(config: ConnectionConfig, default: int) -> int:
    if config.port in (None, ""):
        return default
    return int(config.port)


class BackendAdapter(ABC):
    ENGINE: str = "base"

    def __init__(self, settings: Settings):
        self.settings = settings

    @abstractmethod
    def _open(self, config: ConnectionConfig) -> Any:
        ...

    @abstractmethod
    def _run(self, handle: Any, statement: str) -> List[Row]:
        ...

    @abstractmethod
    def _close(self, handle: Any) -> None:
        ...

    def connect(self, config: ConnectionConfig) -> Any:
        try:
            handle = self._open(config)
        except Exception as e:
            raise DbConnectionError(
                str(e) or e.__class__.__name__,
                engine=self.ENGINE,
                config_name=config.name,
                original_error=e,
            ) from e
        log.info("Connected", extra={"engine": self.ENGINE, "db": config.name})
        return handle

    def execute_statement(self, handle: Any, statement: str) -> List[Row]:
        try:
            return list(self._run(handle, statement))
        except Exception as e:
            raise StatementError(
                str(e) or e.__class__.__name__,
                engine=self.ENGINE,
                original_error=e,
            ) from e

    def close(self, handle: Any) -> None:
        try:
            self._close(handle)
        except Exception as e:
            raise DisconnectError(
                str(e) or e.__class__.__name__,
                engine=self.ENGINE,
                original_error=e,
            ) from e

    def disconnect(self, handle: Any) -> bool:
        """Best-effort close; returns False (and logs) instead of raising."""
        if handle is None:
            return True
        try:
            self.close(handle)
            return True
        except DisconnectError as e:
            log.warning("Disconnect failed", extra={"engine": self.ENGINE, "error": str(e)})
            return False
