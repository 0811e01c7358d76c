from __future__ import annotations

from typing import Optional


class QueryHubError(Exception):
    """Base exception for query_hub."""


class ConfigurationError(QueryHubError):
    pass


class BackendError(QueryHubError):
    """A database backend failed; keeps the driver error and where it happened."""

    def __init__(
        self,
        message: str,
        engine: str = "",
        config_name: str = "",
        original_error: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.engine = engine
        self.config_name = config_name
        self.original_error = original_error


class DbConnectionError(BackendError):
    pass


class StatementError(BackendError):
    pass


class DisconnectError(BackendError):
    pass


class ExportError(QueryHubError):
    pass


class SqlFileError(QueryHubError):
    pass


class ArchiveError(QueryHubError):
    pass
