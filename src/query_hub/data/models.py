from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

Row = Dict[str, Any]


@dataclass(frozen=True)
class ConnectionConfig:
    name: str
    host: str = ""
    port: Union[int, str, None] = None
    user: str = ""
    password: str = ""
    database: str = ""

    def __repr__(self) -> str:
        return (
            f"ConnectionConfig(name={self.name!r}, host={self.host!r}, port={self.port!r}, "
            f"user={self.user!r}, password='***', database={self.database!r})"
        )


@dataclass(frozen=True)
class DbConfigSet:
    """A set of databases of one engine family, processed in list order."""

    engine_type: str
    configs: Tuple[ConnectionConfig, ...]

    def names(self) -> List[str]:
        return [c.name for c in self.configs]


@dataclass(frozen=True)
class QuerySuccess:
    label: str
    statement: str
    rows: List[Row]
    row_count: int
    export_path: Optional[str] = None

    ok = True

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "query_number": self.label,
            "query": self.statement,
            "rows": self.rows,
            "count": self.row_count,
        }
        if self.export_path:
            out["export_path"] = self.export_path
        return out


@dataclass(frozen=True)
class QueryFailure:
    label: str
    statement: str
    error: str
    row_count: int = 0

    ok = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "query_number": self.label,
            "query": self.statement,
            "error": self.error,
            "count": self.row_count,
        }


@dataclass(frozen=True)
class BackendFailure:
    """Stands in for the whole statement list of a backend that was never reached."""

    error: str
    row_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.error, "count": self.row_count}


QueryResult = Union[QuerySuccess, QueryFailure]
BackendResults = Union[List[QueryResult], BackendFailure]


@dataclass(frozen=True)
class RunResult:
    results_by_backend: Dict[str, BackendResults]
    counts_by_statement: Dict[str, Dict[str, int]]
    query_mapping: Dict[str, str]
    session_folder: str

    def backend_failed(self, name: str) -> bool:
        return isinstance(self.results_by_backend.get(name), BackendFailure)

    def to_dict(self) -> Dict[str, Any]:
        results: Dict[str, Any] = {}
        for name, res in self.results_by_backend.items():
            if isinstance(res, BackendFailure):
                results[name] = res.to_dict()
            else:
                results[name] = [r.to_dict() for r in res]
        return {
            "results": results,
            "counts": {label: dict(per_db) for label, per_db in self.counts_by_statement.items()},
            "query_mapping": dict(self.query_mapping),
            "session_folder": self.session_folder,
        }


def query_label(index: int) -> str:
    return f"query_{index + 1}"


def build_query_mapping(statements: Sequence[str]) -> Dict[str, str]:
    return {query_label(i): s for i, s in enumerate(statements)}
