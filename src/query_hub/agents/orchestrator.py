from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from query_hub.config.settings import Settings
from query_hub.data.models import (
    BackendFailure,
    BackendResults,
    ConnectionConfig,
    DbConfigSet,
    QueryFailure,
    QueryResult,
    QuerySuccess,
    Row,
    RunResult,
    build_query_mapping,
    query_label,
)
from query_hub.data.session import ExecutionSession
from query_hub.db.base import BackendAdapter
from query_hub.db.factory import adapter_for
from query_hub.exceptions.errors import DbConnectionError, ExportError, StatementError
from query_hub.export.exporter import export_rows
from query_hub.logging.logger import get_logger


log = get_logger("agents.orchestrator")

AdapterFactory = Callable[[str, Settings], BackendAdapter]
Exporter = Callable[[Sequence[Row], int, str, str], str]


@dataclass
class _RunContext:
    """Mutable state of a single run; never stored on the orchestrator."""

    session: ExecutionSession
    adapter: BackendAdapter
    statements: List[str]
    export_requested: bool
    results: Dict[str, BackendResults] = field(default_factory=dict)
    counts: Dict[str, Dict[str, int]] = field(default_factory=dict)

    def note(self, line: str, level: str = "info", **extra: Any) -> None:
        self.session.append_log(line)
        getattr(log, level)(line, extra=extra)


class QueryOrchestrator:
    """Runs a batch of statements on every database of a DbConfigSet, one database at a time.

    Order is part of the contract: databases in config order, statements in input
    order, for results, counts and log lines alike. At most one connection is
    open at any moment. A database that cannot be reached, a failing statement
    or a failed export is recorded in the RunResult and the run moves on.
    """

    def __init__(
        self,
        settings: Settings,
        adapter_factory: AdapterFactory = adapter_for,
        exporter: Exporter = export_rows,
    ):
        self.settings = settings
        self.adapter_factory = adapter_factory
        self.exporter = exporter

    def run(
        self,
        db_config_set: DbConfigSet,
        statements: Sequence[str],
        export_requested: bool = False,
    ) -> RunResult:
        ctx = _RunContext(
            session=ExecutionSession(root=self.settings.execution_dir),
            adapter=self.adapter_factory(db_config_set.engine_type, self.settings),
            statements=list(statements),
            export_requested=bool(export_requested),
        )
        query_mapping = build_query_mapping(ctx.statements)
        for label in query_mapping:
            ctx.counts[label] = {}

        log.info(
            "Run started",
            extra={
                "engine": db_config_set.engine_type,
                "databases": db_config_set.names(),
                "statements": len(ctx.statements),
                "export": ctx.export_requested,
            },
        )

        if not ctx.statements:
            ctx.note("No queries to execute")
            for config in db_config_set.configs:
                ctx.results[config.name] = []
        else:
            for config in db_config_set.configs:
                ctx.results[config.name] = self._run_on_database(ctx, config)

        ctx.session.flush_logs()
        ctx.session.write_count_summary(ctx.counts, query_mapping)
        folder = ctx.session.create_folder()

        return RunResult(
            results_by_backend=ctx.results,
            counts_by_statement=ctx.counts,
            query_mapping=query_mapping,
            session_folder=str(folder),
        )

    def _run_on_database(self, ctx: _RunContext, config: ConnectionConfig) -> BackendResults:
        try:
            handle = ctx.adapter.connect(config)
        except DbConnectionError as e:
            ctx.note(f"Error processing database {config.name}: {e}", level="error", db=config.name)
            return BackendFailure(error=str(e))

        ctx.note(f"Connected to database: {config.name}", db=config.name)
        try:
            return [
                self._run_statement(ctx, handle, config.name, index, statement)
                for index, statement in enumerate(ctx.statements)
            ]
        finally:
            if ctx.adapter.disconnect(handle):
                ctx.note(f"Disconnected from database: {config.name}", db=config.name)
            else:
                ctx.note(f"Error disconnecting from database: {config.name}", level="warning", db=config.name)

    def _run_statement(self, ctx: _RunContext, handle: Any, db_name: str, index: int, statement: str) -> QueryResult:
        label = query_label(index)
        try:
            rows = ctx.adapter.execute_statement(handle, statement)
        except StatementError as e:
            ctx.counts[label][db_name] = 0
            ctx.note(f"Error executing {label} on {db_name}: {e}", level="error", db=db_name, query=label)
            return QueryFailure(label=label, statement=statement, error=str(e))

        row_count = len(rows)
        ctx.counts[label][db_name] = row_count

        export_path: Optional[str] = None
        if ctx.export_requested and row_count > 0:
            try:
                export_path = self.exporter(rows, index, db_name, str(ctx.session.exports_dir))
                ctx.note(f'Exported results for "{label}" from {db_name} to {export_path}', db=db_name, query=label)
            except ExportError as e:
                ctx.note(f"Error exporting {label} from {db_name}: {e}", level="error", db=db_name, query=label)

        ctx.note(f"Successfully executed {label} on {db_name}", db=db_name, query=label, rows=row_count)
        return QuerySuccess(
            label=label,
            statement=statement,
            rows=rows,
            row_count=row_count,
            export_path=export_path,
        )
