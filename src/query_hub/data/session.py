from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from query_hub.logging.logger import get_logger

log = get_logger("data.session")

LOG_FILE_NAME = "logs.txt"
COUNT_FILE_NAME = "COUNT.txt"
EXPORTS_DIR_NAME = "exports"


def folder_name_for(started_at: datetime) -> str:
    return f"execution on {started_at:%Y-%m-%d} ({started_at:%I_%M_%S %p})"


@dataclass
class ExecutionSession:
    """Working directory for one orchestration run.

    Key points:
      - The folder is named after the run's start time (second precision) and is
        created lazily on the first write; a clash with another run started in the
        same second gets a ``_1``, ``_2``... suffix so runs never share a folder.
      - Log lines are buffered in memory and written once by ``flush_logs``.
      - Removing the folder is the caller's job (after archiving or discarding it).
    """

    root: str
    started_at: datetime = field(default_factory=datetime.now)
    folder: Optional[Path] = None
    log_lines: List[str] = field(default_factory=list)

    def create_folder(self) -> Path:
        if self.folder is not None:
            return self.folder

        root = Path(self.root)
        root.mkdir(parents=True, exist_ok=True)
        base = folder_name_for(self.started_at)
        candidate = root / base
        i = 1
        while True:
            try:
                candidate.mkdir()
                break
            except FileExistsError:
                candidate = root / f"{base}_{i}"
                i += 1

        self.folder = candidate.resolve()
        log.info("Created execution folder", extra={"folder": str(self.folder)})
        return self.folder

    @property
    def exports_dir(self) -> Path:
        return self.create_folder() / EXPORTS_DIR_NAME

    def append_log(self, line: str) -> None:
        self.log_lines.append(line)

    def flush_logs(self) -> Path:
        path = self.create_folder() / LOG_FILE_NAME
        body = "\n".join(self.log_lines)
        path.write_text(body + "\n" if body else "", encoding="utf-8")
        return path

    def write_count_summary(self, counts: Dict[str, Dict[str, int]], query_mapping: Dict[str, str]) -> Path:
        payload: Dict[str, Any] = {"counts": counts, "query_mapping": query_mapping}
        path = self.create_folder() / COUNT_FILE_NAME
        path.write_text(json.dumps(payload, indent=4), encoding="utf-8")
        log.info("Count data written", extra={"path": str(path)})
        return path
