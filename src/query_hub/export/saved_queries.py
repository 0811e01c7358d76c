from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import List
import re
import time

from query_hub.exceptions.errors import ConfigurationError
from query_hub.logging.logger import get_logger

log = get_logger("export.saved_queries")

@dataclass(frozen=True)
class SavedQueryFile:
    id: str
    path: str
    created_at: float

def save_query_file(out_dir: str, content: str) -> str:
    if not content or not content.strip():
        raise ConfigurationError("Query content must be provided")
    Path(out_dir).mkdir(parents=True, exist_ok=True)
    qid = str(int(time.time() * 1000))
    path = Path(out_dir) / f"queries_{qid}.sql"
    i = 1
    while path.exists():
        path = Path(out_dir) / f"queries_{qid}_{i}.sql"
        i += 1
    path.write_text(content, encoding="utf-8")
    log.info("Saved query file", extra={"id": qid, "path": str(path)})
    return str(path)

def list_query_files(out_dir: str) -> List[SavedQueryFile]:
    p = Path(out_dir)
    if not p.exists():
        return []
    out: List[SavedQueryFile] = []
    for f in sorted(p.glob("queries_*.sql"), key=lambda f: f.stat().st_mtime, reverse=True):
        qid = f.stem[len("queries_"):]
        out.append(SavedQueryFile(id=qid, path=str(f), created_at=f.stat().st_mtime))
    return out

_QID = re.compile(r"\d+(?:_\d+)?")

def load_query_file(out_dir: str, qid: str) -> str:
    if not _QID.fullmatch(qid or ""):
        raise FileNotFoundError(f"Saved query not found: {qid}")
    path = Path(out_dir) / f"queries_{qid}.sql"
    return path.read_text(encoding="utf-8")
