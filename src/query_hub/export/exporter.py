from __future__ import annotations
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Sequence
import re
import pandas as pd

from query_hub.exceptions.errors import ExportError
from query_hub.logging.logger import get_logger

log = get_logger("export.exporter")

SHEET_NAME = "Results"

_UNSAFE = re.compile(r"[\\/:*?\"<>|\x00-\x1f]")


def export_file_name(backend_name: str, statement_index: int) -> str:
    safe = _UNSAFE.sub("_", backend_name).strip() or "db"
    return f"{safe}_query_{statement_index + 1}.xlsx"


def _naive(value: Any) -> Any:
    if isinstance(value, datetime) and value.tzinfo is not None:
        return value.replace(tzinfo=None)
    return value


def rows_to_frame(rows: Sequence[Dict[str, Any]]) -> pd.DataFrame:
    df = pd.DataFrame.from_records(list(rows))
    # Excel cannot store tz-aware datetimes; keep the wall-clock time
    for col in df.columns:
        if isinstance(df[col].dtype, pd.DatetimeTZDtype):
            df[col] = df[col].dt.tz_localize(None)
        elif df[col].dtype == object:
            df[col] = df[col].map(_naive)
    return df


def export_rows(rows: Sequence[Dict[str, Any]], statement_index: int, backend_name: str, exports_dir: str) -> str:
    out_dir = Path(exports_dir)
    path = out_dir / export_file_name(backend_name, statement_index)
    try:
        out_dir.mkdir(parents=True, exist_ok=True)
        rows_to_frame(rows).to_excel(path, sheet_name=SHEET_NAME, index=False, engine="openpyxl")
    except Exception as e:
        log.exception("Excel export failed", extra={"db": backend_name, "query_index": statement_index})
        raise ExportError(f"Excel export failed for {path.name}: {e}") from e

    log.info("Exported XLSX", extra={"path": str(path), "rows": len(rows)})
    return str(path)
