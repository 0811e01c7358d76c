from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional
from pathlib import Path

from query_hub.logging.logger import get_logger
from query_hub.exceptions.errors import SqlFileError
from query_hub.sql.splitter import split_statements

log = get_logger("ingestion.reader")

@dataclass(frozen=True)
class SqlFile:
    text: str
    encoding_used: str
    statements: List[str]

def read_sql_file(file_path: str, fallback_encodings: List[str]) -> SqlFile:
    p = Path(file_path)
    if not p.exists():
        raise SqlFileError(f"File not found: {file_path}")

    last_err: Optional[Exception] = None
    for enc in fallback_encodings:
        try:
            log.info("Reading SQL file", extra={"source_file": p.name, "encoding": enc})
            text = p.read_text(encoding=enc)
        except UnicodeDecodeError as e:
            last_err = e
            log.error("Encoding error", extra={"source_file": p.name, "encoding": enc, "error": str(e)})
            continue
        except OSError as e:
            raise SqlFileError(f"Error occurred while reading the SQL file {p.name}: {e}") from e
        statements = split_statements(text)
        log.info("Parsed SQL file", extra={"source_file": p.name, "statements": len(statements)})
        return SqlFile(text=text, encoding_used=enc, statements=statements)

    raise SqlFileError(f"Failed to decode {p.name} with encodings: {fallback_encodings}") from last_err
