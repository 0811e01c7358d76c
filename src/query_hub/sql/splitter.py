"""Split a SQL script into individually executable statements.

The splitter is a heuristic, not a parser. It strips ``--`` line comments,
drops client-side delimiter directives (``DELIMITER $$``, ``//``, ``&&``) and
splits on ``;``. Trigger and procedure bodies contain their own
``;`` terminators, so a piece that starts ``CREATE [DEFINER=...] TRIGGER`` or
``CREATE ... PROCEDURE`` opens a compound block that keeps absorbing pieces
until a bare ``END`` or an ``END$$`` marker closes it. A ``$$`` left over from
a ``DELIMITER $$`` section that is directly followed by such an opener ends
the statement before it (``DROP PROCEDURE IF EXISTS p$$ CREATE PROCEDURE p() ...``).

``/* */`` comments are left in place; MySQL executable comments
(``/*!40101 ... */``) are statements in their own right.

Known limitations:
  - ``--``, ``//`` and ``&&`` inside string literals are stripped too
  - a compound block that is never closed is dropped (a warning is logged)
"""
from __future__ import annotations

import re
from typing import List

from query_hub.logging.logger import get_logger

log = get_logger("sql.splitter")

_LINE_COMMENT = re.compile(r"--.*$")
_WHITESPACE = re.compile(r"\s+")

_IDENT = r"(?:`[^`]+`|'[^']+'|\w+)"
_OPENER = (
    r"CREATE\s+(?:OR\s+REPLACE\s+)?"
    rf"(?:DEFINER\s*=\s*(?:CURRENT_USER(?:\(\))?|{_IDENT}(?:\s*@\s*{_IDENT})?)\s*)?"
    r"(?:TRIGGER|PROCEDURE)\b"
)
_COMPOUND_START = re.compile("^" + _OPENER, re.IGNORECASE)
_OPENER_AFTER_MARKER = re.compile(r"\$\$\s*(?=" + _OPENER + ")", re.IGNORECASE)
_END_MARKER = re.compile(r"\bEND\s*\$\$", re.IGNORECASE)


def normalize_sql(raw_text: str) -> str:
    """Single-line form of ``raw_text`` without ``--`` comments or delimiter directives."""
    lines = (_LINE_COMMENT.sub("", line) for line in (raw_text or "").split("\n"))
    text = " ".join(line for line in lines if line.strip())
    text = _WHITESPACE.sub(" ", text.replace("\t", " ")).strip()
    for directive in ("DELIMITER $$", "DELIMITER ", "//", "&&"):
        text = text.replace(directive, "")
    return text.strip()


def candidate_statements(normalized: str) -> List[str]:
    return [piece.strip() for piece in normalized.split(";") if piece.strip()]


def split_statements(raw_text: str) -> List[str]:
    """Return the statements of ``raw_text`` in order, each ending with ``;``."""
    normalized = normalize_sql(raw_text)
    if not normalized:
        return []

    pending = candidate_statements(normalized)
    statements: List[str] = []
    block: List[str] = []
    in_block = False

    i = 0
    while i < len(pending):
        piece = pending[i]
        i += 1

        if not in_block:
            if _COMPOUND_START.match(piece):
                in_block = True
            else:
                boundary = _OPENER_AFTER_MARKER.search(piece)
                if boundary:
                    head = piece[: boundary.start()].strip()
                    if head:
                        statements.append(head + ";")
                    pending.insert(i, piece[boundary.end():])
                    continue

        if not in_block:
            statements.append(piece + ";")
            continue

        marker = _END_MARKER.search(piece)
        if marker:
            head = piece[: marker.start()].strip()
            if head:
                block.append(head + " END")
            else:
                block.append("END")
            statements.append("; ".join(block) + ";")
            block = []
            in_block = False
            # "END$$ CREATE PROCEDURE ..." carries the next statement after the marker
            rest = piece[marker.end():].strip()
            if rest:
                pending.insert(i, rest)
        elif piece.upper() == "END":
            block.append(piece)
            statements.append("; ".join(block) + ";")
            block = []
            in_block = False
        else:
            block.append(piece)

    if block:
        log.warning(
            "Dropping unterminated compound statement",
            extra={"pieces": len(block), "sql_head": block[0][:200]},
        )

    return statements
