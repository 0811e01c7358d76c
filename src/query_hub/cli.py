from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from query_hub.config.settings import load_settings
from query_hub.exceptions.errors import QueryHubError
from query_hub.ingestion.reader import read_sql_file
from query_hub.logging.logger import init_logging
from query_hub.service.query_service import execute_file, execute_queries, save_query_file


def _load_db_config(path: Optional[str]) -> Optional[Dict[str, Any]]:
    if not path:
        return None
    return yaml.safe_load(Path(path).read_text(encoding="utf-8"))


def _summary(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Run result without the row data, which can be arbitrarily large."""
    results: Dict[str, Any] = {}
    for name, res in payload["results"].items():
        if isinstance(res, dict):
            results[name] = res
        else:
            results[name] = [{k: v for k, v in r.items() if k != "rows"} for r in res]
    out = dict(payload)
    out["results"] = results
    return out


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="query-hub", description="Run SQL statements across several databases.")
    parser.add_argument("--config-dir", default="config", help="directory holding <APP_ENV>.yaml")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="execute statements on every configured database")
    src = run.add_mutually_exclusive_group(required=True)
    src.add_argument("--sql-file", help="SQL script to split and execute")
    src.add_argument("--query", action="append", help="statement to execute (repeatable)")
    run.add_argument("--db-config", help="YAML file with {type, configs}; defaults to the settings")
    run.add_argument("--export", action="store_true", help="export result sets to xlsx and zip them")
    run.add_argument("--with-rows", action="store_true", help="include row data in the output")

    split = sub.add_parser("split", help="print the statements a SQL script splits into")
    split.add_argument("sql_file")

    save = sub.add_parser("save", help="store a SQL script in the saved-query directory")
    save.add_argument("sql_file")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings(args.config_dir)
    init_logging(settings.log_level, settings.log_file, settings.log_max_bytes, settings.log_backup_count)

    try:
        if args.command == "split":
            sql_file = read_sql_file(args.sql_file, settings.fallback_encodings)
            for stmt in sql_file.statements:
                print(stmt)
            return 0

        if args.command == "save":
            content = Path(args.sql_file).read_text(encoding="utf-8")
            print(save_query_file(settings, content))
            return 0

        db_config = _load_db_config(args.db_config)
        if args.sql_file:
            # execute_file deletes its input, so hand it a copy
            upload = Path(settings.upload_dir) / f"cli_{Path(args.sql_file).name}"
            upload.parent.mkdir(parents=True, exist_ok=True)
            upload.write_bytes(Path(args.sql_file).read_bytes())
            payload = execute_file(settings, str(upload), args.export, db_config)
        else:
            payload = execute_queries(settings, args.query, args.export, db_config)
    except QueryHubError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    print(json.dumps(payload if args.with_rows else _summary(payload), indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
