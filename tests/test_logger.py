import logging
from datetime import datetime
from pathlib import Path

from query_hub.logging.logger import TimestampRotatingFileHandler, get_logger, rotated_name


def _record(msg):
    return logging.LogRecord("query_hub.test", logging.INFO, __file__, 1, msg, None, None)


def test_rotated_name_avoids_existing_files(tmp_path):
    base = tmp_path / "query_hub.log"
    when = datetime(2026, 10, 17, 15, 30, 12)
    first = rotated_name(str(base), when)
    assert Path(first).name == "query_hub_20261017_153012.log"

    Path(first).write_text("old", encoding="utf-8")
    assert Path(rotated_name(str(base), when)).name == "query_hub_20261017_153012_1.log"


def test_rollover_keeps_live_path_and_prunes(tmp_path):
    base = tmp_path / "query_hub.log"
    handler = TimestampRotatingFileHandler(str(base), maxBytes=60, backupCount=1, encoding="utf-8")
    try:
        for i in range(6):
            handler.emit(_record(f"message {i} " + "x" * 40))
    finally:
        handler.close()

    assert base.exists()
    rotated = [p for p in tmp_path.glob("query_hub_*.log")]
    assert len(rotated) == 1
    assert "message 5" in base.read_text(encoding="utf-8")


def test_loggers_live_under_package_namespace():
    assert get_logger("db.mysql").name == "query_hub.db.mysql"
