import logging
import os
import glob
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path

_INITIALIZED = False

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def rotated_name(base_file: str, when: datetime) -> str:
    """Return a free path like ``logs/query_hub_20261017_153012.log`` for a rollover."""
    base_path = Path(base_file)
    suffix = base_path.suffix or ".log"
    stamp = when.strftime("%Y%m%d_%H%M%S")
    candidate = base_path.with_name(f"{base_path.stem}_{stamp}{suffix}")
    i = 1
    while candidate.exists():
        candidate = base_path.with_name(f"{base_path.stem}_{stamp}_{i}{suffix}")
        i += 1
    return str(candidate)


class TimestampRotatingFileHandler(RotatingFileHandler):
    """Size based rotation that archives the full log under a timestamped name.

    The live log keeps its configured path. ``backupCount=0`` keeps every
    rotated file; a positive value keeps only the newest N.
    """

    def doRollover(self) -> None:
        if self.stream:
            try:
                self.stream.close()
            finally:
                self.stream = None

        base = self.baseFilename
        if os.path.exists(base):
            try:
                os.replace(base, rotated_name(base, datetime.now()))
            except OSError:
                # keep logging into the current file
                pass

        if self.backupCount and self.backupCount > 0:
            self._prune(base)

        if not self.delay:
            self.stream = self._open()

    def _prune(self, base: str) -> None:
        base_path = Path(base)
        pattern = str(base_path.with_name(f"{base_path.stem}_*{base_path.suffix or '.log'}"))
        rotated = sorted(glob.glob(pattern), key=os.path.getmtime, reverse=True)
        for old in rotated[self.backupCount:]:
            try:
                os.remove(old)
            except OSError:
                pass


def init_logging(
    log_level: str = "INFO",
    log_file: str = "logs/query_hub.log",
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 0,
) -> None:
    global _INITIALIZED
    if _INITIALIZED:
        return

    Path(log_file).parent.mkdir(parents=True, exist_ok=True)
    level = getattr(logging, log_level.upper(), logging.INFO)

    file_handler = TimestampRotatingFileHandler(
        log_file,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    stream_handler = logging.StreamHandler()

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=[file_handler, stream_handler])
    _INITIALIZED = True


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"query_hub.{name}")
