from __future__ import annotations
from pathlib import Path
import zipfile

from query_hub.exceptions.errors import ArchiveError
from query_hub.logging.logger import get_logger

log = get_logger("export.archive")


def create_zip_from_folder(folder: str, zip_name: str, compression_level: int = 9) -> str:
    """Zip the contents of ``folder`` into ``<parent>/<zip_name>.zip``.

    Entries are stored relative to ``folder`` (no top-level directory).
    """
    src = Path(folder)
    if not src.is_dir():
        raise ArchiveError(f"Not a directory: {folder}")
    zip_path = src.parent / f"{zip_name}.zip"

    try:
        with zipfile.ZipFile(
            zip_path, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=compression_level
        ) as zf:
            for p in sorted(src.rglob("*")):
                if p.is_file():
                    zf.write(p, p.relative_to(src).as_posix())
    except OSError as e:
        log.exception("Archive failed", extra={"folder": folder})
        raise ArchiveError(f"Could not create archive {zip_path.name}: {e}") from e

    log.info("Created archive", extra={"path": str(zip_path)})
    return str(zip_path)
