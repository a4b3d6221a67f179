"""Pre-pull backups of the profile.

A pull overwrites local files unconditionally, so it first copies the
current profile into a timestamped directory:

    <root>/backup/<YYYYMMDD-HHMMSS>/
    ├── <entry file>
    ├── bookmarks.json ...     # other top-level profile files
    ├── modules/
    ├── private-modules/
    └── scripts/

Missing pieces are skipped; a brand new profile backs up to an empty
directory.
"""

from __future__ import annotations

import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from ..errors import LocalIOError
from .discovery import BACKUP_DIR, MODULES_DIR, PRIVATE_MODULES_DIR, SCRIPTS_DIR, root_files

logger = logging.getLogger("profilekit.sync.backup")

BACKUP_DIRS = [MODULES_DIR, PRIVATE_MODULES_DIR, SCRIPTS_DIR]

TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"


def _unique_dir(parent: Path, stamp: str) -> Path:
    candidate = parent / stamp
    counter = 1
    while candidate.exists():
        candidate = parent / f"{stamp}-{counter}"
        counter += 1
    return candidate


def create_backup(home: Path, now: Optional[datetime] = None) -> Path:
    """Copy the current profile into a new timestamped backup directory.

    Args:
        home: Profile root directory.
        now: Timestamp to use. Defaults to the current local time.

    Returns:
        Path: The created backup directory.

    Raises:
        LocalIOError: If the backup cannot be written.
    """
    stamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
    backup_dir = _unique_dir(home / BACKUP_DIR, stamp)

    try:
        backup_dir.mkdir(parents=True)

        copied = 0
        for path in root_files(home):
            shutil.copy2(path, backup_dir / path.name)
            copied += 1

        for dirname in BACKUP_DIRS:
            source = home / dirname
            if not source.is_dir():
                logger.debug("Backup: %s missing, skipped", source)
                continue
            shutil.copytree(source, backup_dir / dirname)
            copied += sum(1 for p in source.rglob("*") if p.is_file())
    except (OSError, shutil.Error) as exc:
        raise LocalIOError(f"Backup to {backup_dir} failed: {exc}") from exc

    logger.info("Backed up %d file(s) to %s", copied, backup_dir)
    return backup_dir


def list_backups(home: Path) -> list[dict[str, Any]]:
    """List backup directories of a profile root.

    Args:
        home: Profile root directory.

    Returns:
        list[dict]: Backup metadata sorted newest first.
    """
    search_dir = home / BACKUP_DIR
    if not search_dir.is_dir():
        return []

    backups = []
    for d in sorted((p for p in search_dir.iterdir() if p.is_dir()), reverse=True):
        files = [f for f in d.rglob("*") if f.is_file()]
        backups.append({
            "path": str(d),
            "name": d.name,
            "file_count": len(files),
            "size": sum(f.stat().st_size for f in files),
            "created": datetime.fromtimestamp(d.stat().st_mtime, tz=timezone.utc).isoformat(),
        })

    return backups
