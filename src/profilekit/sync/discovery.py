"""
File discovery -- which profile files sync, and under what name.

Gists are flat, so nested paths are flattened into logical names by
joining path segments with ``--``:

    <root>/bookmarks.json               ->  bookmarks.json
    <root>/<entry file>                 ->  profile.ps1
    <root>/modules/config.ps1           ->  modules--config.ps1
    <root>/private-modules/a/b/x.ps1    ->  private-modules--a--b--x.ps1
    <root>/scripts/y.ps1                ->  scripts--y.ps1

Anything under ``private-modules`` goes to the private gist; the rest
goes to the public one.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

from ..config import CONFIG_FILENAME, DEFAULT_ENTRY_FILE
from ..ignored import IGNORED_FILENAME
from .models import Classification, SyncFileEntry

logger = logging.getLogger("profilekit.sync.discovery")

SEPARATOR = "--"
ENTRY_LOGICAL_NAME = "profile.ps1"

MODULES_DIR = "modules"
PRIVATE_MODULES_DIR = "private-modules"
SCRIPTS_DIR = "scripts"
BACKUP_DIR = "backup"

PRIVATE_PREFIX = PRIVATE_MODULES_DIR + SEPARATOR

# Machine-local or OS metadata files that never leave the machine
EXCLUDED_ROOT_FILES = {
    IGNORED_FILENAME,
    CONFIG_FILENAME,
    ".DS_Store",
    "Thumbs.db",
    "desktop.ini",
}


def classify(logical_name: str) -> Classification:
    """Route a logical name to the public or private store."""
    if logical_name.startswith(PRIVATE_PREFIX):
        return Classification.PRIVATE
    return Classification.PUBLIC


def _files_in(directory: Path) -> list[Path]:
    if not directory.is_dir():
        return []
    return sorted(p for p in directory.iterdir() if p.is_file())


def root_files(home: Path) -> list[Path]:
    """Top-level files of the profile root that are allowed to travel."""
    return [p for p in _files_in(home) if p.name not in EXCLUDED_ROOT_FILES]


def _iter_candidates(home: Path, entry_file: str) -> Iterator[tuple[str, Path]]:
    for path in root_files(home):
        if path.name != entry_file:
            yield path.name, path

    entry_path = home / entry_file
    if entry_path.is_file():
        yield ENTRY_LOGICAL_NAME, entry_path

    for path in _files_in(home / MODULES_DIR):
        yield f"{MODULES_DIR}{SEPARATOR}{path.name}", path

    private_root = home / PRIVATE_MODULES_DIR
    if private_root.is_dir():
        for path in sorted(p for p in private_root.rglob("*") if p.is_file()):
            relative = path.relative_to(private_root).as_posix()
            flattened = relative.replace("/", SEPARATOR)
            yield f"{PRIVATE_PREFIX}{flattened}", path

    for path in _files_in(home / SCRIPTS_DIR):
        yield f"{SCRIPTS_DIR}{SEPARATOR}{path.name}", path


def discover_files(home: Path, entry_file: str = DEFAULT_ENTRY_FILE) -> dict[str, Path]:
    """Map every syncable file's logical name to its absolute path.

    Discovery order is root files, the entry file, modules,
    private-modules, then scripts. When two files flatten to the same
    logical name the first one discovered wins.

    Args:
        home: Profile root directory.
        entry_file: On-disk name of the profile entry script.

    Returns:
        dict: Logical name -> absolute path, in discovery order.
    """
    files: dict[str, Path] = {}
    for logical_name, path in _iter_candidates(home, entry_file):
        if logical_name in files:
            logger.debug(
                "Skipping %s: logical name %s already taken by %s",
                path, logical_name, files[logical_name],
            )
            continue
        files[logical_name] = path.absolute()
    return files


def discover_entries(home: Path, entry_file: str = DEFAULT_ENTRY_FILE) -> list[SyncFileEntry]:
    """Discovered files as classified entries, in discovery order."""
    return [
        SyncFileEntry(
            logical_name=name,
            absolute_path=path,
            classification=classify(name),
        )
        for name, path in discover_files(home, entry_file).items()
    ]


def _check_segments(logical_name: str, segments: list[str]) -> None:
    for segment in segments:
        if (
            segment in ("", ".", "..")
            or "/" in segment
            or "\\" in segment
            or ":" in segment
        ):
            raise ValueError(f"Refusing unsafe logical name: {logical_name!r}")


def logical_to_path(home: Path, logical_name: str, entry_file: str = DEFAULT_ENTRY_FILE) -> Path:
    """Reverse the discovery mapping for a logical name.

    ``profile.ps1`` maps to the entry file. Names starting with a known
    directory segment map back into that directory; private-modules
    names are fully unflattened since discovery recursed into them;
    this deliberately goes beyond restoring only the first ``--``, so
    that nested private modules pushed from one machine land at the
    same nested path on another. ``modules`` and ``scripts`` names
    split on the first ``--`` only. Everything else is a root file.

    Raises:
        ValueError: If the name would land outside the profile root.
    """
    if logical_name == ENTRY_LOGICAL_NAME:
        return home / entry_file

    head, sep, rest = logical_name.partition(SEPARATOR)
    if sep and head == PRIVATE_MODULES_DIR:
        segments = rest.split(SEPARATOR)
        _check_segments(logical_name, segments)
        return home.joinpath(PRIVATE_MODULES_DIR, *segments)
    if sep and head in (MODULES_DIR, SCRIPTS_DIR):
        _check_segments(logical_name, [rest])
        return home / head / rest

    _check_segments(logical_name, [logical_name])
    return home / logical_name
