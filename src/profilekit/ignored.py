"""Dependencies the user has asked not to be warned about.

Stored as ``.ignored-dependencies.json`` in the profile root, a JSON
object whose keys are the ignored names. Machine-specific, so the sync
discovery skips it.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from .errors import LocalIOError

logger = logging.getLogger("profilekit.ignored")

IGNORED_FILENAME = ".ignored-dependencies.json"


class IgnoredDependencies:
    """A persisted set of suppressed dependency names."""

    def __init__(self, path: Path):
        self.path = path
        self._names: set[str] = set()

    @classmethod
    def load(cls, path: Path) -> "IgnoredDependencies":
        ignored = cls(path)
        if not path.exists():
            return ignored
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise ValueError("expected a JSON object")
            ignored._names = {str(key) for key in data}
        except (OSError, ValueError) as exc:
            logger.warning("Failed to load ignored dependencies from %s: %s", path, exc)
        return ignored

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __len__(self) -> int:
        return len(self._names)

    def names(self) -> list[str]:
        return sorted(self._names)

    def add(self, name: str) -> bool:
        """Ignore a dependency. Returns False if it was already ignored."""
        if name in self._names:
            return False
        self._names.add(name)
        self.save()
        return True

    def remove(self, name: str) -> bool:
        """Stop ignoring a dependency. Returns False if it was not ignored."""
        if name not in self._names:
            return False
        self._names.discard(name)
        self.save()
        return True

    def save(self) -> None:
        payload = {name: True for name in sorted(self._names)}
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
        except OSError as exc:
            raise LocalIOError(f"Could not write {self.path}: {exc}") from exc
