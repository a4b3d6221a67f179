"""
Directory bookmarks with a shared tier and a per-machine tier.

The document lives in ``bookmarks.json`` at the profile root, so the
global tier travels with every sync while each machine keeps its own
entries under ``local[<machine id>]``:

    {
      "global": {"proj": "~/code/proj"},
      "local":  {"laptop": {"proj": "~/src/proj"}}
    }

For the current machine, local entries shadow global ones of the same
name. Paths under the home directory are stored with a leading ``~``
so the same bookmark works on every machine.

Older profiles stored a flat ``{name: path}`` mapping. Such documents
are detected at load, treated as the global tier, and rewritten once.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, RootModel, ValidationError

from .errors import LocalIOError, NotFound, PathNotFound

logger = logging.getLogger("profilekit.bookmarks")

BOOKMARKS_FILENAME = "bookmarks.json"
HOME_TOKEN = "~"


class Scope(str, Enum):
    """Which tier a bookmark operation targets."""

    DEFAULT = "default"
    GLOBAL = "global"
    LOCAL = "local"


class ListFilter(str, Enum):
    """Views offered by ``BookmarkStore.list_bookmarks``."""

    MERGED = "merged"
    LOCAL_ONLY = "local-only"
    GLOBAL_ONLY = "global-only"
    ALL_MACHINES = "all-machines"


class BookmarkDocument(BaseModel):
    """The two-tier bookmark document as persisted on disk."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    global_: dict[str, str] = Field(default_factory=dict, alias="global")
    local: dict[str, dict[str, str]] = Field(default_factory=dict)


class FlatDocument(RootModel[dict[str, str]]):
    """Legacy single-tier document: a bare ``{name: path}`` mapping."""


class BookmarkEntry(BaseModel):
    """One bookmark as presented to callers.

    Attributes:
        name: Bookmark name.
        target: Stored path, possibly starting with ``~``.
        scope: GLOBAL or LOCAL, the tier the entry came from.
        machine: Owning machine for LOCAL entries.
    """

    name: str
    target: str
    scope: Scope
    machine: Optional[str] = None

    @property
    def is_local(self) -> bool:
        return self.scope == Scope.LOCAL


def parse_document(raw: object) -> Union[BookmarkDocument, FlatDocument]:
    """Classify raw JSON as a tiered or a legacy flat document.

    A document is tiered when its ``global`` or ``local`` key holds a
    mapping; a flat bookmark that happens to be called ``global`` has a
    string value and stays flat.

    Raises:
        ValidationError: If the JSON matches neither shape.
    """
    if isinstance(raw, dict) and (
        not raw
        or isinstance(raw.get("global"), dict)
        or isinstance(raw.get("local"), dict)
    ):
        return BookmarkDocument.model_validate(raw)
    return FlatDocument.model_validate(raw)


def normalize(document: Union[BookmarkDocument, FlatDocument]) -> tuple[BookmarkDocument, bool]:
    """Return the tiered form of a document and whether it was migrated.

    Flat ``name: path`` keys sitting next to the tiers of a half-migrated
    document are folded into the global tier. An existing global entry
    of the same name wins. Unknown non-string keys are carried along
    untouched.
    """
    if isinstance(document, FlatDocument):
        return BookmarkDocument(global_=dict(document.root), local={}), True

    extra = document.model_extra or {}
    stray = {k: v for k, v in extra.items() if isinstance(v, str)}
    if not stray:
        return document, False

    global_tier = dict(document.global_)
    for name, target in stray.items():
        if name in global_tier:
            logger.warning("Dropping legacy bookmark %s: global entry of that name exists", name)
            continue
        global_tier[name] = target
    kept = {k: v for k, v in extra.items() if k not in stray}
    folded = BookmarkDocument.model_validate(
        {**kept, "global": global_tier, "local": document.local}
    )
    return folded, True


def merge(global_tier: dict[str, str], local_tier: dict[str, str]) -> dict[str, str]:
    """Overlay one machine's local bookmarks onto the global ones."""
    merged = dict(global_tier)
    merged.update(local_tier)
    return merged


def expand_home(target: str) -> Path:
    """Turn a stored target back into a concrete path."""
    if target == HOME_TOKEN:
        return Path.home()
    if target.startswith(HOME_TOKEN + "/") or target.startswith(HOME_TOKEN + "\\"):
        return Path.home() / target[2:]
    return Path(target)


def contract_home(path: Path) -> str:
    """Store a path portably, replacing the home directory with ``~``.

    The home directory is matched both as given and with symlinks
    resolved, since callers pass resolved paths and ``$HOME`` may
    itself run through a symlink (``/home`` -> ``/var/home``).
    """
    home = Path.home()
    for candidate in (home, home.resolve()):
        try:
            relative = path.relative_to(candidate)
            break
        except ValueError:
            continue
    else:
        return str(path)
    if relative == Path("."):
        return HOME_TOKEN
    return f"{HOME_TOKEN}/{relative.as_posix()}"


class BookmarkStore:
    """Named path bookmarks with local-over-global merge semantics.

    Every mutation persists the whole document and recomputes the merged
    view from scratch.
    """

    def __init__(self, path: Path, machine_id: str):
        self.path = path
        self.machine_id = machine_id
        self.document = BookmarkDocument()
        self.merged: dict[str, str] = {}
        self.migrated = False
        self.unreadable = False
        self.set_aside: Optional[Path] = None

    @classmethod
    def load(cls, path: Path, machine_id: str) -> "BookmarkStore":
        """Create a store and read its document from disk."""
        store = cls(path, machine_id)
        store.reload()
        return store

    def reload(self) -> None:
        """Read the document, creating or migrating it as needed.

        A missing file is initialized empty and persisted. A legacy flat
        document is rewritten in tiered form and ``migrated`` is set.
        Unreadable or invalid documents degrade to an empty store; the
        file is moved aside before the next save rather than overwritten.
        """
        self.migrated = False
        self.unreadable = False

        if not self.path.exists():
            self.document = BookmarkDocument()
            self._rebuild()
            try:
                self.save()
            except LocalIOError as exc:
                logger.warning("Could not initialize %s: %s", self.path, exc)
            return

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            parsed = parse_document(raw)
        except (OSError, json.JSONDecodeError, ValidationError) as exc:
            logger.warning("Failed to load bookmarks from %s: %s", self.path, exc)
            self.document = BookmarkDocument()
            self.unreadable = True
            self._rebuild()
            return

        self.document, self.migrated = normalize(parsed)
        self._rebuild()

        if self.migrated:
            logger.info(
                "Migrated %d legacy bookmark(s) in %s to the global tier",
                len(self.document.global_), self.path,
            )
            try:
                self.save()
            except LocalIOError as exc:
                logger.warning("Could not persist migrated bookmarks: %s", exc)

    def save(self) -> None:
        """Persist the full document.

        If the document on disk could not be read, it is first renamed to
        ``bookmarks.json.corrupt-<timestamp>`` and ``set_aside`` records
        where it went.

        Raises:
            LocalIOError: If the file cannot be written or set aside.
        """
        if self.unreadable:
            self._set_aside()

        payload = self.document.model_dump(by_alias=True)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
        except OSError as exc:
            raise LocalIOError(f"Could not write {self.path}: {exc}") from exc

    def _set_aside(self) -> None:
        if self.path.exists():
            stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
            target = self.path.with_name(f"{self.path.name}.corrupt-{stamp}")
            counter = 1
            while target.exists():
                target = self.path.with_name(f"{self.path.name}.corrupt-{stamp}-{counter}")
                counter += 1
            try:
                self.path.rename(target)
            except OSError as exc:
                raise LocalIOError(
                    f"Refusing to overwrite unreadable {self.path}: {exc}"
                ) from exc
            logger.warning("Moved unreadable bookmarks %s to %s", self.path, target)
            self.set_aside = target
        self.unreadable = False

    def _local_tier(self) -> dict[str, str]:
        return self.document.local.get(self.machine_id, {})

    def _rebuild(self) -> None:
        self.merged = merge(self.document.global_, self._local_tier())

    def resolve(self, name_or_path: str) -> Path:
        """Resolve a bookmark name, or failing that a literal path.

        Args:
            name_or_path: Bookmark name, or a path such as ``.``.

        Returns:
            Path: Home-expanded bookmark target, or the canonical path.

        Raises:
            PathNotFound: If the input is neither a bookmark nor an
                existing path.
        """
        target = self.merged.get(name_or_path)
        if target is not None:
            return expand_home(target)

        try:
            return Path(name_or_path).expanduser().resolve(strict=True)
        except (OSError, RuntimeError) as exc:
            raise PathNotFound(
                f"'{name_or_path}' is not a bookmark or an existing path"
            ) from exc

    def add(
        self,
        name: str,
        target: Optional[Path] = None,
        scope: Scope = Scope.LOCAL,
    ) -> BookmarkEntry:
        """Bookmark a directory, overwriting any same-named entry in scope.

        Args:
            name: Bookmark name.
            target: Path to store. Defaults to the current directory.
            scope: GLOBAL or LOCAL. DEFAULT means LOCAL.

        Returns:
            BookmarkEntry: The stored entry.
        """
        if not name or not name.strip():
            raise ValueError("Bookmark name must not be empty")

        path = (target or Path.cwd()).expanduser().resolve()
        stored = contract_home(path)

        if scope == Scope.GLOBAL:
            self.document.global_[name] = stored
            entry = BookmarkEntry(name=name, target=stored, scope=Scope.GLOBAL)
        else:
            self.document.local.setdefault(self.machine_id, {})[name] = stored
            entry = BookmarkEntry(
                name=name, target=stored, scope=Scope.LOCAL, machine=self.machine_id,
            )

        self._rebuild()
        self.save()
        logger.info("Bookmarked %s -> %s (%s)", name, stored, entry.scope.value)
        return entry

    def remove(self, name: str, scope: Scope = Scope.DEFAULT) -> Scope:
        """Delete a bookmark.

        With DEFAULT scope the current machine's local entry is removed
        if present, otherwise the global one.

        Args:
            name: Bookmark name.
            scope: DEFAULT, GLOBAL or LOCAL.

        Returns:
            Scope: The tier the bookmark was removed from.

        Raises:
            NotFound: If the bookmark is absent from the targeted tier(s).
        """
        local_tier = self.document.local.get(self.machine_id, {})

        if scope == Scope.GLOBAL:
            if name not in self.document.global_:
                raise NotFound(f"No global bookmark named '{name}'")
            removed_from = Scope.GLOBAL
        elif scope == Scope.LOCAL:
            if name not in local_tier:
                raise NotFound(f"No local bookmark named '{name}' on {self.machine_id}")
            removed_from = Scope.LOCAL
        elif name in local_tier:
            removed_from = Scope.LOCAL
        elif name in self.document.global_:
            removed_from = Scope.GLOBAL
        else:
            raise NotFound(f"No bookmark named '{name}'")

        if removed_from == Scope.GLOBAL:
            del self.document.global_[name]
        else:
            del local_tier[name]
            if not local_tier:
                self.document.local.pop(self.machine_id, None)

        self._rebuild()
        self.save()
        logger.info("Removed %s bookmark %s", removed_from.value, name)
        return removed_from

    def list_bookmarks(self, view: ListFilter = ListFilter.MERGED) -> list[BookmarkEntry]:
        """List bookmarks for one of the supported views.

        MERGED is what ``resolve`` sees; each entry's scope tells where it
        came from. ALL_MACHINES breaks the local tier out per machine and
        is meant for inspection only.
        """
        local_tier = self._local_tier()
        entries: list[BookmarkEntry] = []

        if view == ListFilter.MERGED:
            for name in sorted(self.merged):
                if name in local_tier:
                    entries.append(BookmarkEntry(
                        name=name, target=local_tier[name],
                        scope=Scope.LOCAL, machine=self.machine_id,
                    ))
                else:
                    entries.append(BookmarkEntry(
                        name=name, target=self.document.global_[name], scope=Scope.GLOBAL,
                    ))
            return entries

        if view in (ListFilter.GLOBAL_ONLY, ListFilter.ALL_MACHINES):
            for name in sorted(self.document.global_):
                entries.append(BookmarkEntry(
                    name=name, target=self.document.global_[name], scope=Scope.GLOBAL,
                ))

        if view == ListFilter.LOCAL_ONLY:
            machines = [self.machine_id]
        elif view == ListFilter.ALL_MACHINES:
            machines = sorted(self.document.local)
        else:
            machines = []

        for machine in machines:
            tier = self.document.local.get(machine, {})
            for name in sorted(tier):
                entries.append(BookmarkEntry(
                    name=name, target=tier[name], scope=Scope.LOCAL, machine=machine,
                ))
        return entries
