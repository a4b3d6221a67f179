"""Shared utilities for all CLI command modules.

Provides the Rich console instances, context loading and the common
way of reporting recoverable errors.
"""

from __future__ import annotations

from pathlib import Path
from typing import NoReturn

from rich.console import Console
from rich.markup import escape

from .. import PROFILE_HOME
from ..bookmarks import BookmarkStore
from ..context import ProfileContext, load_context

console = Console()
err_console = Console(stderr=True)


def get_context(home: str) -> ProfileContext:
    """Build the profile context for a ``--home`` option value."""
    return load_context(Path(home).expanduser())


def bookmark_store(ctx: ProfileContext, target: Console = console) -> BookmarkStore:
    """Load the bookmark store, announcing a legacy migration once."""
    store = ctx.bookmarks
    if store.migrated:
        target.print(
            "[cyan]Bookmarks migrated to the global/local format.[/] "
            "[dim]Existing entries are now global.[/]"
        )
    return store


def warn(message: str, target: Console = console) -> None:
    target.print(f"[yellow]Warning:[/] {escape(message)}")


def fail(exc: Exception, target: Console = console) -> NoReturn:
    """Report a recoverable error and exit with status 1."""
    warn(str(exc), target)
    raise SystemExit(1)
