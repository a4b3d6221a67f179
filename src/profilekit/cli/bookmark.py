"""Bookmark commands: add, remove, list, machine."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click
from rich.markup import escape
from rich.table import Table

from ..bookmarks import ListFilter, Scope
from ..errors import ProfileError
from ._common import PROFILE_HOME, bookmark_store, console, fail, get_context

SCOPE_STYLES = {
    Scope.GLOBAL: "[green]global[/]",
    Scope.LOCAL: "[cyan]local[/]",
}


def register_bookmark_commands(main: click.Group) -> None:
    """Register the bookmark command group."""

    @main.group()
    def bookmark():
        """Directory bookmarks — global, or local to this machine.

        Global bookmarks sync with your profile. Local bookmarks belong
        to one machine and win over a global bookmark of the same name.
        """

    @bookmark.command("add")
    @click.argument("name")
    @click.argument("path", required=False, type=click.Path(exists=True, file_okay=False))
    @click.option("--global", "scope", flag_value="global", help="Store in the shared tier.")
    @click.option("--local", "scope", flag_value="local", help="Store for this machine only (default).")
    @click.option("--home", default=PROFILE_HOME, type=click.Path(), help="Profile root.")
    def bookmark_add(name: str, path: Optional[str], scope: Optional[str], home: str):
        """Bookmark PATH (default: the current directory) as NAME.

        Examples:

            profilekit bookmark add proj

            profilekit bookmark add notes ~/Documents/notes --global
        """
        ctx = get_context(home)
        store = bookmark_store(ctx)
        target = Path(path) if path else None
        try:
            entry = store.add(name, target, Scope(scope or "local"))
        except (ProfileError, ValueError) as exc:
            fail(exc)

        if store.set_aside:
            console.print(
                f"[yellow]Unreadable bookmarks file moved to[/] {escape(str(store.set_aside))}"
            )

        where = SCOPE_STYLES[entry.scope]
        if entry.machine:
            where += f" [dim]({escape(entry.machine)})[/]"
        console.print(f"  [bold]{escape(name)}[/] -> {escape(entry.target)}  {where}")

    @bookmark.command("remove")
    @click.argument("name")
    @click.option("--global", "scope", flag_value="global", help="Remove from the shared tier only.")
    @click.option("--local", "scope", flag_value="local", help="Remove from this machine only.")
    @click.option("--force", "-f", is_flag=True, help="Do not ask for confirmation.")
    @click.option("--home", default=PROFILE_HOME, type=click.Path(), help="Profile root.")
    def bookmark_remove(name: str, scope: Optional[str], force: bool, home: str):
        """Remove bookmark NAME.

        Without --global or --local the local bookmark is removed if
        there is one, otherwise the global one.
        """
        ctx = get_context(home)
        store = bookmark_store(ctx)

        if not force and not click.confirm(f"Remove bookmark '{name}'?", default=False):
            console.print("[dim]Cancelled.[/]")
            return

        try:
            removed_from = store.remove(name, Scope(scope or "default"))
        except ProfileError as exc:
            fail(exc)

        console.print(f"  Removed {SCOPE_STYLES[removed_from]} bookmark [bold]{escape(name)}[/]")
        fallback = store.merged.get(name)
        if fallback is not None:
            console.print(f"  [dim]{escape(name)} now resolves to global {escape(fallback)}[/]")

    @bookmark.command("list")
    @click.option("--global", "view", flag_value="global-only", help="Only global bookmarks.")
    @click.option("--local", "view", flag_value="local-only", help="Only this machine's bookmarks.")
    @click.option("--all", "view", flag_value="all-machines", help="Global plus every machine's bookmarks.")
    @click.option("--home", default=PROFILE_HOME, type=click.Path(), help="Profile root.")
    def bookmark_list(view: Optional[str], home: str):
        """List bookmarks as seen from this machine."""
        ctx = get_context(home)
        store = bookmark_store(ctx)
        list_filter = ListFilter(view or "merged")
        entries = store.list_bookmarks(list_filter)

        if not entries:
            console.print("\n[dim]No bookmarks.[/]\n")
            return

        table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
        table.add_column("Name", style="cyan")
        table.add_column("Target")
        table.add_column("Scope")
        if list_filter == ListFilter.ALL_MACHINES:
            table.add_column("Machine", style="dim")

        for entry in entries:
            row = [escape(entry.name), escape(entry.target), SCOPE_STYLES[entry.scope]]
            if list_filter == ListFilter.ALL_MACHINES:
                row.append(escape(entry.machine or ""))
            table.add_row(*row)

        console.print(f"\n[bold]{len(entries)}[/] bookmark(s) [dim]({list_filter.value})[/]:\n")
        console.print(table)
        console.print()

    @bookmark.command("machine")
    @click.option("--home", default=PROFILE_HOME, type=click.Path(), help="Profile root.")
    def bookmark_machine(home: str):
        """Show the machine id that owns local bookmarks."""
        ctx = get_context(home)
        console.print(ctx.machine_id, markup=False, highlight=False)
