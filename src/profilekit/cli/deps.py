"""Dependency warning commands: ignore, unignore, list."""

from __future__ import annotations

import click
from rich.markup import escape

from ..errors import ProfileError
from ._common import PROFILE_HOME, console, fail, get_context


def register_deps_commands(main: click.Group) -> None:
    """Register the deps command group."""

    @main.group()
    def deps():
        """Silence missing-dependency warnings on this machine."""

    @deps.command("ignore")
    @click.argument("name")
    @click.option("--home", default=PROFILE_HOME, type=click.Path(), help="Profile root.")
    def deps_ignore(name: str, home: str):
        """Stop warning about dependency NAME."""
        ctx = get_context(home)
        try:
            added = ctx.ignored.add(name)
        except ProfileError as exc:
            fail(exc)
        if added:
            console.print(f"  Ignoring [cyan]{escape(name)}[/]")
        else:
            console.print(f"  [dim]{escape(name)} was already ignored.[/]")

    @deps.command("unignore")
    @click.argument("name")
    @click.option("--home", default=PROFILE_HOME, type=click.Path(), help="Profile root.")
    def deps_unignore(name: str, home: str):
        """Warn about dependency NAME again."""
        ctx = get_context(home)
        try:
            removed = ctx.ignored.remove(name)
        except ProfileError as exc:
            fail(exc)
        if removed:
            console.print(f"  No longer ignoring [cyan]{escape(name)}[/]")
        else:
            console.print(f"  [dim]{escape(name)} was not ignored.[/]")

    @deps.command("list")
    @click.option("--home", default=PROFILE_HOME, type=click.Path(), help="Profile root.")
    def deps_list(home: str):
        """List ignored dependencies."""
        ctx = get_context(home)
        names = ctx.ignored.names()
        if not names:
            console.print("\n[dim]No ignored dependencies.[/]\n")
            return
        console.print(f"\n[bold]{len(names)}[/] ignored:\n")
        for name in names:
            console.print(f"  {escape(name)}")
        console.print()
