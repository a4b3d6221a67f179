"""Sync commands: push, pull, status, backups, configure."""

from __future__ import annotations

from typing import Optional

import click
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..config import load_config, save_config
from ..errors import ProfileError
from ..sync.backup import list_backups
from ..sync.models import Classification
from ._common import PROFILE_HOME, console, fail, get_context, warn


def _ask(question: str) -> bool:
    return click.confirm(question, default=False)


def register_sync_commands(main: click.Group) -> None:
    """Register the sync command group."""

    @main.group()
    def sync():
        """Profile sync — push to and pull from your gists.

        Public files go to one gist; everything under private-modules
        goes to a second, secret gist.
        """

    @sync.command("push")
    @click.option("--force", "-f", is_flag=True, help="Delete remote-only files without asking.")
    @click.option("--home", default=PROFILE_HOME, type=click.Path(), help="Profile root.")
    def sync_push(force: bool, home: str):
        """Push local profile files to the gists."""
        ctx = get_context(home)
        engine = ctx.sync(confirm=_ask)

        console.print("\n  Pushing profile...")
        try:
            report = engine.push(force=force)
        except ProfileError as exc:
            fail(exc)

        if not report.stores:
            console.print("  [yellow]Nothing to push.[/]\n")
            return

        for store in report.stores:
            label = store.store.value
            if store.skipped:
                warn(f"{label} gist skipped: {store.reason}")
                continue
            console.print(f"  [green]{label}[/]: {len(store.uploaded)} file(s) uploaded")
            if store.deleted:
                console.print(f"    [red]deleted[/] {escape(', '.join(store.deleted))}")
            if store.deletions_declined:
                console.print(f"    [dim]kept remote-only: {escape(', '.join(store.deletions_declined))}[/]")
        console.print()

    @sync.command("pull")
    @click.option("--home", default=PROFILE_HOME, type=click.Path(), help="Profile root.")
    def sync_pull(home: str):
        """Pull profile files from the gists, backing up first."""
        ctx = get_context(home)
        engine = ctx.sync()

        console.print("\n  Pulling profile...")
        try:
            report = engine.pull()
        except ProfileError as exc:
            fail(exc)

        console.print(f"  [green]{len(report.written)} file(s) written[/]")
        console.print(f"  [dim]Backup: {escape(str(report.backup_dir))}[/]")
        for name in report.skipped:
            warn(f"skipped {name}")
        if report.private_warning:
            warn(f"private gist not pulled: {report.private_warning}")
        console.print("  [dim]Restart your shell to load the new profile.[/]\n")

    @sync.command("status")
    @click.option("--home", default=PROFILE_HOME, type=click.Path(), help="Profile root.")
    def sync_status(home: str):
        """Show sync configuration and the files a push would send."""
        ctx = get_context(home)
        status = ctx.sync().status()

        console.print()
        console.print(
            Panel(
                f"Profile: [cyan]{escape(status['home'])}[/]\n"
                f"Machine: [cyan]{escape(ctx.machine_id)}[/]\n"
                f"Public gist: {escape(status['public_gist_id'] or '') or '[yellow]not configured[/]'}\n"
                f"Private gist: {escape(status['private_gist_id'] or '') or '[dim]not configured[/]'}\n"
                f"Token: {'[green]available[/]' if status['has_token'] else '[yellow]missing[/]'}",
                title="Profile Sync",
                border_style="magenta",
            )
        )

        entries = status["entries"]
        if not entries:
            console.print("  [dim]No profile files found.[/]\n")
            return

        table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
        table.add_column("Logical name", style="cyan")
        table.add_column("Store")
        for entry in entries:
            store = (
                "[magenta]private[/]"
                if entry.classification == Classification.PRIVATE
                else "public"
            )
            table.add_row(escape(entry.logical_name), store)

        console.print(f"  [bold]{len(entries)}[/] file(s):\n")
        console.print(table)
        console.print()

    @sync.command("backups")
    @click.option("--home", default=PROFILE_HOME, type=click.Path(), help="Profile root.")
    def sync_backups(home: str):
        """List pre-pull backups, newest first."""
        ctx = get_context(home)
        backups = list_backups(ctx.home)

        if not backups:
            console.print("\n[dim]No backups found.[/]\n")
            return

        table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
        table.add_column("Backup", style="cyan")
        table.add_column("Files", justify="right")
        table.add_column("Size", justify="right")

        for b in backups:
            size_kb = b["size"] / 1024
            table.add_row(b["name"], str(b["file_count"]), f"{size_kb:.1f} KB")

        console.print(f"\n[bold]{len(backups)}[/] backup(s):\n")
        console.print(table)
        console.print()

    @sync.command("configure")
    @click.option("--public", "public_gist_id", default=None, help="Public gist id.")
    @click.option("--private", "private_gist_id", default=None, help="Private gist id.")
    @click.option("--entry-file", default=None, help="On-disk name of the profile entry script.")
    @click.option("--home", default=PROFILE_HOME, type=click.Path(), help="Profile root.")
    def sync_configure(
        public_gist_id: Optional[str],
        private_gist_id: Optional[str],
        entry_file: Optional[str],
        home: str,
    ):
        """Record gist ids in profilekit.yaml.

        The token is never stored; export it in the variable named by
        ``token_env_var`` (PROFILEKIT_GIST_TOKEN by default).
        """
        ctx = get_context(home)
        config = load_config(ctx.home, apply_env=False)

        updates = {
            "public_gist_id": public_gist_id,
            "private_gist_id": private_gist_id,
            "entry_file": entry_file,
        }
        updates = {k: v for k, v in updates.items() if v}
        if not updates:
            console.print("[dim]Nothing to change.[/]")
            return

        config = config.model_copy(update=updates)
        try:
            path = save_config(ctx.home, config)
        except OSError as exc:
            fail(exc)
        console.print(f"  [green]Saved[/] {escape(str(path))}")
