"""Navigation commands: go, open, shell-init."""

from __future__ import annotations

import click

from ..errors import ProfileError
from ._common import PROFILE_HOME, bookmark_store, err_console, fail, get_context

SHELL_SNIPPETS = {
    "bash": 'g() {{ local target; target="$({prog} go "$@")" && cd "$target"; }}\n',
    "zsh": 'g() {{ local target; target="$({prog} go "$@")" && cd "$target"; }}\n',
    "powershell": (
        "function g {{\n"
        "    $target = {prog} go @args\n"
        "    if ($LASTEXITCODE -eq 0) {{ Set-Location $target }}\n"
        "}}\n"
    ),
}


def register_nav_commands(main: click.Group) -> None:
    """Register the navigation commands."""

    @main.command("go")
    @click.argument("target", default=".")
    @click.option("--home", default=PROFILE_HOME, type=click.Path(), help="Profile root.")
    def go(target: str, home: str):
        """Print the directory for a bookmark name or path.

        Meant to be wrapped by a shell function that changes into the
        printed directory; see ``profilekit shell-init``.
        """
        ctx = get_context(home)
        try:
            path = bookmark_store(ctx, err_console).resolve(target)
        except ProfileError as exc:
            fail(exc, err_console)
        click.echo(str(path))

    @main.command("open")
    @click.argument("target", default=".")
    @click.option("--home", default=PROFILE_HOME, type=click.Path(), help="Profile root.")
    def open_cmd(target: str, home: str):
        """Open a bookmark or path in the system file manager."""
        ctx = get_context(home)
        try:
            path = bookmark_store(ctx).resolve(target)
        except ProfileError as exc:
            fail(exc)
        click.launch(str(path), locate=path.is_file())

    @main.command("shell-init")
    @click.argument("shell", type=click.Choice(sorted(SHELL_SNIPPETS)), default="bash")
    def shell_init(shell: str):
        """Print a ``g`` function that jumps to bookmarks.

        Examples:

            eval "$(profilekit shell-init bash)"

            profilekit shell-init powershell | Invoke-Expression
        """
        click.echo(SHELL_SNIPPETS[shell].format(prog="profilekit"), nl=False)
