"""
profilekit CLI — bookmarks, navigation and profile sync.

Each command group lives in its own module and is attached to the
main Click group through a register function.

Entry point: profilekit.cli:main
"""

from __future__ import annotations

import logging

import click

from .. import __version__


@click.group()
@click.version_option(version=__version__, prog_name="profilekit")
@click.option("--verbose", "-v", is_flag=True, help="Show informational log messages.")
def main(verbose):
    """profilekit — a portable shell profile.

    Bookmark directories, jump to them, and sync your profile
    between machines through gists.
    """
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=logging.INFO if verbose else logging.WARNING,
            format="%(name)s: %(message)s",
        )
    elif verbose:
        logging.getLogger("profilekit").setLevel(logging.INFO)


# ---------------------------------------------------------------------------
# Register all command groups/commands from modular files
# ---------------------------------------------------------------------------

from .bookmark import register_bookmark_commands
from .nav import register_nav_commands
from .sync_cmd import register_sync_commands
from .deps import register_deps_commands

register_bookmark_commands(main)
register_nav_commands(main)
register_sync_commands(main)
register_deps_commands(main)
