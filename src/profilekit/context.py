"""
Profile context -- everything one command invocation needs.

Built once per invocation from the profile root and the environment,
then handed to each operation. Stores are loaded on first use.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from . import PROFILE_HOME
from .bookmarks import BOOKMARKS_FILENAME, BookmarkStore
from .config import ProfileConfig, load_config
from .ignored import IGNORED_FILENAME, IgnoredDependencies
from .machine import detect_machine_id
from .sync import GistClient, ProfileSync
from .sync.engine import Confirm

logger = logging.getLogger("profilekit.context")


class ProfileContext:
    """State for a profile root: config, machine identity and stores."""

    def __init__(self, home: Path, config: ProfileConfig, machine_id: str):
        self.home = home
        self.config = config
        self.machine_id = machine_id
        self._bookmarks: Optional[BookmarkStore] = None
        self._ignored: Optional[IgnoredDependencies] = None

    @property
    def bookmarks(self) -> BookmarkStore:
        if self._bookmarks is None:
            self._bookmarks = BookmarkStore.load(self.home / BOOKMARKS_FILENAME, self.machine_id)
        return self._bookmarks

    @property
    def ignored(self) -> IgnoredDependencies:
        if self._ignored is None:
            self._ignored = IgnoredDependencies.load(self.home / IGNORED_FILENAME)
        return self._ignored

    @property
    def token(self) -> Optional[str]:
        return self.config.resolve_token()

    def gist_client(self) -> GistClient:
        return GistClient(
            token=self.token,
            api_url=self.config.api_url,
            timeout=self.config.timeout,
        )

    def sync(self, confirm: Optional[Confirm] = None) -> ProfileSync:
        """A sync engine for this profile root."""
        return ProfileSync(self.home, self.config, self.gist_client(), confirm=confirm)


def load_context(home: Optional[Path] = None) -> ProfileContext:
    """Build the context for a profile root.

    Args:
        home: Override profile root. Defaults to $PROFILEKIT_HOME.

    Returns:
        ProfileContext: Ready to use.
    """
    home_path = (home or Path(PROFILE_HOME)).expanduser()
    config = load_config(home_path)
    machine_id = detect_machine_id(config.machine_id)
    logger.debug("Profile root %s, machine %s", home_path, machine_id)
    return ProfileContext(home_path, config, machine_id)
