"""Error taxonomy shared by the bookmark store and the sync engine.

Core modules raise these; the CLI catches ``ProfileError`` and reports
it as a warning. Nothing here should take the hosting shell down.
"""

from __future__ import annotations

from typing import Optional


class ProfileError(Exception):
    """Base class for every recoverable profilekit error."""


class NotFound(ProfileError):
    """Raised when a bookmark is absent from the requested scope."""


class PathNotFound(NotFound):
    """Raised when a literal path does not resolve to anything on disk."""


class AuthMissing(ProfileError):
    """Raised when an operation needs a credential and none is available."""


class NotConfigured(ProfileError):
    """Raised when a required remote store identifier is not configured."""


class RemoteUnreachable(ProfileError):
    """Raised on connection failures and timeouts."""


class RemoteError(ProfileError):
    """Raised when the remote store answers with a non-2xx status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class MalformedRemote(ProfileError):
    """Raised when a remote document lacks an expected structural key."""


class LocalIOError(ProfileError):
    """Raised when reading, writing or copying local files fails."""
