"""Shared test fixtures for profilekit."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import pytest

from profilekit.errors import RemoteError, RemoteUnreachable

ENV_VARS = (
    "PROFILEKIT_HOME",
    "PROFILEKIT_MACHINE",
    "PROFILEKIT_PUBLIC_GIST",
    "PROFILEKIT_PRIVATE_GIST",
    "PROFILEKIT_GIST_TOKEN",
    "GITHUB_TOKEN",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's own profilekit settings out of the tests."""
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def fake_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the user's home directory at a temporary directory."""
    home = tmp_path.resolve() / "user"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    return home


@pytest.fixture
def profile_home(fake_home: Path) -> Path:
    """Provide an empty profile root inside the fake home."""
    root = fake_home / ".config" / "powershell"
    root.mkdir(parents=True)
    return root


@pytest.fixture
def populated_profile(profile_home: Path) -> Path:
    """Provide a profile root with one file in every discovered location."""
    (profile_home / "Microsoft.PowerShell_profile.ps1").write_text("Import-Module config\n")
    (profile_home / "bookmarks.json").write_text('{"global": {}, "local": {}}\n')
    (profile_home / ".ignored-dependencies.json").write_text('{"fnm": true}\n')
    (profile_home / "profilekit.yaml").write_text("public_gist_id: pub\n")
    (profile_home / ".DS_Store").write_text("junk")

    (profile_home / "modules").mkdir()
    (profile_home / "modules" / "config.ps1").write_text("$Config = @{}\n")

    private = profile_home / "private-modules" / "powershell" / "modules"
    private.mkdir(parents=True)
    (private / "x.ps1").write_text("$Secret = 'x'\n")

    (profile_home / "scripts").mkdir()
    (profile_home / "scripts" / "y.ps1").write_text("Write-Host y\n")

    return profile_home


class FakeGistClient:
    """In-memory stand-in for GistClient.

    Gists are plain ``{name: content}`` dicts; every PATCH is recorded
    in ``updates`` and applied the way the real API applies it.
    """

    def __init__(self, gists: Optional[dict] = None, token: Optional[str] = "token"):
        self.gists: dict[str, dict[str, str]] = gists or {}
        self.token = token
        self.updates: list[tuple[str, dict]] = []
        self.unreachable: set[str] = set()
        self.calls: list[tuple[str, str]] = []

    @property
    def has_token(self) -> bool:
        return bool(self.token)

    def get_files(self, gist_id: str) -> dict[str, str]:
        self.calls.append(("GET", gist_id))
        if gist_id in self.unreachable:
            raise RemoteUnreachable(f"GET /gists/{gist_id}: connection refused")
        if gist_id not in self.gists:
            raise RemoteError(f"GET /gists/{gist_id}: 404 Not Found", status_code=404)
        return dict(self.gists[gist_id])

    def list_files(self, gist_id: str) -> set[str]:
        return set(self.get_files(gist_id))

    def update_files(self, gist_id: str, files: dict) -> None:
        self.calls.append(("PATCH", gist_id))
        if gist_id in self.unreachable:
            raise RemoteUnreachable(f"PATCH /gists/{gist_id}: connection refused")
        self.updates.append((gist_id, files))
        gist = self.gists.setdefault(gist_id, {})
        for name, value in files.items():
            if value is None:
                gist.pop(name, None)
            else:
                gist[name] = value["content"]


@pytest.fixture
def fake_client() -> FakeGistClient:
    """A fake gist client with an empty public and private gist."""
    return FakeGistClient(gists={"pub": {}, "priv": {}})
