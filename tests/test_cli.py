"""Tests for the profilekit command line.

Covers:
- bookmark add/remove/list/machine
- go, open and shell-init navigation
- deps ignore/unignore/list
- sync push/pull/status/backups/configure against a fake gist client
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml
from click.testing import CliRunner

from conftest import FakeGistClient
from profilekit.cli import main


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def machine(monkeypatch) -> str:
    monkeypatch.setenv("PROFILEKIT_MACHINE", "testbox")
    return "testbox"


@pytest.fixture
def project(fake_home: Path) -> Path:
    d = fake_home / "code" / "proj"
    d.mkdir(parents=True)
    return d


def _invoke(runner: CliRunner, home: Path, *args: str, **kwargs):
    return runner.invoke(main, [*args, "--home", str(home)], **kwargs)


class TestMain:
    def test_version(self, runner: CliRunner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "profilekit" in result.output

    def test_help_lists_groups(self, runner: CliRunner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        for group in ("bookmark", "sync", "deps", "go"):
            assert group in result.output


class TestBookmarkCommands:
    def test_add_and_go(self, runner, profile_home, project, machine):
        result = _invoke(runner, profile_home, "bookmark", "add", "proj", str(project))
        assert result.exit_code == 0, result.output
        assert "local" in result.output

        result = _invoke(runner, profile_home, "go", "proj")
        assert result.exit_code == 0
        assert result.output.strip() == str(project)

    def test_add_global_is_stored_portably(self, runner, profile_home, project):
        result = _invoke(runner, profile_home, "bookmark", "add", "proj", str(project), "--global")
        assert result.exit_code == 0, result.output

        doc = json.loads((profile_home / "bookmarks.json").read_text())
        assert doc["global"] == {"proj": "~/code/proj"}

    def test_list_all_shows_machine(self, runner, profile_home, project, machine):
        _invoke(runner, profile_home, "bookmark", "add", "proj", str(project))

        result = _invoke(runner, profile_home, "bookmark", "list", "--all")

        assert result.exit_code == 0
        assert "proj" in result.output
        assert "testbox" in result.output

    def test_list_empty(self, runner, profile_home):
        result = _invoke(runner, profile_home, "bookmark", "list")
        assert result.exit_code == 0
        assert "No bookmarks" in result.output

    def test_remove_force(self, runner, profile_home, project, machine):
        _invoke(runner, profile_home, "bookmark", "add", "proj", str(project))

        result = _invoke(runner, profile_home, "bookmark", "remove", "proj", "--force")

        assert result.exit_code == 0
        assert "Removed" in result.output
        doc = json.loads((profile_home / "bookmarks.json").read_text())
        assert doc["local"] == {}

    def test_remove_declined(self, runner, profile_home, project):
        _invoke(runner, profile_home, "bookmark", "add", "proj", str(project), "--global")

        result = _invoke(runner, profile_home, "bookmark", "remove", "proj", input="n\n")

        assert "Cancelled" in result.output
        doc = json.loads((profile_home / "bookmarks.json").read_text())
        assert "proj" in doc["global"]

    def test_remove_local_reveals_global(self, runner, profile_home, project, fake_home, machine):
        other = fake_home / "other"
        other.mkdir()
        _invoke(runner, profile_home, "bookmark", "add", "proj", str(other), "--global")
        _invoke(runner, profile_home, "bookmark", "add", "proj", str(project))

        result = _invoke(runner, profile_home, "bookmark", "remove", "proj", "-f")

        assert "now resolves to global" in result.output
        go = _invoke(runner, profile_home, "go", "proj")
        assert go.output.strip() == str(other)

    def test_remove_missing_warns(self, runner, profile_home):
        result = _invoke(runner, profile_home, "bookmark", "remove", "ghost", "--force")
        assert result.exit_code == 1
        assert "Warning" in result.output
        assert "ghost" in result.output

    def test_legacy_migration_notice(self, runner, profile_home):
        (profile_home / "bookmarks.json").write_text(json.dumps({"proj": "/a/b"}))

        first = _invoke(runner, profile_home, "bookmark", "list")
        second = _invoke(runner, profile_home, "bookmark", "list")

        assert "migrated" in first.output
        assert "migrated" not in second.output

    def test_add_over_unreadable_file_reports_copy(self, runner, profile_home, project):
        (profile_home / "bookmarks.json").write_text("{broken")

        result = _invoke(runner, profile_home, "bookmark", "add", "proj", str(project), "--global")

        assert result.exit_code == 0, result.output
        assert "moved to" in result.output
        copies = list(profile_home.glob("bookmarks.json.corrupt-*"))
        assert [c.read_text() for c in copies] == ["{broken"]

    def test_machine(self, runner, profile_home, machine):
        result = _invoke(runner, profile_home, "bookmark", "machine")
        assert result.output.strip() == "testbox"


class TestNavigation:
    def test_go_literal_path(self, runner, profile_home, project):
        result = _invoke(runner, profile_home, "go", str(project))
        assert result.exit_code == 0
        assert result.output.strip() == str(project)

    def test_go_unknown(self, runner, profile_home, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = _invoke(runner, profile_home, "go", "nowhere")
        assert result.exit_code == 1
        assert "Warning" in result.output

    def test_open_launches_file_manager(self, runner, profile_home, project):
        _invoke(runner, profile_home, "bookmark", "add", "proj", str(project), "--global")

        with patch("profilekit.cli.nav.click.launch") as launch:
            result = _invoke(runner, profile_home, "open", "proj")

        assert result.exit_code == 0
        launch.assert_called_once_with(str(project), locate=False)

    def test_shell_init(self, runner):
        result = runner.invoke(main, ["shell-init", "bash"])
        assert result.exit_code == 0
        assert 'profilekit go "$@"' in result.output

    def test_shell_init_powershell(self, runner):
        result = runner.invoke(main, ["shell-init", "powershell"])
        assert "Set-Location" in result.output


class TestDepsCommands:
    def test_ignore_list_unignore(self, runner, profile_home):
        assert _invoke(runner, profile_home, "deps", "ignore", "fnm").exit_code == 0

        listed = _invoke(runner, profile_home, "deps", "list")
        assert "fnm" in listed.output

        result = _invoke(runner, profile_home, "deps", "unignore", "fnm")
        assert "No longer ignoring" in result.output
        assert json.loads((profile_home / ".ignored-dependencies.json").read_text()) == {}

    def test_ignore_twice(self, runner, profile_home):
        _invoke(runner, profile_home, "deps", "ignore", "fnm")
        result = _invoke(runner, profile_home, "deps", "ignore", "fnm")
        assert "already ignored" in result.output


class TestSyncCommands:
    @pytest.fixture
    def configured(self, populated_profile: Path) -> Path:
        (populated_profile / "profilekit.yaml").write_text(
            yaml.dump({"public_gist_id": "pub", "private_gist_id": "priv"})
        )
        return populated_profile

    @pytest.fixture
    def client(self):
        client = FakeGistClient(gists={"pub": {}, "priv": {}})
        with patch("profilekit.context.ProfileContext.gist_client", return_value=client):
            yield client

    def test_push(self, runner, configured, client):
        result = _invoke(runner, configured, "sync", "push")

        assert result.exit_code == 0, result.output
        assert "public" in result.output
        assert "profile.ps1" in client.gists["pub"]
        assert "private-modules--powershell--modules--x.ps1" in client.gists["priv"]

    def test_push_prompts_before_deleting(self, runner, configured, client):
        client.gists["pub"]["stale.ps1"] = "old"

        result = _invoke(runner, configured, "sync", "push", input="y\n")

        assert result.exit_code == 0, result.output
        assert "stale.ps1" not in client.gists["pub"]
        assert "deleted" in result.output

    def test_push_prompt_declined(self, runner, configured, client):
        client.gists["pub"]["stale.ps1"] = "old"

        result = _invoke(runner, configured, "sync", "push", input="n\n")

        assert "stale.ps1" in client.gists["pub"]
        assert "kept remote-only" in result.output

    def test_push_without_token_warns(self, runner, configured):
        result = _invoke(runner, configured, "sync", "push")
        assert result.exit_code == 1
        assert "Warning" in result.output
        assert "token" in result.output

    def test_pull(self, runner, configured, client):
        client.gists["pub"] = {"profile.ps1": "remote entry"}

        result = _invoke(runner, configured, "sync", "pull")

        assert result.exit_code == 0, result.output
        assert "1 file(s) written" in result.output
        assert (configured / "Microsoft.PowerShell_profile.ps1").read_text() == "remote entry"

        backups = _invoke(runner, configured, "sync", "backups")
        assert "1" in backups.output
        assert "backup(s)" in backups.output

    def test_pull_malformed_remote(self, runner, configured, client):
        result = _invoke(runner, configured, "sync", "pull")
        assert result.exit_code == 1
        assert "profile.ps1" in result.output

    def test_status(self, runner, configured, client):
        result = _invoke(runner, configured, "sync", "status")
        assert result.exit_code == 0
        assert "profile.ps1" in result.output
        assert "private" in result.output

    def test_status_shows_gist_ids_literally(self, runner, configured, client):
        (configured / "profilekit.yaml").write_text(yaml.dump({"public_gist_id": "pub[red]x"}))

        result = _invoke(runner, configured, "sync", "status")

        assert result.exit_code == 0, result.output
        assert "pub[red]x" in result.output

    def test_configure(self, runner, profile_home):
        result = _invoke(runner, profile_home, "sync", "configure", "--public", "abc")

        assert result.exit_code == 0
        data = yaml.safe_load((profile_home / "profilekit.yaml").read_text())
        assert data["public_gist_id"] == "abc"

    def test_configure_does_not_persist_env(self, runner, profile_home, monkeypatch):
        monkeypatch.setenv("PROFILEKIT_PRIVATE_GIST", "from-env")
        _invoke(runner, profile_home, "sync", "configure", "--public", "abc")
        data = yaml.safe_load((profile_home / "profilekit.yaml").read_text())
        assert "private_gist_id" not in data
