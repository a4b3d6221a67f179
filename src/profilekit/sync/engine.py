"""
Sync Engine -- pushes profile files to gists and pulls them back.

    profilekit sync push  ->  discover -> partition -> reconcile deletions -> PATCH
    profilekit sync pull  ->  backup -> GET -> write files under the profile root

The local profile is the source of truth for push; the gists are the
source of truth for pull. Deleting remote files needs either ``force``
or an affirmative answer from the injected ``confirm`` callable, asked
once per store.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Optional

from ..config import ProfileConfig
from ..errors import AuthMissing, LocalIOError, MalformedRemote, NotConfigured, ProfileError
from .backup import create_backup
from .discovery import (
    BACKUP_DIR,
    ENTRY_LOGICAL_NAME,
    EXCLUDED_ROOT_FILES,
    classify,
    discover_entries,
    discover_files,
    logical_to_path,
)
from .gist import GistClient
from .models import Classification, PullReport, PushReport, StoreReport

logger = logging.getLogger("profilekit.sync.engine")

Confirm = Callable[[str], bool]


def _decline(question: str) -> bool:
    return False


class ProfileSync:
    """Orchestrates push and pull between a profile root and two gists."""

    def __init__(
        self,
        home: Path,
        config: ProfileConfig,
        client: GistClient,
        confirm: Optional[Confirm] = None,
    ):
        """Initialize the sync engine.

        Args:
            home: Profile root directory.
            config: Profile configuration (gist ids, entry file name).
            client: Gist API client.
            confirm: Asked before remote deletions when not forced.
                Defaults to always declining.
        """
        self.home = home
        self.config = config
        self.client = client
        self.confirm = confirm or _decline

    def _read(self, path: Path) -> str:
        try:
            return path.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read %s, sending empty content: %s", path, exc)
            return ""

    def _partition(self) -> dict[Classification, dict[str, dict[str, str]]]:
        partitions: dict[Classification, dict[str, dict[str, str]]] = {
            Classification.PUBLIC: {},
            Classification.PRIVATE: {},
        }
        for name, path in discover_files(self.home, self.config.entry_file).items():
            partitions[classify(name)][name] = {"content": self._read(path)}
        return partitions

    def _push_store(
        self,
        store: Classification,
        gist_id: str,
        local: dict[str, dict[str, str]],
        force: bool,
    ) -> StoreReport:
        remote_names = self.client.list_files(gist_id)
        to_delete = sorted(remote_names - set(local))

        report = StoreReport(store=store, gist_id=gist_id, uploaded=list(local))
        payload: dict[str, Any] = dict(local)

        if to_delete:
            question = (
                f"{len(to_delete)} file(s) exist in the {store.value} gist but not locally: "
                f"{', '.join(to_delete)}. Delete them from the gist?"
            )
            if force or self.confirm(question):
                for name in to_delete:
                    payload[name] = None
                report.deleted = to_delete
            else:
                logger.info("Keeping %d remote-only file(s) in %s gist", len(to_delete), store.value)
                report.deletions_declined = to_delete

        self.client.update_files(gist_id, payload)
        logger.info(
            "Pushed %d file(s) to %s gist %s, deleted %d",
            len(local), store.value, gist_id, len(report.deleted),
        )
        return report

    def push(self, force: bool = False) -> PushReport:
        """Push discovered profile files to the public and private gists.

        The public partition goes first. A failure raises immediately;
        a store already updated is not rolled back.

        Args:
            force: Delete remote-only files without asking.

        Returns:
            PushReport: What happened per store.

        Raises:
            AuthMissing: If no write token is available.
            NotConfigured: If public files exist but no public gist is set.
        """
        if not self.client.has_token:
            raise AuthMissing(
                f"Pushing needs a gist token in ${self.config.token_env_var}"
            )

        partitions = self._partition()
        report = PushReport()

        public = partitions[Classification.PUBLIC]
        if public:
            if not self.config.public_gist_id:
                raise NotConfigured("No public gist id configured")
            report.stores.append(
                self._push_store(Classification.PUBLIC, self.config.public_gist_id, public, force)
            )

        private = partitions[Classification.PRIVATE]
        if private:
            if not self.config.private_gist_id:
                logger.warning(
                    "Found %d private file(s) but no private gist id is configured; skipping",
                    len(private),
                )
                report.stores.append(StoreReport(
                    store=Classification.PRIVATE,
                    skipped=True,
                    reason="no private gist id configured",
                ))
            else:
                report.stores.append(
                    self._push_store(
                        Classification.PRIVATE, self.config.private_gist_id, private, force,
                    )
                )

        return report

    def _write_files(self, files: dict[str, str], report: PullReport) -> None:
        for name, content in files.items():
            if name in EXCLUDED_ROOT_FILES or name == BACKUP_DIR:
                logger.warning("Not overwriting machine-local file %s", name)
                report.skipped.append(name)
                continue
            try:
                target = logical_to_path(self.home, name, self.config.entry_file)
            except ValueError as exc:
                logger.warning("%s", exc)
                report.skipped.append(name)
                continue

            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_bytes(content.encode("utf-8"))
            except OSError as exc:
                raise LocalIOError(f"Could not write {target}: {exc}") from exc
            report.written.append(target)

    def pull(self) -> PullReport:
        """Back up the profile, then overwrite it from the gists.

        The public gist must contain ``profile.ps1``. Private gist
        problems, including a missing token, only produce a warning.

        Returns:
            PullReport: Backup location and the files written.

        Raises:
            NotConfigured: If no public gist id is configured.
            MalformedRemote: If the public gist lacks ``profile.ps1``.
        """
        if not self.config.public_gist_id:
            raise NotConfigured("No public gist id configured")

        report = PullReport(backup_dir=create_backup(self.home))

        public = self.client.get_files(self.config.public_gist_id)
        if ENTRY_LOGICAL_NAME not in public:
            raise MalformedRemote(
                f"Public gist {self.config.public_gist_id} has no {ENTRY_LOGICAL_NAME}"
            )
        self._write_files(public, report)

        if self.config.private_gist_id:
            if not self.client.has_token:
                report.private_warning = "no gist token available for the private gist"
            else:
                try:
                    private = self.client.get_files(self.config.private_gist_id)
                    self._write_files(private, report)
                except ProfileError as exc:
                    report.private_warning = str(exc)
            if report.private_warning:
                logger.warning("Private gist not pulled: %s", report.private_warning)

        logger.info("Pulled %d file(s); backup at %s", len(report.written), report.backup_dir)
        return report

    def status(self) -> dict[str, Any]:
        """Summarize configuration and what a push would send."""
        entries = discover_entries(self.home, self.config.entry_file)
        return {
            "home": str(self.home),
            "public_gist_id": self.config.public_gist_id,
            "private_gist_id": self.config.private_gist_id,
            "has_token": self.client.has_token,
            "entries": entries,
        }
