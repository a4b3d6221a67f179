"""
Sync data models -- file entries and operation reports.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class Classification(str, Enum):
    """Which remote store a file belongs to."""

    PUBLIC = "public"
    PRIVATE = "private"


class SyncFileEntry(BaseModel):
    """A discovered local file and where it syncs to."""

    logical_name: str
    absolute_path: Path
    classification: Classification


class StoreReport(BaseModel):
    """Outcome of pushing one partition to one store."""

    store: Classification
    gist_id: Optional[str] = None
    uploaded: list[str] = Field(default_factory=list)
    deleted: list[str] = Field(default_factory=list)
    deletions_declined: list[str] = Field(default_factory=list)
    skipped: bool = False
    reason: Optional[str] = None


class PushReport(BaseModel):
    """Result of a push across both stores."""

    stores: list[StoreReport] = Field(default_factory=list)

    def for_store(self, store: Classification) -> Optional[StoreReport]:
        for report in self.stores:
            if report.store == store:
                return report
        return None


class PullReport(BaseModel):
    """Result of a pull.

    Attributes:
        backup_dir: Where the pre-pull backup was written.
        written: Local paths overwritten from the remote stores.
        skipped: Logical names that were refused (unsafe paths).
        private_warning: Why the private store was not pulled, if it wasn't.
    """

    backup_dir: Optional[Path] = None
    written: list[Path] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    private_warning: Optional[str] = None
