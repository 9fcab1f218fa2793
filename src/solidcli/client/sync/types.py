"""Shared types and dataclasses for pull/push operations.

This module provides:
- SyncError and its subclasses: precondition and local-data failures
- ChangeRecord, ChangeSet: output of change detection
- RecordFailure, PushResult: outcome of a push
- KindStatus, KindReport, PullResult: outcome of a pull
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from solidcli.core.types import ChangeAction, ResourceKind

SETTINGS_FILE_NAME = "solid.config.json"


class SyncError(Exception):
    """Base exception for sync errors."""


class ManifestNotFoundError(SyncError):
    """The directory has no manifest (never pulled)."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory
        super().__init__(
            f"No .solid/manifest.json found in {directory}. "
            "Run `solid pull` first to download your project files."
        )


class CorruptManifestError(SyncError):
    """The manifest exists but cannot be parsed."""


class CorruptLocalFileError(SyncError):
    """A local resource file cannot be parsed."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot parse {path}: {reason}")


class TenantMismatchError(SyncError):
    """The manifest belongs to a different company than the session.

    Attributes:
        manifest_company_id: Company recorded in the manifest.
        session_company_id: Company the user is logged in as.
        manifest_company_name: Display name recorded in the manifest.
    """

    def __init__(
        self,
        manifest_company_id: int,
        session_company_id: int,
        manifest_company_name: str = "",
    ) -> None:
        self.manifest_company_id = manifest_company_id
        self.session_company_id = session_company_id
        self.manifest_company_name = manifest_company_name
        name = f" ({manifest_company_name})" if manifest_company_name else ""
        super().__init__(
            f"This directory belongs to company {manifest_company_id}{name}. "
            f"You are logged in as company {session_company_id}."
        )


@dataclass(frozen=True)
class ChangeRecord:
    """A local file slated for a remote write.

    Attributes:
        file: Basename of the local file (the manifest key).
        kind: Resource kind, or None for the settings record.
        action: CREATE or UPDATE.
        data: Parsed file contents to send.
    """

    file: str
    kind: ResourceKind | None
    action: ChangeAction
    data: dict[str, Any]

    @property
    def is_settings(self) -> bool:
        return self.kind is None

    @property
    def display_path(self) -> str:
        """Path relative to the project root, for output."""
        if self.kind is None:
            return self.file
        return f"{self.kind.value}/{self.file}"


@dataclass
class ChangeSet:
    """All change records detected for one push."""

    records: list[ChangeRecord] = field(default_factory=list)

    def of_kind(self, kind: ResourceKind) -> list[ChangeRecord]:
        return [r for r in self.records if r.kind is kind]

    @property
    def settings(self) -> ChangeRecord | None:
        """The settings record, if the settings changed."""
        return next((r for r in self.records if r.is_settings), None)

    @property
    def creates(self) -> int:
        return sum(1 for r in self.records if r.action is ChangeAction.CREATE)

    @property
    def updates(self) -> int:
        return sum(
            1
            for r in self.records
            if r.action is ChangeAction.UPDATE and not r.is_settings
        )

    @property
    def settings_changed(self) -> bool:
        return self.settings is not None

    @property
    def total(self) -> int:
        return len(self.records)

    def for_scope(
        self, kinds: Iterable[ResourceKind], include_settings: bool
    ) -> ChangeSet:
        """Restrict to some kinds, keeping record order."""
        wanted = set(kinds)
        return ChangeSet(
            records=[
                r
                for r in self.records
                if (r.is_settings and include_settings) or r.kind in wanted
            ]
        )


@dataclass
class RecordFailure:
    """A change record whose remote call failed."""

    record: ChangeRecord
    message: str
    status_code: int | None = None


@dataclass
class PushResult:
    """Outcome of a push."""

    pushed: int = 0
    failures: list[RecordFailure] = field(default_factory=list)
    created: list[ChangeRecord] = field(default_factory=list)

    @property
    def errors(self) -> int:
        return len(self.failures)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def total_failure(self) -> bool:
        """Every attempted record failed."""
        return bool(self.failures) and self.pushed == 0


class KindStatus(str, Enum):
    """Outcome of pulling one resource kind."""

    FETCHED = "fetched"  # List fetched (possibly confirmed empty)
    FAILED = "failed"  # List fetch failed; local files and mappings untouched
    SKIPPED = "skipped"  # Not requested in this pull


@dataclass
class KindReport:
    """Per-kind pull outcome."""

    kind: ResourceKind
    status: KindStatus
    written: int = 0
    skipped: int = 0
    error: str | None = None

    @property
    def is_empty(self) -> bool:
        """The server confirmed there is nothing of this kind."""
        return self.status is KindStatus.FETCHED and self.written == 0 and self.skipped == 0


@dataclass
class PullResult:
    """Outcome of a pull."""

    company_id: int
    company_name: str
    directory: Path
    reports: list[KindReport] = field(default_factory=list)
    # Set only when an existing manifest was replaced under force
    unmapped_files: list[str] = field(default_factory=list)

    @property
    def total_files(self) -> int:
        """Files written, counting the settings snapshot."""
        return 1 + sum(r.written for r in self.reports)

    @property
    def skipped(self) -> int:
        return sum(r.skipped for r in self.reports)

    @property
    def failed_kinds(self) -> list[ResourceKind]:
        return [r.kind for r in self.reports if r.status is KindStatus.FAILED]
