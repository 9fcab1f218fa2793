"""Push: apply detected local changes to the remote store.

This module provides:
- PushDispatcher: sends change records in a fixed order (pages, KB,
  settings), isolates per-record failures, then saves the manifest once

Push never deletes remote resources. Newly created resources are added to
the manifest, but the local file is not rewritten with the new id; the next
pull stamps it. The manifest is written only after every record has been
attempted, so an interrupted push can create duplicates on retry.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from solidcli.client.api import APIError
from solidcli.client.sync.manifest import KbEntryRef, Manifest, PageEntry, save_manifest
from solidcli.client.sync.types import (
    ChangeRecord,
    ChangeSet,
    PushResult,
    RecordFailure,
)
from solidcli.core.types import ChangeAction, ResourceKind

if TYPE_CHECKING:
    from solidcli.client.api import HTTPClient

logger = logging.getLogger(__name__)

# Page fields sent on update when truthy
PAGE_TRUTHY_FIELDS = ("title", "slug", "layout_json")
# Page fields sent on update whenever present, even if null or false
PAGE_PRESENT_FIELDS = ("meta_title", "meta_description", "is_published", "is_landing_page")

DEFAULT_PAGE_TYPE = "website"


def _utcnow() -> datetime:
    return datetime.now(UTC)


def page_create_fields(record: ChangeRecord) -> dict[str, Any]:
    """Fields for creating a page from a local file."""
    data = record.data
    stem = Path(record.file).stem
    fields: dict[str, Any] = {
        "title": data.get("title") or stem,
        "slug": data.get("slug") or stem,
        "page_type": data.get("page_type") or DEFAULT_PAGE_TYPE,
        "layout_json": data.get("layout_json") or {"sections": []},
    }
    for key in ("meta_title", "meta_description"):
        if data.get(key):
            fields[key] = data[key]
    return fields


def page_update_fields(record: ChangeRecord) -> dict[str, Any]:
    """Sparse patch for an existing page."""
    data = record.data
    fields = {key: data[key] for key in PAGE_TRUTHY_FIELDS if data.get(key)}
    fields.update({key: data[key] for key in PAGE_PRESENT_FIELDS if key in data})
    return fields


def kb_fields(record: ChangeRecord) -> dict[str, Any]:
    return {
        "title": record.data.get("title"),
        "content": record.data.get("content"),
        "category": record.data.get("category"),
    }


class PushDispatcher:
    """Applies a ChangeSet against the API."""

    def __init__(
        self,
        client: HTTPClient,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            client: API client scoped to the manifest's company.
            clock: Source of timestamps, injectable for tests.
        """
        self._client = client
        self._clock = clock

    def push(
        self, directory: Path, manifest: Manifest, changes: ChangeSet
    ) -> PushResult:
        """Send every change record, then persist the manifest.

        Ownership must already have been verified by the caller. A record
        whose remote call fails is recorded in the result and the
        remaining records still run.

        Args:
            directory: Project root holding the manifest.
            manifest: Manifest to extend with created ids (mutated).
            changes: Records to apply; they are sent pages first, then KB,
                then settings, whatever order they arrive in. Records of
                pull-only kinds (services, products) are ignored.

        Returns:
            PushResult with counts and per-record failures.
        """
        result = PushResult()
        ordered = [
            *changes.of_kind(ResourceKind.PAGES),
            *changes.of_kind(ResourceKind.KB),
        ]
        if changes.settings is not None:
            ordered.append(changes.settings)

        for record in ordered:
            try:
                self._dispatch(record, manifest)
            except APIError as e:
                logger.error(f"Failed: {record.display_path}: {e}")
                result.failures.append(RecordFailure(record, str(e), e.status_code))
                continue

            result.pushed += 1
            if record.action is ChangeAction.CREATE:
                result.created.append(record)

        manifest.touch(self._clock())
        save_manifest(directory, manifest)

        logger.info(f"Push finished: {result.pushed} pushed, {result.errors} failed")
        return result

    def _dispatch(self, record: ChangeRecord, manifest: Manifest) -> None:
        if record.is_settings:
            self._client.update_company_settings(record.data)
        elif record.kind is ResourceKind.PAGES:
            self._push_page(record, manifest)
        else:
            self._push_kb(record, manifest)

    def _push_page(self, record: ChangeRecord, manifest: Manifest) -> None:
        if record.action is ChangeAction.UPDATE:
            page_id = manifest.pages[record.file].id
            self._client.update_page(page_id, page_update_fields(record))
            logger.debug(f"Updated page {page_id} from {record.file}")
            return

        fields = page_create_fields(record)
        created = self._client.create_page(fields)
        manifest.pages[record.file] = PageEntry(
            id=created.id,
            slug=created.slug or fields["slug"],
            updated_at=self._clock().isoformat(),
        )
        logger.debug(f"Created page {created.id} from {record.file}")

    def _push_kb(self, record: ChangeRecord, manifest: Manifest) -> None:
        fields = kb_fields(record)
        if record.action is ChangeAction.UPDATE:
            self._client.update_kb(record.data["id"], fields)
            return

        created = self._client.create_kb(fields)
        manifest.kb[record.file] = KbEntryRef(id=created.id, title=fields["title"] or "")
        logger.debug(f"Created KB entry {created.id} from {record.file}")
