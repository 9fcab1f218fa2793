"""Change detection for push.

This module provides:
- detect_changes: classify local files as create or update against a manifest

Detection is a pure function of the directory contents and the manifest:
no network access, no writes. Running it twice on an unchanged directory
yields identical records. Files deleted locally produce no record at all;
push never deletes remote resources.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from solidcli.client.sync.frontmatter import parse_kb_markdown
from solidcli.client.sync.manifest import Manifest
from solidcli.client.sync.types import (
    SETTINGS_FILE_NAME,
    ChangeRecord,
    ChangeSet,
    CorruptLocalFileError,
)
from solidcli.core.types import ALL_KINDS, ChangeAction, ResourceKind

logger = logging.getLogger(__name__)


def _read_json_object(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        raise CorruptLocalFileError(path, str(e)) from e
    except json.JSONDecodeError as e:
        raise CorruptLocalFileError(path, f"invalid JSON ({e})") from e
    if not isinstance(data, dict):
        raise CorruptLocalFileError(path, "expected a JSON object")
    return data


def _read_kb(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise CorruptLocalFileError(path, str(e)) from e
    doc = parse_kb_markdown(text)
    data: dict[str, Any] = doc.to_fields()
    if doc.id is not None:
        data["frontmatter_id"] = doc.id
    return data


def _list_files(directory: Path, extension: str) -> list[Path]:
    """Regular files directly inside directory with the extension, by name."""
    if not directory.is_dir():
        return []
    return sorted(
        (p for p in directory.iterdir() if p.is_file() and p.suffix == extension),
        key=lambda p: p.name,
    )


def _scan_kind(
    directory: Path, manifest: Manifest, kind: ResourceKind
) -> list[ChangeRecord]:
    mapping = manifest.mapping(kind)
    records = []

    for path in _list_files(directory / kind.value, kind.extension):
        data = _read_kb(path) if kind is ResourceKind.KB else _read_json_object(path)
        entry = mapping.get(path.name)

        if entry is None:
            records.append(ChangeRecord(path.name, kind, ChangeAction.CREATE, data))
            continue

        if kind is ResourceKind.KB:
            # The manifest id is authoritative; the frontmatter id is display-only
            stale = data.pop("frontmatter_id", None)
            if stale is not None and stale != entry.id:
                logger.debug(
                    f"kb/{path.name}: frontmatter id {stale} ignored, "
                    f"manifest id {entry.id} used"
                )
            data["id"] = entry.id
        records.append(ChangeRecord(path.name, kind, ChangeAction.UPDATE, data))

    return records


def _scan_settings(directory: Path) -> ChangeRecord | None:
    path = directory / SETTINGS_FILE_NAME
    if not path.is_file():
        return None
    settings = _read_json_object(path).get("website_settings")
    if not isinstance(settings, dict) or not settings:
        return None
    return ChangeRecord(SETTINGS_FILE_NAME, None, ChangeAction.UPDATE, settings)


def detect_changes(
    directory: Path,
    manifest: Manifest,
    kinds: Iterable[ResourceKind] = ALL_KINDS,
    include_settings: bool = True,
) -> ChangeSet:
    """Detect the change records a push would apply.

    A file is an update iff its basename is a key of its kind's manifest
    mapping, otherwise a create. KB update records carry the manifest id in
    ``data["id"]``.

    Args:
        directory: Project root.
        manifest: The project's manifest (not modified).
        kinds: Resource kinds to scan, in output order.
        include_settings: Whether to look at solid.config.json.

    Returns:
        ChangeSet with records for each kind, then settings.

    Raises:
        CorruptLocalFileError: If any scanned file cannot be parsed.
    """
    directory = Path(directory)
    records: list[ChangeRecord] = []
    for kind in kinds:
        records.extend(_scan_kind(directory, manifest, kind))

    if include_settings:
        settings = _scan_settings(directory)
        if settings is not None:
            records.append(settings)

    changes = ChangeSet(records=records)
    logger.info(
        f"Detected {changes.creates} creates, {changes.updates} updates, "
        f"settings changed: {changes.settings_changed}"
    )
    return changes
