"""Per-directory manifest of local file to remote resource mappings.

This module provides:
- Manifest: owning company plus one mapping per resource kind
- PageEntry, KbEntryRef, ServiceEntry, ProductEntry: mapping values
- load_manifest / save_manifest: JSON persistence under .solid/
- verify_ownership: tenant check before any mutation

The on-disk format uses snake_case keys:

    {
      "company_id": 12, "company_name": "Acme", "pulled_at": "...",
      "api_url": "https://api.solidnumber.com",
      "pages": {"about.json": {"id": 1, "slug": "about", "updated_at": "..."}},
      "kb": {"welcome.md": {"id": 7, "title": "Welcome"}},
      "services": {...}, "products": {...}
    }

There is no inter-process locking: running pull and push against the same
directory concurrently is unsafe.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from solidcli.client.sync.types import (
    CorruptManifestError,
    ManifestNotFoundError,
    TenantMismatchError,
)
from solidcli.core.types import ResourceKind

logger = logging.getLogger(__name__)

MANIFEST_DIR = ".solid"
MANIFEST_FILE = "manifest.json"


def manifest_path(directory: Path) -> Path:
    """Location of the manifest inside a project directory."""
    return Path(directory) / MANIFEST_DIR / MANIFEST_FILE


@dataclass
class PageEntry:
    id: int
    slug: str = ""
    updated_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "slug": self.slug, "updated_at": self.updated_at}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PageEntry:
        return cls(
            id=int(data["id"]),
            slug=data.get("slug") or "",
            updated_at=data.get("updated_at"),
        )


@dataclass
class KbEntryRef:
    id: int
    title: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "title": self.title}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> KbEntryRef:
        return cls(id=int(data["id"]), title=data.get("title") or "")


@dataclass
class ServiceEntry:
    id: int
    slug: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "slug": self.slug}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ServiceEntry:
        return cls(id=int(data["id"]), slug=data.get("slug") or "")


@dataclass
class ProductEntry:
    id: int
    name: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProductEntry:
        return cls(id=int(data["id"]), name=data.get("name") or "")


ENTRY_TYPES: dict[ResourceKind, Any] = {
    ResourceKind.PAGES: PageEntry,
    ResourceKind.KB: KbEntryRef,
    ResourceKind.SERVICES: ServiceEntry,
    ResourceKind.PRODUCTS: ProductEntry,
}


@dataclass
class Manifest:
    """File-to-resource mappings for one project directory.

    Attributes:
        company_id: Owning tenant, set at first pull.
        company_name: Display name, informational only.
        pulled_at: ISO timestamp of the last successful pull or push.
        api_url: API base the manifest was created against.
        pages, kb, services, products: filename -> entry, one map per kind.
    """

    company_id: int
    company_name: str = ""
    pulled_at: str = ""
    api_url: str = ""
    pages: dict[str, PageEntry] = field(default_factory=dict)
    kb: dict[str, KbEntryRef] = field(default_factory=dict)
    services: dict[str, ServiceEntry] = field(default_factory=dict)
    products: dict[str, ProductEntry] = field(default_factory=dict)

    def mapping(self, kind: ResourceKind) -> dict[str, Any]:
        """The filename mapping for a resource kind."""
        return getattr(self, kind.value)

    def touch(self, now: datetime | None = None) -> None:
        """Stamp pulled_at with the given (or current) time."""
        self.pulled_at = (now or datetime.now(UTC)).isoformat()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "company_id": self.company_id,
            "company_name": self.company_name,
            "pulled_at": self.pulled_at,
            "api_url": self.api_url,
        }
        for kind in ResourceKind:
            data[kind.value] = {
                name: entry.to_dict() for name, entry in self.mapping(kind).items()
            }
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Manifest:
        """Build a manifest from its JSON form.

        Raises:
            KeyError, TypeError, ValueError: If the document has the wrong shape.
        """
        manifest = cls(
            company_id=int(data["company_id"]),
            company_name=data.get("company_name") or "",
            pulled_at=data.get("pulled_at") or "",
            api_url=data.get("api_url") or "",
        )
        for kind, entry_type in ENTRY_TYPES.items():
            raw = data.get(kind.value) or {}
            if not isinstance(raw, dict):
                raise TypeError(f"'{kind.value}' must be an object")
            setattr(
                manifest,
                kind.value,
                {name: entry_type.from_dict(entry) for name, entry in raw.items()},
            )
        return manifest


def load_manifest(directory: Path) -> Manifest:
    """Load the manifest of a project directory.

    Args:
        directory: Project root.

    Returns:
        The parsed manifest.

    Raises:
        ManifestNotFoundError: If the directory was never pulled.
        CorruptManifestError: If the file exists but cannot be parsed.
    """
    path = manifest_path(directory)
    if not path.exists():
        raise ManifestNotFoundError(Path(directory))

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise CorruptManifestError(f"Cannot read {path}: {e}") from e
    if not isinstance(data, dict):
        raise CorruptManifestError(f"Cannot read {path}: expected a JSON object")

    try:
        return Manifest.from_dict(data)
    except (KeyError, TypeError, ValueError) as e:
        raise CorruptManifestError(f"Invalid manifest {path}: {e!r}") from e


def save_manifest(directory: Path, manifest: Manifest) -> Path:
    """Write the manifest, replacing any previous one atomically.

    Args:
        directory: Project root.
        manifest: Manifest to persist.

    Returns:
        Path of the written manifest.
    """
    path = manifest_path(directory)
    path.parent.mkdir(parents=True, exist_ok=True)

    temp_path = path.with_suffix(".tmp")
    temp_path.write_text(
        json.dumps(manifest.to_dict(), indent=2) + "\n", encoding="utf-8"
    )
    os.replace(temp_path, path)
    logger.debug(f"Saved manifest {path}")
    return path


def verify_ownership(manifest: Manifest, expected_company_id: int) -> None:
    """Check that a manifest belongs to the current tenant.

    Raises:
        TenantMismatchError: If the manifest's company differs.
    """
    if manifest.company_id != expected_company_id:
        raise TenantMismatchError(
            manifest.company_id, expected_company_id, manifest.company_name
        )
