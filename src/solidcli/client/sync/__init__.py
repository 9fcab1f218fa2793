"""Pull/push synchronization between a project directory and the API.

Architecture:
    pull: PullMaterializer → remote lists → local files + fresh Manifest
    push: load_manifest → verify_ownership → detect_changes → PushDispatcher

Components:
- **Manifest**: per-directory file → remote id mappings (.solid/manifest.json)
- **detect_changes**: classifies local files as create or update
- **PullMaterializer**: writes remote state to disk and rebuilds the manifest
- **PushDispatcher**: applies change records, recording new ids

All public symbols are re-exported here.
"""

from solidcli.client.sync.frontmatter import (
    KbDocument,
    parse_kb_markdown,
    render_kb_markdown,
)
from solidcli.client.sync.manifest import (
    KbEntryRef,
    Manifest,
    PageEntry,
    ProductEntry,
    ServiceEntry,
    load_manifest,
    manifest_path,
    save_manifest,
    verify_ownership,
)
from solidcli.client.sync.naming import derive_filename, safe_filename, slugify
from solidcli.client.sync.pull import PullMaterializer
from solidcli.client.sync.push import PushDispatcher
from solidcli.client.sync.scanner import detect_changes
from solidcli.client.sync.types import (
    SETTINGS_FILE_NAME,
    ChangeRecord,
    ChangeSet,
    CorruptLocalFileError,
    CorruptManifestError,
    KindReport,
    KindStatus,
    ManifestNotFoundError,
    PullResult,
    PushResult,
    RecordFailure,
    SyncError,
    TenantMismatchError,
)

__all__ = [
    # Errors
    "CorruptLocalFileError",
    "CorruptManifestError",
    "ManifestNotFoundError",
    "SyncError",
    "TenantMismatchError",
    # Manifest store
    "KbEntryRef",
    "Manifest",
    "PageEntry",
    "ProductEntry",
    "ServiceEntry",
    "load_manifest",
    "manifest_path",
    "save_manifest",
    "verify_ownership",
    # Change detection
    "SETTINGS_FILE_NAME",
    "ChangeRecord",
    "ChangeSet",
    "detect_changes",
    # Pull / push
    "KindReport",
    "KindStatus",
    "PullMaterializer",
    "PullResult",
    "PushDispatcher",
    "PushResult",
    "RecordFailure",
    # Framing
    "KbDocument",
    "derive_filename",
    "parse_kb_markdown",
    "render_kb_markdown",
    "safe_filename",
    "slugify",
]
