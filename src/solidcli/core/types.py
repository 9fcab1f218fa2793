"""Shared types for solidcli.

This module defines the enums describing synchronized resources.
"""

from __future__ import annotations

from enum import Enum


class ResourceKind(str, Enum):
    """Kind of company resource mirrored as local files.

    The value doubles as the local subdirectory name and the manifest
    mapping key.
    """

    PAGES = "pages"
    KB = "kb"
    SERVICES = "services"
    PRODUCTS = "products"

    @property
    def extension(self) -> str:
        """File extension used for this kind's local files."""
        return ".md" if self is ResourceKind.KB else ".json"


class ChangeAction(str, Enum):
    """Remote write a local file maps to on push."""

    CREATE = "create"
    UPDATE = "update"


class Environment(str, Enum):
    """Deployment environment the CLI points at."""

    PRODUCTION = "production"
    SANDBOX = "sandbox"
    DEVELOPMENT = "development"


ALL_KINDS: tuple[ResourceKind, ...] = tuple(ResourceKind)

# Kinds the remote store accepts writes for; services and products are pull-only.
PUSHABLE_KINDS: tuple[ResourceKind, ...] = (ResourceKind.PAGES, ResourceKind.KB)
