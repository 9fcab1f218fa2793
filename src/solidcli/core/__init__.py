"""Core module - Shared configuration and resource types."""

from solidcli.core.config import DEFAULT_API_URL, ServerConfig
from solidcli.core.types import (
    ALL_KINDS,
    PUSHABLE_KINDS,
    ChangeAction,
    Environment,
    ResourceKind,
)

__all__ = [
    # Config
    "DEFAULT_API_URL",
    "ServerConfig",
    # Types
    "ALL_KINDS",
    "PUSHABLE_KINDS",
    "ChangeAction",
    "Environment",
    "ResourceKind",
]
