"""Secret storage for API tokens.

This module provides:
- CredentialStore: OS keyring storage for access and refresh tokens
- A 0600 credentials file fallback when no keyring backend is available
  (headless servers, CI containers)
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
from pathlib import Path

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

logger = logging.getLogger(__name__)

KEYRING_SERVICE = "solid-cli"
CREDENTIALS_FILE_NAME = "credentials.json"


class CredentialStore:
    """Stores named secrets in the OS keyring.

    Secrets that cannot be written to the keyring are kept in
    ``<config_dir>/credentials.json`` instead, readable only by the owner.
    """

    def __init__(self, config_dir: Path, service: str = KEYRING_SERVICE) -> None:
        """Initialize the store.

        Args:
            config_dir: Directory holding the fallback credentials file.
            service: Keyring service name.
        """
        self._config_dir = Path(config_dir)
        self._service = service

    @property
    def fallback_file(self) -> Path:
        return self._config_dir / CREDENTIALS_FILE_NAME

    def get(self, name: str) -> str | None:
        """Get a secret.

        Args:
            name: Secret name (e.g. "access_token").

        Returns:
            The secret, or None if it is not stored anywhere.
        """
        try:
            value = keyring.get_password(self._service, name)
        except KeyringError as e:
            logger.debug(f"Keyring unavailable for {name}: {e}")
            value = None
        if value is not None:
            return value
        return self._read_fallback().get(name)

    def set(self, name: str, value: str) -> None:
        """Store a secret, falling back to the credentials file.

        Args:
            name: Secret name.
            value: Secret value.
        """
        try:
            keyring.set_password(self._service, name, value)
        except KeyringError as e:
            logger.warning(
                f"OS keyring unavailable ({e}); storing {name} in {self.fallback_file}"
            )
            data = self._read_fallback()
            data[name] = value
            self._write_fallback(data)
            return

        # Drop any copy left in the fallback file by an earlier keyring outage
        data = self._read_fallback()
        if data.pop(name, None) is not None:
            self._write_fallback(data)

    def delete(self, name: str) -> None:
        """Remove a secret from the keyring and the fallback file."""
        with contextlib.suppress(PasswordDeleteError, KeyringError):
            keyring.delete_password(self._service, name)

        data = self._read_fallback()
        if data.pop(name, None) is not None:
            self._write_fallback(data)

    def _read_fallback(self) -> dict[str, str]:
        if not self.fallback_file.exists():
            return {}
        return dict(json.loads(self.fallback_file.read_text()))

    def _write_fallback(self, data: dict[str, str]) -> None:
        if not data:
            self.fallback_file.unlink(missing_ok=True)
            return
        self._config_dir.mkdir(parents=True, exist_ok=True)
        # Owner-only from creation; an older file keeps its mode, so tighten it
        # before any secret is written.
        fd = os.open(self.fallback_file, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        os.chmod(self.fallback_file, 0o600)
        with os.fdopen(fd, "w") as f:
            f.write(json.dumps(data, indent=2))
