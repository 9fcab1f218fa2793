"""Tests for token storage in the OS keyring with file fallback."""

import json
import stat
from pathlib import Path
from unittest.mock import patch

from keyring.errors import KeyringError, PasswordDeleteError

from solidcli.client.credentials import KEYRING_SERVICE, CredentialStore


class TestCredentialStore:
    """Tests for CredentialStore."""

    def test_set_uses_keyring(self, tmp_path: Path) -> None:
        store = CredentialStore(tmp_path)
        with patch("solidcli.client.credentials.keyring") as mock_keyring:
            store.set("access_token", "tok")

        mock_keyring.set_password.assert_called_once_with(
            KEYRING_SERVICE, "access_token", "tok"
        )
        assert not store.fallback_file.exists()

    def test_get_reads_keyring(self, tmp_path: Path) -> None:
        store = CredentialStore(tmp_path)
        with patch("solidcli.client.credentials.keyring") as mock_keyring:
            mock_keyring.get_password.return_value = "tok"
            assert store.get("access_token") == "tok"

    def test_fallback_when_keyring_unavailable(self, tmp_path: Path) -> None:
        """Without a keyring backend the token lands in a 0600 file."""
        store = CredentialStore(tmp_path)
        with patch("solidcli.client.credentials.keyring") as mock_keyring:
            mock_keyring.set_password.side_effect = KeyringError("no backend")
            mock_keyring.get_password.side_effect = KeyringError("no backend")
            store.set("access_token", "tok")
            assert store.get("access_token") == "tok"

        assert json.loads(store.fallback_file.read_text()) == {"access_token": "tok"}
        assert stat.S_IMODE(store.fallback_file.stat().st_mode) == 0o600

    def test_fallback_file_created_owner_only(self, tmp_path: Path) -> None:
        """The file is never world-readable, even before a later chmod."""
        store = CredentialStore(tmp_path)
        with (
            patch("solidcli.client.credentials.keyring") as mock_keyring,
            patch("solidcli.client.credentials.os.chmod"),
        ):
            mock_keyring.set_password.side_effect = KeyringError("no backend")
            store.set("access_token", "tok")

        assert stat.S_IMODE(store.fallback_file.stat().st_mode) == 0o600

    def test_fallback_file_mode_tightened(self, tmp_path: Path) -> None:
        store = CredentialStore(tmp_path)
        store.fallback_file.write_text("{}")
        store.fallback_file.chmod(0o644)
        with patch("solidcli.client.credentials.keyring") as mock_keyring:
            mock_keyring.set_password.side_effect = KeyringError("no backend")
            store.set("access_token", "tok")

        assert stat.S_IMODE(store.fallback_file.stat().st_mode) == 0o600
        assert json.loads(store.fallback_file.read_text()) == {"access_token": "tok"}

    def test_keyring_write_clears_fallback_copy(self, tmp_path: Path) -> None:
        store = CredentialStore(tmp_path)
        store.fallback_file.write_text(json.dumps({"access_token": "old"}))

        with patch("solidcli.client.credentials.keyring"):
            store.set("access_token", "new")

        assert not store.fallback_file.exists()

    def test_get_missing_returns_none(self, tmp_path: Path) -> None:
        store = CredentialStore(tmp_path)
        with patch("solidcli.client.credentials.keyring") as mock_keyring:
            mock_keyring.get_password.return_value = None
            assert store.get("refresh_token") is None

    def test_delete_ignores_missing_secret(self, tmp_path: Path) -> None:
        store = CredentialStore(tmp_path)
        store.fallback_file.write_text(
            json.dumps({"access_token": "a", "refresh_token": "r"})
        )

        with patch("solidcli.client.credentials.keyring") as mock_keyring:
            mock_keyring.delete_password.side_effect = PasswordDeleteError("missing")
            store.delete("access_token")

        assert json.loads(store.fallback_file.read_text()) == {"refresh_token": "r"}
