"""Per-invocation session state.

This module provides:
- Session: who is logged in, against which API, for which company
- SessionStore: loads and persists a Session from ~/.solid
- NotAuthenticatedError: raised when a command needs a login
- CorruptConfigError: raised when config.json cannot be read

A Session is built once per CLI invocation and handed to the HTTP client
and the sync engine; nothing reads login state from module globals.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

from solidcli.client.credentials import CredentialStore
from solidcli.core.config import DEFAULT_API_URL, ServerConfig
from solidcli.core.types import Environment

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "config.json"

# Environment overrides
API_KEY_ENV = "SOLID_API_KEY"
API_URL_ENV = "SOLID_API_URL"


class NotAuthenticatedError(Exception):
    """No valid login for a command that needs one."""

    def __init__(self, message: str = "Not logged in. Run `solid auth login` first.") -> None:
        super().__init__(message)


class CorruptConfigError(Exception):
    """The config file exists but does not hold a valid configuration."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Cannot read {path}: {reason}")
        self.path = path


@dataclass
class Session:
    """Login state for one CLI invocation.

    Attributes:
        api_url: API base URL.
        environment: production, sandbox or development.
        company_id: Active tenant.
        user_id: Logged-in user id.
        user_email: Logged-in user email.
        access_token: Bearer token from login or company switch.
        refresh_token: Refresh token, stored for the server's benefit.
        token_expires_at: When access_token stops being valid.
        api_key: CLI API key from SOLID_API_KEY; wins over access_token.
    """

    api_url: str = DEFAULT_API_URL
    environment: str = Environment.PRODUCTION.value
    company_id: int | None = None
    user_id: int | None = None
    user_email: str | None = None
    access_token: str | None = None
    refresh_token: str | None = None
    token_expires_at: datetime | None = None
    api_key: str | None = None

    @property
    def token(self) -> str | None:
        """Bearer token to send, if any."""
        return self.api_key or self.access_token

    @property
    def is_logged_in(self) -> bool:
        """True when a usable token exists and has not expired."""
        if self.api_key:
            return True
        if not self.access_token:
            return False
        if self.token_expires_at and self.token_expires_at < datetime.now(UTC):
            return False
        return True

    def require_company(self) -> int:
        """Get the active company, enforcing a valid login.

        Raises:
            NotAuthenticatedError: If not logged in or no company is set.
        """
        if not self.is_logged_in:
            raise NotAuthenticatedError()
        if not self.company_id:
            raise NotAuthenticatedError("No company_id set. Run `solid auth login` first.")
        return self.company_id

    def server_config(self) -> ServerConfig:
        """Connection settings for the HTTP client."""
        return ServerConfig(
            api_url=self.api_url,
            token=self.token,
            company_id=self.company_id,
        )

    def apply_tokens(
        self,
        access_token: str,
        refresh_token: str | None,
        expires_at: datetime | None = None,
        expires_in: int | None = None,
    ) -> None:
        """Replace the session's tokens after login or company switch."""
        self.access_token = access_token
        self.refresh_token = refresh_token
        if expires_at is None and expires_in is not None:
            expires_at = datetime.now(UTC) + timedelta(seconds=expires_in)
        if expires_at is not None and expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=UTC)
        self.token_expires_at = expires_at


class SessionStore:
    """Reads and writes the session under a config directory.

    Non-secret fields live in ``config.json``; tokens go to the
    CredentialStore.
    """

    def __init__(
        self,
        config_dir: Path,
        credentials: CredentialStore | None = None,
    ) -> None:
        self._config_dir = Path(config_dir)
        self._credentials = credentials or CredentialStore(self._config_dir)

    @property
    def config_file(self) -> Path:
        return self._config_dir / CONFIG_FILE_NAME

    def load_config(self) -> dict[str, Any]:
        """Load the raw config dictionary.

        Raises:
            CorruptConfigError: If the file is not a JSON object.
        """
        if not self.config_file.exists():
            return {}
        try:
            config = json.loads(self.config_file.read_text())
        except json.JSONDecodeError as e:
            raise CorruptConfigError(self.config_file, f"invalid JSON ({e})") from e
        if not isinstance(config, dict):
            raise CorruptConfigError(self.config_file, "expected a JSON object")
        return config

    def save_config(self, config: dict[str, Any]) -> None:
        """Save the raw config dictionary."""
        self._config_dir.mkdir(parents=True, exist_ok=True)
        self.config_file.write_text(json.dumps(config, indent=2))

    def load(self, env: Mapping[str, str] | None = None) -> Session:
        """Build the session for this invocation.

        Args:
            env: Environment variables (defaults to os.environ).

        Returns:
            Session with config file values, stored tokens and env overrides.

        Raises:
            CorruptConfigError: If the config file or a value in it is invalid.
        """
        env = os.environ if env is None else env
        config = self.load_config()

        expires_at = None
        if config.get("token_expires_at"):
            try:
                expires_at = datetime.fromisoformat(config["token_expires_at"])
            except (TypeError, ValueError) as e:
                raise CorruptConfigError(
                    self.config_file, f"bad token_expires_at ({e})"
                ) from e
            if expires_at.tzinfo is None:
                expires_at = expires_at.replace(tzinfo=UTC)

        return Session(
            api_url=env.get(API_URL_ENV) or config.get("api_url") or DEFAULT_API_URL,
            environment=config.get("environment", Environment.PRODUCTION.value),
            company_id=config.get("company_id"),
            user_id=config.get("user_id"),
            user_email=config.get("user_email"),
            access_token=self._credentials.get("access_token"),
            refresh_token=self._credentials.get("refresh_token"),
            token_expires_at=expires_at,
            api_key=env.get(API_KEY_ENV) or None,
        )

    def save(self, session: Session) -> None:
        """Persist a session (the API key from the environment is never saved)."""
        config = self.load_config()
        config["api_url"] = session.api_url
        config["environment"] = session.environment
        for key in ("company_id", "user_id", "user_email"):
            value = getattr(session, key)
            if value:
                config[key] = value
            else:
                config.pop(key, None)
        if session.token_expires_at:
            config["token_expires_at"] = session.token_expires_at.isoformat()
        else:
            config.pop("token_expires_at", None)
        self.save_config(config)

        for name in ("access_token", "refresh_token"):
            value = getattr(session, name)
            if value:
                self._credentials.set(name, value)
            else:
                self._credentials.delete(name)

    def clear(self) -> None:
        """Log out: drop tokens and user identity, keep API URL and environment."""
        config = self.load_config()
        for key in ("company_id", "user_id", "user_email", "token_expires_at"):
            config.pop(key, None)
        self.save_config(config)
        self._credentials.delete("access_token")
        self._credentials.delete("refresh_token")
        logger.info("Cleared stored credentials")
