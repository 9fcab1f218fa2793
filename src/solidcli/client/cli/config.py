"""Configuration utilities for the Solid CLI.

This module provides shared session and client helpers used across CLI
commands.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, NoReturn

import click

from solidcli.client.api import HTTPClient
from solidcli.client.session import (
    CorruptConfigError,
    NotAuthenticatedError,
    Session,
    SessionStore,
)


def get_config_dir() -> Path:
    """Get the configuration directory for the Solid CLI.

    Returns:
        Path to ~/.solid.
    """
    return Path.home() / ".solid"


def get_session_store() -> SessionStore:
    """Session store rooted at the config directory."""
    return SessionStore(get_config_dir())


def exit_corrupt_config(error: CorruptConfigError) -> NoReturn:
    """Report an unreadable config file and exit."""
    click.echo(f"Error: {error}", err=True)
    click.echo("Fix or delete the file, then run `solid auth login`.", err=True)
    sys.exit(1)


def load_session(store: SessionStore | None = None) -> Session:
    """Build this invocation's session from config, keyring and environment.

    Exits with an error message when the config file is corrupt.
    """
    store = store or get_session_store()
    try:
        return store.load()
    except CorruptConfigError as e:
        exit_corrupt_config(e)


def load_config(store: SessionStore) -> dict[str, Any]:
    """Raw config dictionary, exiting with an error message when corrupt."""
    try:
        return store.load_config()
    except CorruptConfigError as e:
        exit_corrupt_config(e)


def require_company(session: Session) -> int:
    """Get the session's company or exit with a login hint."""
    try:
        return session.require_company()
    except NotAuthenticatedError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def make_client(session: Session) -> HTTPClient:
    """HTTP client authenticated and scoped by the session."""
    return HTTPClient(session.server_config())
