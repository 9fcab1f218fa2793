"""Shared fixtures for client tests."""

import json
from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from solidcli.client.api import HTTPClient
from solidcli.client.session import Session
from solidcli.client.sync import KbEntryRef, Manifest, PageEntry, save_manifest

FIXED_NOW = datetime(2025, 6, 1, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def mock_client() -> MagicMock:
    """Create a mock HTTPClient."""
    return MagicMock(spec=HTTPClient)


@pytest.fixture
def session() -> Session:
    """Logged-in session for company 12."""
    return Session(api_url="http://test", access_token="tok", company_id=12)


@pytest.fixture
def clock():  # type: ignore[no-untyped-def]
    """Clock frozen at FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A pulled project for company 12 with one page and one KB entry."""
    manifest = Manifest(
        company_id=12,
        company_name="Acme Plumbing",
        pulled_at="2025-01-01T00:00:00+00:00",
        api_url="http://test",
        pages={"home.json": PageEntry(id=1, slug="home", updated_at="2025-01-01")},
        kb={"welcome.md": KbEntryRef(id=7, title="Welcome")},
    )
    save_manifest(tmp_path, manifest)

    (tmp_path / "pages").mkdir()
    (tmp_path / "pages" / "home.json").write_text(
        json.dumps({"_id": 1, "title": "Home", "slug": "home", "layout_json": {"sections": []}})
    )
    (tmp_path / "kb").mkdir()
    (tmp_path / "kb" / "welcome.md").write_text(
        '---\nid: 7\ntitle: "Welcome"\ncategory: general\n---\n\nHello there.\n'
    )
    return tmp_path
