"""Tests for PullMaterializer."""

import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from solidcli.client.api import APIError
from solidcli.client.schemas import CompanyInfo, KbEntry, Page, PageSummary, Product, Service
from solidcli.client.session import NotAuthenticatedError, Session
from solidcli.client.sync import (
    CorruptManifestError,
    KindStatus,
    PullMaterializer,
    TenantMismatchError,
    detect_changes,
    load_manifest,
)
from solidcli.client.sync.pull import GITIGNORE_CONTENT, KB_PULL_LIMIT
from solidcli.core.types import ChangeAction, ResourceKind


@pytest.fixture
def remote(mock_client: MagicMock) -> MagicMock:
    """Mock client serving one resource of each kind for company 12."""
    mock_client.get_company_info.return_value = CompanyInfo(
        id=12,
        name="Acme Plumbing",
        slug="acme",
        industry="plumbing",
        website_settings={"primary_color": "#111"},
    )
    mock_client.list_pages.return_value = [PageSummary(id=1, title="Home", slug="home")]
    mock_client.get_page.return_value = Page(
        id=1,
        title="Home",
        slug="home",
        is_published=True,
        layout_json={"sections": [{"type": "hero"}]},
        updated_at="2025-05-01T00:00:00Z",
    )
    mock_client.search_kb.return_value = [
        KbEntry(id=7, title="Welcome", content="Hello there.", category="faq")
    ]
    mock_client.list_services.return_value = [
        Service(id=3, title="Drain Cleaning", slug="drain-cleaning", price="99.00")
    ]
    mock_client.list_products.return_value = [Product(id=4, name="Water Heater", price=899)]
    return mock_client


@pytest.fixture
def materializer(remote: MagicMock, session: Session, clock) -> PullMaterializer:  # type: ignore[no-untyped-def]
    return PullMaterializer(remote, session, clock=clock)


def read_json(path: Path) -> dict:  # type: ignore[type-arg]
    return json.loads(path.read_text())


class TestPullLayout:
    """Tests for the files a pull writes."""

    def test_writes_every_kind(self, materializer: PullMaterializer, tmp_path: Path) -> None:
        result = materializer.pull(tmp_path)

        assert (tmp_path / "pages" / "home.json").is_file()
        assert (tmp_path / "kb" / "welcome.md").is_file()
        assert (tmp_path / "services" / "drain-cleaning.json").is_file()
        assert (tmp_path / "products" / "water-heater.json").is_file()
        assert result.total_files == 5
        assert [r.status for r in result.reports] == [KindStatus.FETCHED] * 4

    def test_settings_file(self, materializer: PullMaterializer, tmp_path: Path) -> None:
        materializer.pull(tmp_path)

        settings = read_json(tmp_path / "solid.config.json")
        assert settings["name"] == "Acme Plumbing"
        assert settings["industry"] == "plumbing"
        assert settings["website_settings"] == {"primary_color": "#111"}

    def test_page_file_contents(self, materializer: PullMaterializer, tmp_path: Path) -> None:
        materializer.pull(tmp_path)

        text = (tmp_path / "pages" / "home.json").read_text()
        assert text.endswith("}\n")
        assert read_json(tmp_path / "pages" / "home.json") == {
            "_id": 1,
            "title": "Home",
            "slug": "home",
            "page_type": "website",
            "is_published": True,
            "is_landing_page": False,
            "meta_title": None,
            "meta_description": None,
            "layout_json": {"sections": [{"type": "hero"}]},
        }

    def test_kb_file_contents(self, materializer: PullMaterializer, tmp_path: Path) -> None:
        materializer.pull(tmp_path)

        assert (tmp_path / "kb" / "welcome.md").read_text() == (
            '---\nid: 7\ntitle: "Welcome"\ncategory: faq\n---\n\nHello there.\n'
        )

    def test_service_currency_default(self, materializer: PullMaterializer, tmp_path: Path) -> None:
        materializer.pull(tmp_path)

        service = read_json(tmp_path / "services" / "drain-cleaning.json")
        assert service["_id"] == 3
        assert service["currency"] == "USD"
        assert service["price"] == "99.00"

    def test_kb_fetch_uses_limit(
        self, materializer: PullMaterializer, remote: MagicMock, tmp_path: Path
    ) -> None:
        materializer.pull(tmp_path)
        remote.search_kb.assert_called_once_with("*", limit=KB_PULL_LIMIT)

    def test_slug_collision_appends_id(
        self, materializer: PullMaterializer, remote: MagicMock, tmp_path: Path
    ) -> None:
        remote.list_pages.return_value = [
            PageSummary(id=1, slug="home"),
            PageSummary(id=2, slug="home"),
        ]
        remote.get_page.side_effect = [
            Page(id=1, title="Home", slug="home"),
            Page(id=2, title="Home copy", slug="home"),
        ]

        materializer.pull(tmp_path)

        manifest = load_manifest(tmp_path)
        assert manifest.pages["home.json"].id == 1
        assert manifest.pages["home-2.json"].id == 2

    def test_suffixed_slug_not_overwritten(
        self, materializer: PullMaterializer, remote: MagicMock, tmp_path: Path
    ) -> None:
        """A page whose slug matches another page's suffixed name keeps its file."""
        remote.list_pages.return_value = [
            PageSummary(id=9, slug="about-5"),
            PageSummary(id=1, slug="about"),
            PageSummary(id=5, slug="about"),
        ]
        remote.get_page.side_effect = [
            Page(id=9, title="About 5", slug="about-5"),
            Page(id=1, title="About", slug="about"),
            Page(id=5, title="About again", slug="about"),
        ]

        result = materializer.pull(tmp_path, kinds=[ResourceKind.PAGES])

        manifest = load_manifest(tmp_path)
        assert {entry.id for entry in manifest.pages.values()} == {1, 5, 9}
        assert read_json(tmp_path / "pages" / "about-5.json")["_id"] == 9
        assert len(list((tmp_path / "pages").glob("*.json"))) == result.reports[0].written == 3

    def test_fallback_filename(
        self, materializer: PullMaterializer, remote: MagicMock, tmp_path: Path
    ) -> None:
        remote.search_kb.return_value = [KbEntry(id=9, title="???", content="x")]

        materializer.pull(tmp_path)

        assert (tmp_path / "kb" / "entry-9.md").is_file()

    def test_empty_kind_confirmed(
        self, materializer: PullMaterializer, remote: MagicMock, tmp_path: Path
    ) -> None:
        remote.list_products.return_value = []

        result = materializer.pull(tmp_path)

        products = next(r for r in result.reports if r.kind is ResourceKind.PRODUCTS)
        assert products.is_empty
        assert not (tmp_path / "products").exists()

    def test_gitignore_created_once(self, materializer: PullMaterializer, tmp_path: Path) -> None:
        materializer.pull(tmp_path)
        assert (tmp_path / ".gitignore").read_text() == GITIGNORE_CONTENT

        (tmp_path / ".gitignore").write_text("custom\n")
        materializer.pull(tmp_path)
        assert (tmp_path / ".gitignore").read_text() == "custom\n"

    def test_creates_missing_directory(
        self, materializer: PullMaterializer, tmp_path: Path
    ) -> None:
        target = tmp_path / "acme-site"
        materializer.pull(target)
        assert (target / ".solid" / "manifest.json").is_file()


class TestPullManifest:
    """Tests for the rebuilt manifest."""

    def test_manifest_records_ids(
        self, materializer: PullMaterializer, tmp_path: Path, clock  # type: ignore[no-untyped-def]
    ) -> None:
        materializer.pull(tmp_path)

        manifest = load_manifest(tmp_path)
        assert manifest.company_id == 12
        assert manifest.company_name == "Acme Plumbing"
        assert manifest.api_url == "http://test"
        assert manifest.pulled_at == clock().isoformat()
        assert manifest.pages["home.json"].id == 1
        assert manifest.pages["home.json"].slug == "home"
        assert manifest.pages["home.json"].updated_at == "2025-05-01T00:00:00Z"
        assert manifest.kb["welcome.md"].id == 7
        assert manifest.services["drain-cleaning.json"].id == 3
        assert manifest.products["water-heater.json"].name == "Water Heater"

    def test_missing_updated_at_uses_clock(
        self, materializer: PullMaterializer, remote: MagicMock, tmp_path: Path, clock  # type: ignore[no-untyped-def]
    ) -> None:
        remote.get_page.return_value = Page(id=1, title="Home", slug="home")

        materializer.pull(tmp_path)

        assert load_manifest(tmp_path).pages["home.json"].updated_at == clock().isoformat()

    def test_pulled_files_push_as_updates(
        self, materializer: PullMaterializer, tmp_path: Path
    ) -> None:
        """Pushing straight after a pull creates nothing."""
        materializer.pull(tmp_path)

        changes = detect_changes(tmp_path, load_manifest(tmp_path))

        assert changes.creates == 0
        assert {r.action for r in changes.records} == {ChangeAction.UPDATE}

    def test_failed_page_detail_is_skipped(
        self, materializer: PullMaterializer, remote: MagicMock, tmp_path: Path
    ) -> None:
        remote.list_pages.return_value = [
            PageSummary(id=1, slug="home"),
            PageSummary(id=2, slug="about"),
        ]
        remote.get_page.side_effect = [
            APIError("gone", 404),
            Page(id=2, title="About", slug="about"),
        ]

        result = materializer.pull(tmp_path)

        pages = result.reports[0]
        assert pages.status is KindStatus.FETCHED
        assert (pages.written, pages.skipped) == (1, 1)
        assert list(load_manifest(tmp_path).pages) == ["about.json"]
        assert result.skipped == 1


class TestPullRefresh:
    """Tests for pulling into an already-pulled project."""

    def test_failed_kind_keeps_mappings_and_files(
        self, materializer: PullMaterializer, remote: MagicMock, project: Path
    ) -> None:
        remote.search_kb.side_effect = APIError("KB unavailable", 503)
        before = (project / "kb" / "welcome.md").read_text()

        result = materializer.pull(project)

        assert result.failed_kinds == [ResourceKind.KB]
        assert result.reports[1].error == "KB unavailable"
        assert load_manifest(project).kb["welcome.md"].id == 7
        assert (project / "kb" / "welcome.md").read_text() == before

    def test_scoped_pull_keeps_other_kinds(
        self, materializer: PullMaterializer, remote: MagicMock, project: Path
    ) -> None:
        result = materializer.pull(project, kinds=[ResourceKind.PAGES])

        remote.search_kb.assert_not_called()
        remote.list_services.assert_not_called()
        statuses = {r.kind: r.status for r in result.reports}
        assert statuses[ResourceKind.PAGES] is KindStatus.FETCHED
        assert statuses[ResourceKind.KB] is KindStatus.SKIPPED
        assert load_manifest(project).kb["welcome.md"].id == 7

    def test_tenant_mismatch_refused(self, remote: MagicMock, clock, project: Path) -> None:  # type: ignore[no-untyped-def]
        other = Session(api_url="http://test", access_token="tok", company_id=99)
        before = (project / ".solid" / "manifest.json").read_text()

        with pytest.raises(TenantMismatchError) as exc_info:
            PullMaterializer(remote, other, clock=clock).pull(project)

        assert exc_info.value.manifest_company_id == 12
        assert exc_info.value.session_company_id == 99
        assert remote.method_calls == []
        assert (project / ".solid" / "manifest.json").read_text() == before

    def test_force_overrides_tenant_mismatch(
        self, remote: MagicMock, clock, project: Path  # type: ignore[no-untyped-def]
    ) -> None:
        remote.search_kb.side_effect = APIError("KB unavailable", 503)
        other = Session(api_url="http://test", access_token="tok", company_id=99)

        PullMaterializer(remote, other, clock=clock).pull(project, force=True)

        manifest = load_manifest(project)
        assert manifest.company_id == 99
        # Mappings of another company never carry over
        assert manifest.kb == {}

    def test_forced_scoped_pull_reports_leftover_files(
        self, remote: MagicMock, clock, project: Path  # type: ignore[no-untyped-def]
    ) -> None:
        other = Session(api_url="http://test", access_token="tok", company_id=99)

        result = PullMaterializer(remote, other, clock=clock).pull(
            project, kinds=[ResourceKind.PAGES], force=True
        )

        assert result.unmapped_files == ["kb/welcome.md"]
        # Push would create the leftover entry under the new company
        changes = detect_changes(project, load_manifest(project))
        kb_changes = changes.for_scope([ResourceKind.KB], include_settings=False)
        assert [r.action for r in kb_changes.records] == [ChangeAction.CREATE]

    def test_scoped_pull_of_own_project_has_no_leftovers(
        self, materializer: PullMaterializer, project: Path
    ) -> None:
        result = materializer.pull(project, kinds=[ResourceKind.PAGES])
        assert result.unmapped_files == []

    def test_corrupt_manifest_refused(
        self, materializer: PullMaterializer, remote: MagicMock, project: Path
    ) -> None:
        (project / ".solid" / "manifest.json").write_text("{not json")

        with pytest.raises(CorruptManifestError):
            materializer.pull(project)
        assert remote.method_calls == []

    def test_force_replaces_corrupt_manifest(
        self, materializer: PullMaterializer, project: Path
    ) -> None:
        (project / ".solid" / "manifest.json").write_text("{not json")

        materializer.pull(project, force=True)

        assert load_manifest(project).company_id == 12


class TestPullPreconditions:
    """Tests for pull failures that write nothing."""

    def test_company_info_failure_writes_nothing(
        self, materializer: PullMaterializer, remote: MagicMock, tmp_path: Path
    ) -> None:
        remote.get_company_info.side_effect = APIError("Internal error", 500)
        target = tmp_path / "site"

        with pytest.raises(APIError):
            materializer.pull(target)

        assert not target.exists()
        remote.list_pages.assert_not_called()

    def test_requires_company(self, remote: MagicMock, tmp_path: Path) -> None:
        session = Session(api_url="http://test", access_token="tok")

        with pytest.raises(NotAuthenticatedError):
            PullMaterializer(remote, session).pull(tmp_path)
        assert remote.method_calls == []
