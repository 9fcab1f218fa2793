"""Pull: materialize remote resources as local files.

This module provides:
- PullMaterializer: fetches company settings, pages, KB, services and
  products, writes them under the project directory and rebuilds the
  manifest

Layout written:

    solid.config.json     company profile and website settings
    pages/<slug>.json     page with layout
    kb/<slug>.md          KB entry with frontmatter
    services/<slug>.json
    products/<slug>.json
    .solid/manifest.json
    .gitignore            created once if absent
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from solidcli.client.api import APIError
from solidcli.client.sync.frontmatter import render_kb_markdown
from solidcli.client.sync.manifest import (
    KbEntryRef,
    Manifest,
    PageEntry,
    ProductEntry,
    ServiceEntry,
    load_manifest,
    save_manifest,
    verify_ownership,
)
from solidcli.client.sync.naming import derive_filename
from solidcli.client.sync.types import (
    SETTINGS_FILE_NAME,
    CorruptManifestError,
    KindReport,
    KindStatus,
    ManifestNotFoundError,
    PullResult,
    TenantMismatchError,
)
from solidcli.core.types import ALL_KINDS, ResourceKind

if TYPE_CHECKING:
    from solidcli.client.api import HTTPClient
    from solidcli.client.schemas import CompanyInfo
    from solidcli.client.session import Session

logger = logging.getLogger(__name__)

GITIGNORE_CONTENT = ".solid/\nnode_modules/\n"
KB_PULL_LIMIT = 100


def _utcnow() -> datetime:
    return datetime.now(UTC)


def write_json(path: Path, data: dict[str, Any]) -> None:
    """Write a resource file: 2-space indent, trailing newline."""
    path.write_text(
        json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8"
    )


def _unmapped_files(directory: Path, manifest: Manifest) -> list[str]:
    """Resource files on disk with no entry in the manifest, relative to directory."""
    unmapped = []
    for kind in ALL_KINDS:
        folder = directory / kind.value
        if not folder.is_dir():
            continue
        mapping = manifest.mapping(kind)
        unmapped.extend(
            f"{kind.value}/{path.name}"
            for path in sorted(folder.iterdir())
            if path.is_file()
            and path.suffix == kind.extension
            and path.name not in mapping
        )
    return unmapped


class PullMaterializer:
    """Writes the remote state of a company into a project directory."""

    def __init__(
        self,
        client: HTTPClient,
        session: Session,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Initialize the materializer.

        Args:
            client: API client scoped to the session's company.
            session: Current session (company and API URL).
            clock: Source of timestamps, injectable for tests.
        """
        self._client = client
        self._session = session
        self._clock = clock

    def pull(
        self,
        directory: Path,
        kinds: Iterable[ResourceKind] = ALL_KINDS,
        force: bool = False,
    ) -> PullResult:
        """Pull remote resources into a directory.

        Args:
            directory: Project root (created if missing).
            kinds: Resource kinds to fetch; others keep their previous
                files and manifest mappings.
            force: Overwrite a project owned by another company, or one
                whose manifest is corrupt.

        Returns:
            PullResult with a report per kind.

        Raises:
            NotAuthenticatedError: If the session has no company.
            TenantMismatchError: If the directory belongs to another
                company and force is not set.
            CorruptManifestError: If the existing manifest is unreadable
                and force is not set.
            APIError: If the company info cannot be fetched.
        """
        company_id = self._session.require_company()
        directory = Path(directory).resolve()
        wanted = set(kinds)

        previous, replaced = self._previous_manifest(directory, company_id, force)

        company = self._client.get_company_info()
        directory.mkdir(parents=True, exist_ok=True)
        self._write_settings(directory, company)

        manifest = Manifest(
            company_id=company_id,
            company_name=company.name,
            api_url=self._session.api_url,
        )
        result = PullResult(
            company_id=company_id, company_name=company.name, directory=directory
        )

        for kind in ALL_KINDS:
            if kind not in wanted:
                report = KindReport(kind, KindStatus.SKIPPED)
            else:
                report = self._pull_kind(kind, directory, manifest)

            if report.status is not KindStatus.FETCHED and previous is not None:
                manifest.mapping(kind).update(previous.mapping(kind))
            result.reports.append(report)

        manifest.touch(self._clock())
        save_manifest(directory, manifest)

        if replaced:
            result.unmapped_files = _unmapped_files(directory, manifest)
            if result.unmapped_files:
                logger.warning(
                    f"Files left from the replaced project are not in the manifest "
                    f"and would be created by push: {', '.join(result.unmapped_files)}"
                )

        gitignore = directory / ".gitignore"
        if not gitignore.exists():
            gitignore.write_text(GITIGNORE_CONTENT)

        logger.info(
            f"Pulled {result.total_files} files for company {company_id} into {directory}"
        )
        return result

    def _previous_manifest(
        self, directory: Path, company_id: int, force: bool
    ) -> tuple[Manifest | None, bool]:
        """Existing manifest whose mappings may carry over, if any.

        The flag is set when an existing manifest was discarded under force.
        """
        try:
            previous = load_manifest(directory)
        except ManifestNotFoundError:
            return None, False
        except CorruptManifestError as e:
            if not force:
                raise
            logger.warning(f"Replacing corrupt manifest: {e}")
            return None, True

        try:
            verify_ownership(previous, company_id)
        except TenantMismatchError:
            if not force:
                raise
            logger.warning(
                f"Overwriting project of company {previous.company_id} "
                f"with company {company_id}"
            )
            return None, True
        return previous, False

    def _write_settings(self, directory: Path, company: CompanyInfo) -> None:
        write_json(
            directory / SETTINGS_FILE_NAME,
            {
                "name": company.name,
                "slug": company.slug,
                "industry": company.industry,
                "tier": company.tier,
                "phone": company.contact_phone,
                "email": company.contact_email,
                "address": company.location,
                "hours": company.business_hours,
                "website_settings": company.website_settings,
            },
        )

    def _pull_kind(
        self, kind: ResourceKind, directory: Path, manifest: Manifest
    ) -> KindReport:
        pullers = {
            ResourceKind.PAGES: self._pull_pages,
            ResourceKind.KB: self._pull_kb,
            ResourceKind.SERVICES: self._pull_services,
            ResourceKind.PRODUCTS: self._pull_products,
        }
        try:
            return pullers[kind](directory / kind.value, manifest)
        except APIError as e:
            logger.error(f"Failed to pull {kind.value}: {e}")
            return KindReport(kind, KindStatus.FAILED, error=str(e))

    def _pull_pages(self, target: Path, manifest: Manifest) -> KindReport:
        summaries = self._client.list_pages()
        report = KindReport(ResourceKind.PAGES, KindStatus.FETCHED)
        used: set[str] = set()

        for summary in summaries:
            try:
                page = self._client.get_page(summary.id)
            except APIError as e:
                logger.warning(f"Skipping page {summary.id}: {e}")
                report.skipped += 1
                continue

            filename = derive_filename(
                slug=page.slug,
                label=page.title,
                fallback=f"page-{page.id}",
                extension=".json",
                used=used,
                resource_id=page.id,
            )
            target.mkdir(parents=True, exist_ok=True)
            write_json(
                target / filename,
                {
                    "_id": page.id,
                    "title": page.title,
                    "slug": page.slug,
                    "page_type": page.page_type or "website",
                    "is_published": page.is_published,
                    "is_landing_page": page.is_landing_page or False,
                    "meta_title": page.meta_title,
                    "meta_description": page.meta_description,
                    "layout_json": page.layout_json,
                },
            )
            manifest.pages[filename] = PageEntry(
                id=page.id,
                slug=page.slug or "",
                updated_at=page.updated_at or self._clock().isoformat(),
            )
            report.written += 1

        return report

    def _pull_kb(self, target: Path, manifest: Manifest) -> KindReport:
        entries = self._client.search_kb("*", limit=KB_PULL_LIMIT)
        report = KindReport(ResourceKind.KB, KindStatus.FETCHED)
        used: set[str] = set()

        for entry in entries:
            filename = derive_filename(
                slug=None,
                label=entry.title,
                fallback=f"entry-{entry.id}",
                extension=".md",
                used=used,
                resource_id=entry.id,
            )
            target.mkdir(parents=True, exist_ok=True)
            (target / filename).write_text(
                render_kb_markdown(entry.id, entry.title, entry.category, entry.content),
                encoding="utf-8",
            )
            manifest.kb[filename] = KbEntryRef(id=entry.id, title=entry.title or "")
            report.written += 1

        return report

    def _pull_services(self, target: Path, manifest: Manifest) -> KindReport:
        services = self._client.list_services()
        report = KindReport(ResourceKind.SERVICES, KindStatus.FETCHED)
        used: set[str] = set()

        for service in services:
            filename = derive_filename(
                slug=service.slug,
                label=service.title,
                fallback=f"service-{service.id}",
                extension=".json",
                used=used,
                resource_id=service.id,
            )
            target.mkdir(parents=True, exist_ok=True)
            write_json(
                target / filename,
                {
                    "_id": service.id,
                    "title": service.title,
                    "slug": service.slug,
                    "subtitle": service.subtitle,
                    "description": service.description,
                    "category": service.category,
                    "subcategory": service.subcategory,
                    "price": service.price,
                    "currency": service.currency or "USD",
                    "duration_minutes": service.duration_minutes,
                    "requires_on_site": service.requires_on_site,
                },
            )
            manifest.services[filename] = ServiceEntry(
                id=service.id, slug=service.slug or ""
            )
            report.written += 1

        return report

    def _pull_products(self, target: Path, manifest: Manifest) -> KindReport:
        products = self._client.list_products()
        report = KindReport(ResourceKind.PRODUCTS, KindStatus.FETCHED)
        used: set[str] = set()

        for product in products:
            filename = derive_filename(
                slug=None,
                label=product.name,
                fallback=f"product-{product.id}",
                extension=".json",
                used=used,
                resource_id=product.id,
            )
            target.mkdir(parents=True, exist_ok=True)
            write_json(
                target / filename,
                {
                    "_id": product.id,
                    "name": product.name,
                    "description": product.description,
                    "category": product.category,
                    "product_type": product.product_type,
                    "price": product.price,
                    "image_url": product.image_url,
                    "is_featured": product.is_featured,
                    "in_stock": product.in_stock,
                    "tags": product.tags,
                },
            )
            manifest.products[filename] = ProductEntry(
                id=product.id, name=product.name or ""
            )
            report.written += 1

        return report
