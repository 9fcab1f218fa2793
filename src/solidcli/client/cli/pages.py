"""CMS page and catalog commands for the Solid CLI.

Commands:
- pages list: List website pages
- pages publish / pages unpublish: Change a page's visibility
- services list: List the service catalog
"""

from __future__ import annotations

import json
import sys

import click

from solidcli.client.api import APIError
from solidcli.client.cli.config import load_session, make_client, require_company

PAGE_TYPES = ["website", "landing", "blog", "booking"]


@click.group()
def pages() -> None:
    """Website page management."""


@pages.command("list")
@click.option("--type", "page_type", type=click.Choice(PAGE_TYPES), default=None, help="Filter by page type.")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
def list_pages(page_type: str | None, as_json: bool) -> None:
    """List CMS pages."""
    session = load_session()
    require_company(session)

    try:
        with make_client(session) as client:
            summaries = client.list_pages(page_type)
    except APIError as e:
        click.echo(f"Error: Failed to load pages: {e}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps([p.model_dump() for p in summaries], indent=2))
        return

    click.echo(f"{len(summaries)} pages")
    if not summaries:
        click.echo("  No pages yet. Use the website builder to create pages.")
        return

    for page in summaries:
        state = (
            click.style("published", fg="green")
            if page.is_published
            else click.style("draft", fg="yellow")
        )
        kind = click.style(f"[{page.page_type}]", fg="cyan") if page.page_type else ""
        click.echo(f"  {click.style(page.title or '', bold=True)} {kind} {state}")
        click.echo(f"    /{page.slug or ''}  ID: {page.id}")


def _set_published(page_id: int, publish: bool) -> None:
    session = load_session()
    require_company(session)
    verb = "publish" if publish else "unpublish"

    try:
        with make_client(session) as client:
            if publish:
                client.publish_page(page_id)
            else:
                client.unpublish_page(page_id)
    except APIError as e:
        click.echo(f"Error: Failed to {verb} page: {e}", err=True)
        sys.exit(1)

    click.echo(click.style(f"Page #{page_id} {verb}ed", fg="green"))


@pages.command()
@click.argument("page_id", type=int)
def publish(page_id: int) -> None:
    """Publish a page by ID."""
    _set_published(page_id, True)


@pages.command()
@click.argument("page_id", type=int)
def unpublish(page_id: int) -> None:
    """Unpublish a page by ID."""
    _set_published(page_id, False)


@click.group()
def services() -> None:
    """Service catalog management."""


@services.command("list")
@click.option("--category", default=None, help="Filter by category.")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
def list_services(category: str | None, as_json: bool) -> None:
    """List your services."""
    session = load_session()
    require_company(session)

    try:
        with make_client(session) as client:
            items = client.list_services()
    except APIError as e:
        click.echo(f"Error: Failed to load services: {e}", err=True)
        sys.exit(1)

    if category:
        items = [s for s in items if (s.category or "").lower() == category.lower()]

    if as_json:
        click.echo(json.dumps([s.model_dump() for s in items], indent=2))
        return

    click.echo(f"{len(items)} services")
    if not items:
        click.echo("  No services in your catalog yet.")
        return

    current_category = ""
    for service in items:
        if service.category and service.category != current_category:
            current_category = service.category
            click.echo(click.style(f"  [{current_category}]", fg="cyan"))
        price = f"${service.price}" if service.price else "no price"
        duration = f" {service.duration_minutes} min" if service.duration_minutes else ""
        click.echo(f"    {click.style(service.title or '', bold=True)} - {price}{duration}")
