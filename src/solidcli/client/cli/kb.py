"""Knowledge-base commands for the Solid CLI.

Commands:
- kb list: Search and list KB entries
- kb add: Create a KB entry
- kb delete: Delete a KB entry by id

All operations are scoped to the active company.
"""

from __future__ import annotations

import json
import sys

import click

from solidcli.client.api import APIError
from solidcli.client.cli.config import load_session, make_client, require_company

KB_CATEGORIES = ["general", "services", "faq", "about", "products", "billing", "support"]
PREVIEW_LENGTH = 80


@click.group()
def kb() -> None:
    """Knowledge base management."""


@kb.command("list")
@click.option("--query", "-q", default="*", show_default=True, help="Search query.")
@click.option("--limit", "-l", type=int, default=20, show_default=True, help="Max results.")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
def list_entries(query: str, limit: int, as_json: bool) -> None:
    """List knowledge base entries."""
    session = load_session()
    require_company(session)

    try:
        with make_client(session) as client:
            entries = client.search_kb(query, limit=limit)
    except APIError as e:
        click.echo(f"Error: Failed to load KB entries: {e}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps([e.model_dump() for e in entries], indent=2))
        return

    click.echo(f"{len(entries)} entries found")
    if not entries:
        click.echo("  No KB entries yet. Run `solid kb add` to create one.")
        return

    for entry in entries:
        category = click.style(f"[{entry.category}]", fg="cyan") if entry.category else ""
        click.echo(f"\n  {click.style(entry.title or 'Untitled', bold=True)} {category}")
        if entry.content:
            preview = entry.content[:PREVIEW_LENGTH].replace("\n", " ")
            ellipsis = "..." if len(entry.content) > PREVIEW_LENGTH else ""
            click.echo(f"    {preview}{ellipsis}")
        click.echo(f"    ID: {entry.id}")


@kb.command()
@click.option("--title", "-t", default=None, help="Entry title.")
@click.option("--content", "-c", default=None, help="Entry content (opens an editor when omitted).")
@click.option(
    "--category",
    type=click.Choice(KB_CATEGORIES),
    default=None,
    help="Entry category.",
)
def add(title: str | None, content: str | None, category: str | None) -> None:
    """Add a knowledge base entry."""
    session = load_session()
    require_company(session)

    if not title:
        title = click.prompt("Title")
    if not content:
        content = click.edit("") or ""
        if not content.strip():
            click.echo("Error: Content is required.", err=True)
            sys.exit(1)
    if not category:
        category = click.prompt(
            "Category", type=click.Choice(KB_CATEGORIES), default="general"
        )

    try:
        with make_client(session) as client:
            created = client.create_kb(
                {"title": title, "content": content, "category": category}
            )
    except APIError as e:
        click.echo(f"Error: Failed to create KB entry: {e}", err=True)
        sys.exit(1)

    click.echo(click.style(f'KB entry created: "{title}"', fg="green"))
    click.echo(f"  ID: {created.id}")


@kb.command()
@click.argument("entry_id", type=int)
@click.option("--yes", "-y", is_flag=True, help="Skip the confirmation prompt.")
def delete(entry_id: int, yes: bool) -> None:
    """Delete a knowledge base entry by ID."""
    session = load_session()
    require_company(session)

    if not yes and not click.confirm(
        f"Delete KB entry #{entry_id}? This cannot be undone.", default=False
    ):
        click.echo("Cancelled.")
        return

    try:
        with make_client(session) as client:
            client.delete_kb(entry_id)
    except APIError as e:
        click.echo(f"Error: Failed to delete KB entry: {e}", err=True)
        sys.exit(1)

    click.echo(click.style(f"KB entry #{entry_id} deleted", fg="green"))
