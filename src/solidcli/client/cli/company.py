"""Company commands for the Solid CLI.

Commands:
- status: Show the active company's setup overview
- switch: Switch the active company
"""

from __future__ import annotations

import json
import sys

import click

from solidcli.client.api import APIError
from solidcli.client.cli.config import (
    get_session_store,
    load_session,
    make_client,
    require_company,
)
from solidcli.client.schemas import CompanyMembership


def _on_off(enabled: bool) -> str:
    return click.style("on", fg="green") if enabled else "off"


@click.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
def status(as_json: bool) -> None:
    """Show your business status and setup overview."""
    session = load_session()
    require_company(session)

    try:
        with make_client(session) as client:
            company = client.get_company_info()
    except APIError as e:
        click.echo(f"Error: Failed to load status: {e}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(company.model_dump(mode="json"), indent=2))
        return

    ws = company.website_settings
    click.echo(click.style(company.name, bold=True))
    click.echo(f"  ID:       {company.id}")
    click.echo(f"  Tier:     {company.tier or 'starter'}")
    click.echo(f"  Industry: {company.industry or 'not set'}")

    click.echo("\nContact")
    click.echo(f"  Phone:    {company.contact_phone or 'not set'}")
    click.echo(f"  Email:    {company.contact_email or 'not set'}")
    click.echo(f"  Address:  {company.location or 'not set'}")

    click.echo("\nWebsite")
    url = f"https://{company.slug}.solidnumber.com" if company.slug else "not set"
    click.echo(f"  URL:      {url}")
    click.echo(f"  Color:    {ws.get('primary_color', '#6366f1')}")
    click.echo(f"  Locale:   {ws.get('default_locale', 'en')}")

    click.echo("\nModules")
    click.echo(f"  Services:     {_on_off(ws.get('show_services') is not False)}")
    click.echo(f"  Products:     {_on_off(ws.get('show_products') is not False)}")
    click.echo(f"  Appointments: {_on_off(ws.get('show_appointments') is not False)}")
    click.echo(f"  Pricing:      {_on_off(ws.get('show_pricing') is not False)}")
    click.echo(f"  Promotions:   {_on_off(ws.get('show_promotions') is True)}")


def _match_company(
    companies: list[CompanyMembership], target: str
) -> CompanyMembership | None:
    """Find a company by exact id, or by case-insensitive name fragment."""
    if target.isdigit():
        return next((c for c in companies if c.id == int(target)), None)
    needle = target.lower()
    return next((c for c in companies if needle in c.name.lower()), None)


@click.command()
@click.argument("target", required=False)
def switch(target: str | None) -> None:
    """Switch the active company.

    TARGET is a company id or part of its name. Without it, the linked
    companies are listed and you are asked to pick one.
    """
    store = get_session_store()
    session = load_session(store)
    require_company(session)

    try:
        with make_client(session) as client:
            listing = client.list_companies()
            companies = listing.companies

            if not companies:
                click.echo("  No companies found.")
                return
            if len(companies) == 1:
                only = companies[0]
                click.echo(f"  You only have access to one company: {only.name} ({only.id})")
                return

            if target:
                match = _match_company(companies, target)
                if match is None:
                    click.echo(f"Error: No linked company matches '{target}'.", err=True)
                    sys.exit(1)
            else:
                for index, company in enumerate(companies, start=1):
                    current = " [current]" if company.id == listing.active_company_id else ""
                    click.echo(f"  {index}. {company.name} (ID: {company.id}) {company.role}{current}")
                choice = click.prompt(
                    "Select company",
                    type=click.IntRange(1, len(companies)),
                )
                match = companies[choice - 1]

            if match.id == listing.active_company_id:
                click.echo("  Already on this company.")
                return

            response = client.switch_company(match.id)
    except APIError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    session.apply_tokens(
        response.access_token, response.refresh_token, expires_in=response.expires_in
    )
    session.company_id = response.company.id
    store.save(session)

    click.echo(click.style(f"Switched to {response.company.name}", fg="green"))
    click.echo(f"  Company:  {response.company.name} ({response.company.id})")
    click.echo(f"  Role:     {response.role}")
