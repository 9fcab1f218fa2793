"""Authentication commands for the Solid CLI.

Commands:
- auth login: Log in with email and password
- auth logout: Forget stored tokens
- auth status: Check the stored login against the server
- auth config: View or update API URL and environment
"""

from __future__ import annotations

import sys

import click

from solidcli.client.api import APIError, AuthenticationError, HTTPClient
from solidcli.client.cli.config import (
    exit_corrupt_config,
    get_session_store,
    load_config,
    load_session,
    make_client,
)
from solidcli.client.session import CorruptConfigError
from solidcli.core.config import ServerConfig
from solidcli.core.types import Environment


@click.group()
def auth() -> None:
    """Authentication management."""


@auth.command()
@click.option("--email", "-e", default=None, help="Email address.")
@click.option(
    "--password",
    "-p",
    default=None,
    help="Password (prompted when omitted; passing it here is not recommended).",
)
def login(email: str | None, password: str | None) -> None:
    """Log in to Solid#."""
    store = get_session_store()
    session = load_session(store)

    if not email:
        email = click.prompt("Email")
    if not password:
        password = click.prompt("Password", hide_input=True)

    click.echo("Logging in...")
    try:
        with HTTPClient(ServerConfig(api_url=session.api_url)) as client:
            response = client.login(email, password)
    except APIError as e:
        click.echo(f"Error: Login failed: {e}", err=True)
        sys.exit(1)

    session.apply_tokens(
        response.access_token, response.refresh_token, expires_at=response.expires_at
    )
    session.user_id = response.user.id
    session.user_email = response.user.email
    session.company_id = response.user.company_id
    store.save(session)

    click.echo(click.style("Login successful!", fg="green"))
    click.echo(f"  Logged in as: {response.user.email}")
    click.echo(f"  Company ID: {response.user.company_id}")


@auth.command()
def logout() -> None:
    """Log out of Solid#."""
    try:
        get_session_store().clear()
    except CorruptConfigError as e:
        exit_corrupt_config(e)
    click.echo(click.style("Logged out successfully", fg="green"))


@auth.command()
def status() -> None:
    """Check authentication status."""
    session = load_session()
    if not session.is_logged_in:
        click.echo("Not logged in")
        click.echo("  Run `solid auth login` to authenticate")
        return

    try:
        with make_client(session) as client:
            user = client.auth_me()
    except AuthenticationError:
        click.echo("Session expired")
        click.echo("  Run `solid auth login` to re-authenticate")
        return
    except APIError as e:
        click.echo(f"Error: Failed to check status: {e}", err=True)
        sys.exit(1)

    click.echo(click.style("Authenticated", fg="green"))
    click.echo(f"  Email: {user.email}")
    click.echo(f"  Company ID: {user.company_id}")
    click.echo(f"  Environment: {session.environment}")
    click.echo(f"  API URL: {session.api_url}")


@auth.command("config")
@click.option("--api-url", default=None, help="Set the API URL.")
@click.option(
    "--environment",
    type=click.Choice([e.value for e in Environment]),
    default=None,
    help="Set the environment.",
)
@click.option("--show", is_flag=True, help="Show the current configuration.")
def config_cmd(api_url: str | None, environment: str | None, show: bool) -> None:
    """View or update configuration."""
    store = get_session_store()
    config = load_config(store)

    if api_url:
        config["api_url"] = api_url.rstrip("/")
        click.echo(click.style(f"API URL set to: {config['api_url']}", fg="green"))
    if environment:
        config["environment"] = environment
        click.echo(click.style(f"Environment set to: {environment}", fg="green"))
    if api_url or environment:
        store.save_config(config)

    if show or not (api_url or environment):
        session = load_session(store)
        click.echo("\nCurrent configuration:")
        click.echo(f"  API URL: {session.api_url}")
        click.echo(f"  Environment: {session.environment}")
        click.echo(f"  Company ID: {session.company_id or 'Not set'}")
        click.echo(f"  User: {session.user_email or 'Not logged in'}")
