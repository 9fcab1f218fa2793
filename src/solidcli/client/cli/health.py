"""Health check command for the Solid CLI.

Commands:
- health: Quick, full (per layer) or MCP health check of the API
"""

from __future__ import annotations

import json
import sys

import click

from solidcli.client.api import APIError
from solidcli.client.cli.config import load_session, make_client

STATUS_COLORS = {"healthy": "green", "degraded": "yellow"}


def _status(value: str) -> str:
    return click.style(value, fg=STATUS_COLORS.get(value, "red"))


@click.command()
@click.option("--full", "mode", flag_value="full", help="Run the full layered health check.")
@click.option("--mcp", "mode", flag_value="mcp", help="Check MCP / AI agent status only.")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
def health(mode: str | None, as_json: bool) -> None:
    """Check API health. Does not require a login."""
    session = load_session()

    try:
        with make_client(session) as client:
            if mode == "mcp":
                report = client.health_mcp()
            elif mode == "full":
                report = client.health_full()
            else:
                report = client.health_quick()
    except APIError as e:
        click.echo(f"Error: Health check failed: {e}", err=True)
        click.echo(f"API URL: {session.api_url}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(report.model_dump(), indent=2))
        return

    if mode == "mcp":
        click.echo("MCP / AI Agents")
        click.echo(f"  Status:  {_status(report.status)}")
        click.echo(f"  MCP:     {'enabled' if report.mcp_enabled else 'disabled'}")
        click.echo(f"  Agents:  {report.agents.total_agents} active")
    elif mode == "full":
        summary = report.summary
        if summary.healthy_layers == summary.total_layers:
            click.echo(f"{summary.total_layers} Layers Healthy")
        else:
            click.echo(f"{summary.healthy_layers}/{summary.total_layers} Healthy")
        click.echo(f"  API: {session.api_url}\n")
        for name, layer in report.layers.items():
            display = name.removeprefix("layer_").replace("_", " ")
            click.echo(f"  {display:<20} {_status(layer.status)}")
    else:
        click.echo("System Health")
        click.echo(f"  Status:    {_status(report.status)}")
        click.echo(f"  API:       {session.api_url}")
        click.echo(f"  Timestamp: {report.timestamp or '-'}")
        if report.status == "healthy":
            click.echo("\n  Run `solid health --full` for the detailed layer check")
