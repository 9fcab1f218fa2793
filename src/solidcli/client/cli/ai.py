"""AI commands for the Solid CLI.

Commands:
- vibe: Describe a change in plain language, preview it and apply it
- agent chat: Send a message to one of the company's AI agents
"""

from __future__ import annotations

import json
import sys

import click

from solidcli.client.api import APIError, HTTPClient
from solidcli.client.cli.config import load_session, make_client, require_company

DEFAULT_AGENT = "sarah"


@click.command()
@click.argument("prompt", nargs=-1)
@click.option("--preview", is_flag=True, help="Preview without applying.")
@click.option("--json", "as_json", is_flag=True, help="Output the analysis as JSON.")
@click.option("--yes", "-y", is_flag=True, help="Apply without asking.")
def vibe(prompt: tuple[str, ...], preview: bool, as_json: bool, yes: bool) -> None:
    """Natural language changes to your business.

    Example: solid vibe add a FAQ about parking
    """
    session = load_session()
    require_company(session)

    text = " ".join(prompt) or click.prompt("What would you like to do?")

    with make_client(session) as client:
        try:
            analysis = client.vibe_analyze(text)
        except APIError as e:
            click.echo(f"Error: Analysis failed: {e}", err=True)
            sys.exit(1)

        if as_json:
            click.echo(json.dumps(analysis.model_dump(), indent=2))
            return

        if analysis.safety_check.blocked:
            reason = analysis.safety_check.message or "Safety check failed"
            click.echo(f"Error: Request blocked: {reason}", err=True)
            sys.exit(1)

        click.echo("Intent:")
        click.echo(f"  Action: {analysis.intent.action or 'unknown'}")
        click.echo(f"  Entity: {analysis.intent.entity_type or 'unknown'}")
        if analysis.parsed:
            click.echo("\nParsed:")
            for key, value in analysis.parsed.items():
                click.echo(f"  {key}: {json.dumps(value)}")

        if preview:
            click.echo("\nPreview mode - no changes applied")
            return
        if not analysis.preview_id:
            return

        if not yes and not click.confirm("\nApply these changes?", default=False):
            click.echo("Changes not applied")
            return

        try:
            result = client.vibe_apply(analysis.preview_id)
        except APIError as e:
            click.echo(f"Error: Failed to apply changes: {e}", err=True)
            sys.exit(1)

    if not result.success:
        click.echo(f"Error: Failed to apply changes: {result.message}", err=True)
        sys.exit(1)
    click.echo(click.style("Changes applied", fg="green"))
    if result.message:
        click.echo(f"  {result.message}")


@click.group()
def agent() -> None:
    """Talk to your AI agents."""


@agent.command()
@click.argument("message", nargs=-1)
@click.option("--agent", "agent_name", default=DEFAULT_AGENT, show_default=True, help="Agent to talk to.")
def chat(message: tuple[str, ...], agent_name: str) -> None:
    """Send a message to an agent and print its reply.

    Without MESSAGE, starts an interactive session; type "exit" to quit.
    """
    session = load_session()
    require_company(session)

    with make_client(session) as client:
        if message:
            _chat_once(client, " ".join(message), agent_name)
            return

        click.echo(f"Chatting with {agent_name}. Type 'exit' to quit.")
        while True:
            text = click.prompt(">", prompt_suffix=" ").strip()
            if text.lower() in ("exit", "quit"):
                break
            if text:
                _chat_once(client, text, agent_name)


def _chat_once(client: HTTPClient, text: str, agent_name: str) -> None:
    try:
        reply = client.agent_chat(text, agent=agent_name)
    except APIError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    click.echo(f"{click.style(agent_name, bold=True)}: {reply.response}")
