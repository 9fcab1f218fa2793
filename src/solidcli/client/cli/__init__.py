"""Command-line interface for the Solid CLI.

This module provides the main CLI entry point and assembles all commands.

Commands:
- auth: login, logout, status, config
- pull: Download company data as local files
- push: Push local file changes
- status: Company setup overview
- switch: Switch the active company
- kb: list, add, delete knowledge-base entries
- pages: list, publish, unpublish pages
- services: list the service catalog
- vibe: Natural language changes
- agent: chat with AI agents
- health: API health checks
"""

from __future__ import annotations

import logging

import click

from solidcli import __version__
from solidcli.client.cli.ai import agent, vibe
from solidcli.client.cli.auth import auth
from solidcli.client.cli.company import status, switch
from solidcli.client.cli.config import (
    get_config_dir,
    get_session_store,
    load_session,
)
from solidcli.client.cli.health import health
from solidcli.client.cli.kb import kb
from solidcli.client.cli.pages import pages, services
from solidcli.client.cli.sync import pull, push


class ClickEchoHandler(logging.Handler):
    """Logging handler writing through click.echo to stderr.

    Keeps log lines on the same stream click uses for errors, including
    under CliRunner.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            click.echo(self.format(record), err=True)
        except Exception:
            self.handleError(record)


def configure_logging(verbosity: int) -> None:
    """Route the solidcli logger to stderr.

    Args:
        verbosity: 0 for warnings, 1 for info, 2+ for debug.
    """
    level = {0: logging.WARNING, 1: logging.INFO}.get(verbosity, logging.DEBUG)

    handler = ClickEchoHandler()
    handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))

    solid_logger = logging.getLogger("solidcli")
    for existing in solid_logger.handlers[:]:
        solid_logger.removeHandler(existing)
    solid_logger.addHandler(handler)
    solid_logger.setLevel(level)
    solid_logger.propagate = False


@click.group()
@click.version_option(__version__, prog_name="solid")
@click.option("--verbose", "-v", count=True, help="More log output (-vv for debug).")
def cli(verbose: int) -> None:
    """Solid# CLI - manage your business from the terminal."""
    configure_logging(verbose)


# Auth and company commands
cli.add_command(auth)
cli.add_command(status)
cli.add_command(switch)

# Sync commands
cli.add_command(pull)
cli.add_command(push)

# Content commands
cli.add_command(kb)
cli.add_command(pages)
cli.add_command(services)

# AI commands
cli.add_command(vibe)
cli.add_command(agent)

# Diagnostics
cli.add_command(health)


def main() -> None:
    """Entry point for the CLI."""
    cli()


__all__ = [
    # Main entry points
    "cli",
    "main",
    # Config utilities
    "configure_logging",
    "get_config_dir",
    "get_session_store",
    "load_session",
]
