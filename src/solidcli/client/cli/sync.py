"""Pull and push commands for the Solid CLI.

Commands:
- pull: Download company data as local files
- push: Push local file changes to the company
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from solidcli.client.api import APIError
from solidcli.client.cli.config import load_session, make_client, require_company
from solidcli.client.sync import (
    ChangeSet,
    CorruptLocalFileError,
    CorruptManifestError,
    KindStatus,
    ManifestNotFoundError,
    PullMaterializer,
    PushDispatcher,
    PushResult,
    TenantMismatchError,
    detect_changes,
    load_manifest,
    verify_ownership,
)
from solidcli.core.types import ALL_KINDS, PUSHABLE_KINDS, ChangeAction, ResourceKind

DIR_OPTION_TYPE = click.Path(file_okay=False, path_type=Path)


def _pull_scope(pages_only: bool, kb_only: bool) -> tuple[ResourceKind, ...]:
    if not pages_only and not kb_only:
        return ALL_KINDS
    kinds = []
    if pages_only:
        kinds.append(ResourceKind.PAGES)
    if kb_only:
        kinds.append(ResourceKind.KB)
    return tuple(kinds)


def _push_scope(
    pages_only: bool, kb_only: bool, settings_only: bool
) -> tuple[tuple[ResourceKind, ...], bool]:
    """Kinds and settings flag selected by the scope options (their union)."""
    if not (pages_only or kb_only or settings_only):
        return PUSHABLE_KINDS, True
    kinds = []
    if pages_only:
        kinds.append(ResourceKind.PAGES)
    if kb_only:
        kinds.append(ResourceKind.KB)
    return tuple(kinds), settings_only


@click.command()
@click.option(
    "--dir",
    "-d",
    "directory",
    type=DIR_OPTION_TYPE,
    default=".",
    show_default=True,
    help="Output directory.",
)
@click.option("--pages-only", is_flag=True, help="Only pull pages.")
@click.option("--kb-only", is_flag=True, help="Only pull the knowledge base.")
@click.option(
    "--force",
    is_flag=True,
    help="Overwrite a project that belongs to another company.",
)
def pull(directory: Path, pages_only: bool, kb_only: bool, force: bool) -> None:
    """Download your business data as local files.

    Writes pages, knowledge-base entries, services, products and website
    settings under DIR and records their ids in .solid/manifest.json.
    """
    session = load_session()
    company_id = require_company(session)

    with make_client(session) as client:
        try:
            result = PullMaterializer(client, session).pull(
                directory, _pull_scope(pages_only, kb_only), force=force
            )
        except TenantMismatchError as e:
            click.echo(f"Error: {e}", err=True)
            click.echo(
                "Use --force to overwrite, or switch to a different directory.",
                err=True,
            )
            sys.exit(1)
        except CorruptManifestError as e:
            click.echo(f"Error: {e}", err=True)
            click.echo("Use --force to replace it.", err=True)
            sys.exit(1)
        except APIError as e:
            click.echo(f"Error: Failed to pull company info: {e}", err=True)
            sys.exit(1)

    click.echo(f"  {result.company_name} - solid.config.json")
    for report in result.reports:
        name = report.kind.value
        if report.status is KindStatus.SKIPPED:
            continue
        if report.status is KindStatus.FAILED:
            click.echo(click.style(f"  Failed to pull {name}: {report.error}", fg="red"), err=True)
        elif report.is_empty:
            click.echo(f"  No {name} yet")
        else:
            line = f"  {report.written} {name} -> ./{name}/"
            if report.skipped:
                line += click.style(f" ({report.skipped} skipped)", fg="yellow")
            click.echo(line)

    if result.unmapped_files:
        click.echo(
            click.style(
                f"  Warning: {len(result.unmapped_files)} local files are not in the "
                "new manifest and would be created by `solid push`:",
                fg="yellow",
            ),
            err=True,
        )
        for name in result.unmapped_files:
            click.echo(f"    {name}", err=True)

    click.echo(click.style(f"\nPulled {result.total_files} files", fg="green"))
    click.echo(f"Company:   {result.company_name}")
    click.echo(f"ID:        {company_id}")
    click.echo(f"Directory: {result.directory}")
    click.echo("\nNext: edit the files, then run `solid push` to deploy changes.")


def _echo_changes(changes: ChangeSet) -> None:
    click.echo("\n  Changes to push:")
    for record in changes.records:
        if record.is_settings:
            click.echo(f"    {click.style('~', fg='yellow')} {record.file} (website settings)")
            continue
        icon = (
            click.style("+", fg="green")
            if record.action is ChangeAction.CREATE
            else click.style("~", fg="yellow")
        )
        click.echo(f"    {icon} {record.display_path}")
    click.echo("")


def _echo_push_summary(result: PushResult, company_name: str) -> None:
    for failure in result.failures:
        click.echo(
            click.style(f"    Failed: {failure.record.display_path}: {failure.message}", fg="red"),
            err=True,
        )
    if result.ok:
        click.echo(click.style(f"\nPushed {result.pushed} changes", fg="green"))
        click.echo(f"Company: {company_name}")
    else:
        click.echo(
            click.style(f"\n{result.pushed} pushed, {result.errors} failed", fg="red")
        )
        click.echo("Check the error messages above and retry.")


@click.command()
@click.option(
    "--dir",
    "-d",
    "directory",
    type=DIR_OPTION_TYPE,
    default=".",
    show_default=True,
    help="Project directory.",
)
@click.option("--dry-run", is_flag=True, help="Show what would be pushed without making changes.")
@click.option("--yes", "-y", is_flag=True, help="Skip the confirmation prompt.")
@click.option("--pages-only", is_flag=True, help="Push page changes.")
@click.option("--kb-only", is_flag=True, help="Push knowledge-base changes.")
@click.option("--settings-only", is_flag=True, help="Push website settings.")
def push(
    directory: Path,
    dry_run: bool,
    yes: bool,
    pages_only: bool,
    kb_only: bool,
    settings_only: bool,
) -> None:
    """Push local file changes to your Solid# business.

    Files without a manifest entry are created, the others updated. Deleted
    files are never removed remotely. Scope options combine: --pages-only
    --kb-only pushes both.
    """
    session = load_session()
    company_id = require_company(session)
    directory = directory.resolve()

    try:
        manifest = load_manifest(directory)
        verify_ownership(manifest, company_id)
    except (ManifestNotFoundError, TenantMismatchError, CorruptManifestError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    kinds, include_settings = _push_scope(pages_only, kb_only, settings_only)
    try:
        changes = detect_changes(directory, manifest, kinds, include_settings)
    except CorruptLocalFileError as e:
        click.echo(f"Error: {e}", err=True)
        click.echo("Nothing was pushed. Fix the file and retry.", err=True)
        sys.exit(1)

    if changes.total == 0:
        click.echo("No changes detected")
        click.echo("  Edit files in your project directory, then run `solid push` again.")
        if not dry_run:
            with make_client(session) as client:
                PushDispatcher(client).push(directory, manifest, changes)
        return

    click.echo(f"Found {changes.total} changes")
    _echo_changes(changes)

    if dry_run:
        click.echo("  Dry run - no changes made.")
        return

    if not yes and not click.confirm(
        f"Push {changes.total} changes to {manifest.company_name or company_id}?",
        default=False,
    ):
        click.echo("Cancelled.")
        return

    with make_client(session) as client:
        result = PushDispatcher(client).push(directory, manifest, changes)

    _echo_push_summary(result, manifest.company_name)
    if result.total_failure:
        sys.exit(1)
