"""Snapshot export, restore and merge commands."""

from pathlib import Path

import click
from ledgerkit.cli.error_handling import handle_domain_error
from ledgerkit.domain.errors import DomainError
from ledgerkit.domain.reconcile import Reconciler, Strategy
from ledgerkit.domain.snapshot import (
    capture_snapshot,
    read_snapshot,
    restore_snapshot,
    write_snapshot,
)

STRATEGY_CHOICES = [s.value for s in Strategy]
DESTRUCTIVE_STRATEGIES = (Strategy.REPLACE, Strategy.ASK_USER)


@click.group()
def snapshot_group():
    """Export and reconcile ledger snapshots."""
    pass


@snapshot_group.command("export")
@click.argument("output", type=click.Path(dir_okay=False))
@click.pass_context
def export_snapshot(ctx, output: str):
    """Write the whole ledger to a JSON snapshot file.

    Examples:
        ledgerkit snapshot export ledger.json
    """
    db = ctx.obj["db"]
    with db.unit_of_work() as session:
        snapshot = capture_snapshot(session)

    try:
        path = write_snapshot(snapshot, output)
    except OSError as e:
        handle_domain_error(ctx, e)

    counts = snapshot.counts()
    click.echo(
        f"Exported {counts['account_groups']} groups, {counts['accounts']} accounts, "
        f"{counts['categories']} categories, {counts['transactions']} transactions to {path}"
    )


@snapshot_group.command("restore")
@click.argument("snapshot_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def restore(ctx, snapshot_file: str, yes: bool):
    """Replace the whole ledger with the content of a snapshot file.

    Entities whose references cannot be resolved are skipped with a warning.
    """
    db = ctx.obj["db"]
    settings = ctx.obj["settings"]

    try:
        snapshot = read_snapshot(snapshot_file)
    except (DomainError, OSError) as e:
        handle_domain_error(ctx, e)

    if not yes and not click.confirm("This deletes all local data. Continue?"):
        click.echo("Restore cancelled.")
        return

    try:
        with db.unit_of_work() as session:
            stats = restore_snapshot(
                session, snapshot, default_category=settings.default_category
            )
            session.commit()
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Restored {stats.added['transactions']} transactions from {Path(snapshot_file).name}")
    skipped = sum(stats.skipped.values())
    if skipped:
        click.echo(f"  Skipped {skipped} entities with unresolved references", err=True)


@snapshot_group.command("merge")
@click.argument("snapshot_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--strategy",
    type=click.Choice(STRATEGY_CHOICES),
    help="Conflict resolution strategy (defaults to LEDGERKIT_MERGE_STRATEGY or 'merge')",
)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def merge(ctx, snapshot_file: str, strategy: str | None, yes: bool):
    """Reconcile a snapshot from another device into the local ledger.

    Examples:
        ledgerkit snapshot merge phone.json
        ledgerkit snapshot merge phone.json --strategy replace --yes
    """
    db = ctx.obj["db"]
    settings = ctx.obj["settings"]
    chosen = Strategy.parse(strategy or settings.merge_strategy)

    if chosen in DESTRUCTIVE_STRATEGIES and not yes:
        if not click.confirm(f"Strategy '{chosen.value}' replaces all local data. Continue?"):
            click.echo("Merge cancelled.")
            return

    reconciler = Reconciler(db, default_category=settings.default_category)
    result = reconciler.reconcile_file(snapshot_file, chosen)

    if not result.success:
        click.echo(f"Error: Reconciliation failed: {result.error}", err=True)
        ctx.exit(1)

    click.echo(f"Reconciliation {result.status} ({result.strategy.value})")
    for kind, added in result.added.items():
        click.echo(f"  {kind}: {added} added, {result.skipped.get(kind, 0)} skipped")
    if result.pending_decision:
        click.echo("  Conflicts were resolved by replacing local data; review the ledger.")


def register_commands(cli):
    """Register snapshot commands with main CLI."""
    cli.add_command(snapshot_group, name="snapshot")
