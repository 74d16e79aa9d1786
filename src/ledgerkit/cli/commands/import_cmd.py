"""Statement import command."""

from pathlib import Path

import click
from ledgerkit.cli.error_handling import handle_domain_error
from ledgerkit.domain.backup import BackupService
from ledgerkit.domain.csv_import import StatementImportService
from ledgerkit.domain.errors import DomainError


@click.command("import")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--backup-dir",
    type=click.Path(file_okay=False),
    help="Directory for the automatic post-import backup (overrides LEDGERKIT_BACKUP_DIR)",
)
@click.option("--no-backup", is_flag=True, help="Skip the automatic post-import backup")
@click.pass_context
def import_csv(ctx, csv_file: str, backup_dir: str | None, no_backup: bool):
    """Import transactions from a bank statement CSV file.

    The delimiter and column layout are detected from the header line.
    Rows already present in the ledger are skipped.

    Examples:
        ledgerkit import statement.csv
        ledgerkit import statement.csv --backup-dir ./backups
    """
    db = ctx.obj["db"]
    settings = ctx.obj["settings"]

    backup_service = None
    if not no_backup:
        backup_service = BackupService(db, Path(backup_dir) if backup_dir else settings.backup_dir)

    service = StatementImportService(db, settings=settings, backup_service=backup_service)

    try:
        result = service.import_file(csv_file)
    except (DomainError, FileNotFoundError) as e:
        handle_domain_error(ctx, e)

    click.echo("\nImport complete:")
    click.echo(f"  Imported: {len(result.imported)} transactions")
    click.echo(f"  Skipped: {len(result.skipped)} duplicates")
    for record in result.imported:
        click.echo(f"    + {record.date} {record.account:12s} {record.amount:>10} {record.category}")
    if result.errors:
        click.echo(f"  Errors: {len(result.errors)}")
        for error in result.errors:
            click.echo(f"    {error}", err=True)


def register_commands(cli):
    """Register import command with main CLI."""
    cli.add_command(import_csv)
