"""Main CLI entry point."""

import logging

import click
from ledgerkit.config import load_settings
from ledgerkit.database.factories import create_sqlite_database
from ledgerkit.domain.errors import DomainError
from ledgerkit.cli.error_handling import handle_domain_error

# Import and register all commands at module level
from ledgerkit.cli.commands import (
    account,
    category,
    import_cmd,
    snapshot,
    transaction,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides LEDGERKIT_DB_PATH environment variable)",
    envvar="LEDGERKIT_DB_PATH",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr")
@click.pass_context
def cli(ctx, db_path: str | None, verbose: bool):
    """Ledgerkit - Bank statement import and ledger reconciliation.

    Import locale-formatted bank CSV exports into a local ledger, and merge
    ledger snapshots from other devices.
    """
    ctx.ensure_object(dict)

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = load_settings()
    except DomainError as e:
        handle_domain_error(ctx, e)
    if db_path is not None:
        settings.database_path = db_path
    ctx.obj["settings"] = settings

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=settings.database_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
account.register_commands(cli)
category.register_commands(cli)
import_cmd.register_commands(cli)
transaction.register_commands(cli)
snapshot.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
