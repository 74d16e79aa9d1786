"""Transaction listing commands."""

import click
from ledgerkit.cli.date_filters import PERIODS, resolve_cli_date_range
from ledgerkit.cli.error_handling import handle_domain_error
from ledgerkit.domain.errors import DomainError
from ledgerkit.domain.ledger import LedgerService
from ledgerkit.utils.date_parser import format_statement_date


@click.group()
def transaction_group():
    """Inspect transactions."""
    pass


@transaction_group.command("list")
@click.option("--account", help="Only transactions owned by this account")
@click.option("--start", "start_date", help="Start date (e.g. 01.01.2024 or 'last month')")
@click.option("--end", "end_date", help="End date (e.g. 31.01.2024 or 'today')")
@click.option("--period", type=click.Choice(PERIODS), help="Named date range")
@click.pass_context
def list_transactions(
    ctx,
    account: str | None,
    start_date: str | None,
    end_date: str | None,
    period: str | None,
):
    """List transactions, newest first.

    Examples:
        ledgerkit transaction list --account Giro
        ledgerkit transaction list --period last-month
        ledgerkit transaction list --start 01.01.2024 --end 31.03.2024
    """
    service = LedgerService(ctx.obj["db"])
    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period=period
    )

    try:
        transactions = service.list_transactions(
            account_name=account, start_date=start, end_date=end
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not transactions:
        click.echo("No transactions found.")
        return

    accounts = {a.id: a.name for a in service.list_accounts()}
    categories = {c.id: c.name for c in service.list_categories()}

    click.echo(f"{'Date':10s} | {'Account':12s} | {'Amount':>10s} | {'Type':8s} | {'Category':15s} | Usage")
    click.echo("-" * 90)
    for txn in transactions:
        account_name = accounts.get(txn.account_id, "?")
        if txn.target_account_id is not None:
            account_name = f"{account_name}>{accounts.get(txn.target_account_id, '?')}"
        click.echo(
            f"{format_statement_date(txn.date):10s} | {account_name:12s} | {txn.amount:>10} | "
            f"{txn.type:8s} | {categories.get(txn.category_id, '?'):15s} | {txn.usage or ''}"
        )
    click.echo(f"\n{len(transactions)} transactions")


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
