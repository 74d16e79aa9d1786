"""Account group and account management commands."""

import click
from ledgerkit.cli.error_handling import handle_domain_error
from ledgerkit.domain.errors import DomainError
from ledgerkit.domain.ledger import LedgerService


@click.group()
def group_group():
    """Manage account groups."""
    pass


@group_group.command("create")
@click.argument("name", metavar="GROUP_NAME")
@click.pass_context
def create_group(ctx, name: str):
    """Create a new account group.

    Examples:
        ledgerkit group create "Business"
    """
    service = LedgerService(ctx.obj["db"])
    try:
        group = service.create_account_group(name)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created account group '{group.name}' (ID: {group.id})")


@group_group.command("list")
@click.pass_context
def list_groups(ctx):
    """List all account groups with their accounts."""
    service = LedgerService(ctx.obj["db"])

    groups = service.list_account_groups()
    if not groups:
        click.echo("No account groups found.")
        return

    accounts = service.list_accounts()
    click.echo("\nAccount groups:")
    click.echo("-" * 60)
    for group in groups:
        names = [a.name for a in accounts if a.group_id == group.id]
        click.echo(f"ID: {group.id:3d} | {group.name:20s} | {', '.join(names) or '-'}")


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option("--group", "group_name", required=True, help="Account group the account belongs to")
@click.option("--type", "account_type", help="Account type tag (e.g. bank, cash)")
@click.option(
    "--exclude-from-balance",
    is_flag=True,
    help="Do not count this account towards the total balance",
)
@click.pass_context
def create_account(
    ctx, name: str, group_name: str, account_type: str | None, exclude_from_balance: bool
):
    """Create a new account.

    Examples:
        ledgerkit account create "Giro" --group "Business" --type bank
        ledgerkit account create "Bargeld" --group "Business" --type cash
    """
    service = LedgerService(ctx.obj["db"])
    try:
        account = service.create_account(
            name=name,
            group_name=group_name,
            account_type=account_type,
            include_in_balance=not exclude_from_balance,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created account '{account.name}' in group '{group_name}' (ID: {account.id})")


@account_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List all accounts with their balances."""
    service = LedgerService(ctx.obj["db"])

    accounts = service.list_accounts()
    if not accounts:
        click.echo("No accounts found.")
        return

    groups = {g.id: g.name for g in service.list_account_groups()}
    click.echo("\nAccounts:")
    click.echo("-" * 70)
    for acc in accounts:
        balance = service.get_balance(acc.name)
        marker = "" if acc.include_in_balance else " (excluded)"
        click.echo(
            f"ID: {acc.id:3d} | {acc.name:20s} | Group: {groups.get(acc.group_id, '?'):15s} "
            f"| Balance: {balance:>12}{marker}"
        )
    click.echo("-" * 70)
    click.echo(f"Total balance: {service.get_total_balance()}")


def register_commands(cli):
    """Register group and account commands with main CLI."""
    cli.add_command(group_group, name="group")
    cli.add_command(account_group, name="account")
