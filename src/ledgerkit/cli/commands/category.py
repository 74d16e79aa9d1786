"""Category management commands."""

import click
from ledgerkit.cli.error_handling import handle_domain_error
from ledgerkit.domain.errors import DomainError
from ledgerkit.domain.ledger import LedgerService


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("create")
@click.argument("name", metavar="CATEGORY_NAME")
@click.pass_context
def create_category(ctx, name: str):
    """Create a new category.

    Examples:
        ledgerkit category create "Rent"
    """
    service = LedgerService(ctx.obj["db"])
    try:
        category = service.create_category(name)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created category '{category.name}' (ID: {category.id})")


@category_group.command("list")
@click.pass_context
def list_categories(ctx):
    """List all categories."""
    service = LedgerService(ctx.obj["db"])

    categories = service.list_categories()
    if not categories:
        click.echo("No categories found.")
        return

    click.echo("\nCategories:")
    click.echo("-" * 40)
    for cat in categories:
        click.echo(f"ID: {cat.id:3d} | {cat.name}")


@category_group.command("init")
@click.pass_context
def init_categories(ctx):
    """Create the reserved 'Other' and 'Income' categories if missing."""
    service = LedgerService(ctx.obj["db"])
    created = service.ensure_default_categories()
    click.echo(f"Created {created} default categories")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
