"""Account management commands."""

import click

from pocketbook.cli.error_handling import handle_domain_error
from pocketbook.cli.resolution import resolve_account_or_exit
from pocketbook.domain.account import AccountService
from pocketbook.domain.errors import DomainError
from pocketbook.utils.amount_parser import parse_amount


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option("--balance", default="0", help="Opening balance (default: 0)")
@click.pass_context
def create_account(ctx, name: str, balance: str):
    """Create a new account.

    Examples:
        pocketbook account create "Checking"
        pocketbook account create "Savings" --balance 2500.00
    """
    db = ctx.obj["db"]
    service = AccountService(db)

    try:
        opening = parse_amount(balance)
        account = service.create_account(name=name, balance=opening)
        click.echo(f"Created account '{account.name}' (ID: {account.id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List all accounts."""
    db = ctx.obj["db"]
    service = AccountService(db)

    accounts = service.list_accounts()
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 60)
    for acc in accounts:
        click.echo(f"ID: {acc.id:3d} | {acc.name:20s} | Balance: {acc.balance:,.2f}")


@account_group.command("set-balance")
@click.argument("account", metavar="ACCOUNT")
@click.argument("balance", metavar="BALANCE")
@click.pass_context
def set_balance(ctx, account: str, balance: str) -> None:
    """Set the balance of an account.

    The balance is maintained by hand; adding transactions does not change it.

    Examples:
        pocketbook account set-balance "Checking" 1234.56
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)

    try:
        updated = service.set_balance(account_id, parse_amount(balance))
        click.echo(f"Balance of '{updated.name}' set to {updated.balance:,.2f}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_account(ctx, account: str, yes: bool) -> None:
    """Delete an account.

    ACCOUNT can be an account name or ID. The account can only be deleted
    once it has no categories, transactions or budgets.
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)
    account_obj = service.get_account(account_id)

    if not yes and not click.confirm(
        f"Are you sure you want to delete account '{account_obj.name}' (ID: {account_id})?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_account(account_id)
        click.echo(f"Deleted account '{account_obj.name}'")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
