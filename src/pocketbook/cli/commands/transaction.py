"""Transaction management commands."""

import click

from pocketbook.cli.date_filters import resolve_cli_date_range
from pocketbook.cli.error_handling import handle_domain_error
from pocketbook.cli.resolution import resolve_account_or_exit, resolve_category_or_exit
from pocketbook.domain.account import AccountService
from pocketbook.domain.category import CategoryService
from pocketbook.domain.entities import TransactionType
from pocketbook.domain.errors import DomainError
from pocketbook.domain.transaction import TransactionService
from pocketbook.utils.amount_parser import parse_amount, split_signed_amount
from pocketbook.utils.date_parser import parse_date

TYPE_CHOICES = {"income": TransactionType.INCOME, "expense": TransactionType.EXPENSE}


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("add")
@click.option("--account", required=True, help="Account name or ID")
@click.option("--category", required=True, help="Category ID or path (e.g., 'Food & Dining > Groceries')")
@click.option("--amount", required=True, help="Amount (e.g., 12.50; negative means expense unless --type is given)")
@click.option(
    "--type",
    "txn_type",
    type=click.Choice(list(TYPE_CHOICES), case_sensitive=False),
    help="Transaction type (defaults from the sign of --amount)",
)
@click.option(
    "--date",
    "txn_date",
    default="today",
    help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')",
)
@click.option("--description", help="Transaction description")
@click.pass_context
def add_transaction(
    ctx,
    account: str,
    category: str,
    amount: str,
    txn_type: str | None,
    txn_date: str,
    description: str | None,
):
    """Add a transaction.

    Examples:
        pocketbook transaction add --account 1 --category "Food & Dining" --amount -42.10
        pocketbook transaction add --account Checking --category Salary --amount 3000 --type income
    """
    db = ctx.obj["db"]
    transaction_service = TransactionService(db)
    account_service = AccountService(db)
    category_service = CategoryService(db)

    account_id = resolve_account_or_exit(ctx, account_service, account)
    category_id = resolve_category_or_exit(ctx, category_service, account_id, category)

    try:
        parsed_date = parse_date(txn_date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    try:
        magnitude, resolved_type = split_signed_amount(
            parse_amount(amount), TYPE_CHOICES[txn_type.lower()] if txn_type else None
        )
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    try:
        txn = transaction_service.create_transaction(
            account_id=account_id,
            category_id=category_id,
            amount=magnitude,
            transaction_type=resolved_type,
            date=parsed_date,
            description=description,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created transaction {txn.id}")
    click.echo(f"  Date: {txn.date}")
    click.echo(f"  {txn.transaction_type.value}: {txn.amount:,.2f}")
    click.echo(f"  Category: {category_service.format_category_path(category_id)}")
    if description:
        click.echo(f"  Description: {description}")


@transaction_group.command("list")
@click.option("--account", help="Account name or ID")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@click.pass_context
def list_transactions(ctx, account: str | None, start_date: str | None, end_date: str | None):
    """List transactions, oldest first."""
    db = ctx.obj["db"]
    service = TransactionService(db)
    category_service = CategoryService(db)

    account_id = None
    if account is not None:
        account_id = resolve_account_or_exit(ctx, AccountService(db), account)

    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period_flags={}
    )

    try:
        transactions = service.query(account_id=account_id, start_date=start, end_date=end)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not transactions:
        click.echo("No transactions found.")
        return

    for txn in transactions:
        category_path = (
            category_service.format_category_path(txn.category_id)
            if txn.category_id is not None
            else "Uncategorized"
        )
        click.echo(
            f"{txn.id:5d} | {txn.date} | {txn.signed_amount:>12,.2f} | "
            f"{category_path:30s} | {txn.description or ''}"
        )


@transaction_group.command("update")
@click.argument("transaction_id", type=int)
@click.option("--category", help="New category ID or path")
@click.option("--amount", help="New amount magnitude")
@click.option("--type", "txn_type", type=click.Choice(list(TYPE_CHOICES), case_sensitive=False))
@click.option("--date", "txn_date", help="New date")
@click.option("--description", help="New description")
@click.pass_context
def update_transaction(
    ctx,
    transaction_id: int,
    category: str | None,
    amount: str | None,
    txn_type: str | None,
    txn_date: str | None,
    description: str | None,
) -> None:
    """Update a transaction.

    Updates only the fields that are provided.
    """
    db = ctx.obj["db"]
    service = TransactionService(db)

    try:
        txn = service.require_transaction(transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)

    category_id = None
    if category is not None:
        category_id = resolve_category_or_exit(ctx, CategoryService(db), txn.account_id, category)

    try:
        parsed_date = parse_date(txn_date) if txn_date is not None else None
        parsed_amount = parse_amount(amount) if amount is not None else None
        service.update_transaction(
            transaction_id,
            category_id=category_id,
            amount=parsed_amount,
            transaction_type=TYPE_CHOICES[txn_type.lower()] if txn_type else None,
            date=parsed_date,
            description=description,
        )
        click.echo(f"Updated transaction {transaction_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("delete")
@click.argument("transaction_id", type=int)
@click.pass_context
def delete_transaction(ctx, transaction_id: int) -> None:
    """Delete a transaction."""
    service = TransactionService(ctx.obj["db"])
    try:
        service.delete_transaction(transaction_id)
        click.echo(f"Deleted transaction {transaction_id}")
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
