"""Budget commands."""

import click

from pocketbook.cli.error_handling import handle_domain_error
from pocketbook.cli.resolution import resolve_account_or_exit
from pocketbook.domain.account import AccountService
from pocketbook.domain.budget import BudgetService
from pocketbook.domain.context import RequestContext
from pocketbook.domain.errors import DomainError, NotFoundError
from pocketbook.utils.amount_parser import parse_amount
from pocketbook.utils.date_parser import BUDGET_PERIODS, day_window, parse_date


def _budget_service(ctx, threshold: float | None = None) -> BudgetService:
    settings = ctx.obj["settings"]
    try:
        return BudgetService(
            ctx.obj["db"],
            warning_threshold=threshold if threshold is not None else settings.warning_threshold,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)


@click.group()
def budget_group():
    """Manage budgets and alerts."""
    pass


@budget_group.command("set")
@click.option("--account", required=True, help="Account name or ID")
@click.option("--limit", "limit_str", required=True, help="Spending limit")
@click.option(
    "--period",
    type=click.Choice(BUDGET_PERIODS, case_sensitive=False),
    help="Use the current calendar month or year as the window",
)
@click.option("--start-date", help="Window start date (inclusive)")
@click.option("--end-date", help="Window end date (inclusive)")
@click.pass_context
def set_budget(
    ctx,
    account: str,
    limit_str: str,
    period: str | None,
    start_date: str | None,
    end_date: str | None,
):
    """Set a budget for an account.

    Either --period or both --start-date and --end-date must be given.

    Examples:
        pocketbook budget set --account Checking --limit 500 --period monthly
        pocketbook budget set --account 1 --limit 6000 --start-date 2024-01-01 --end-date 2024-12-31
    """
    db = ctx.obj["db"]
    account_id = resolve_account_or_exit(ctx, AccountService(db), account)
    service = _budget_service(ctx)

    if period and (start_date or end_date):
        click.echo("Error: --period cannot be combined with --start-date or --end-date", err=True)
        ctx.exit(1)
    if not period and not (start_date and end_date):
        click.echo("Error: Specify --period or both --start-date and --end-date", err=True)
        ctx.exit(1)

    try:
        limit = parse_amount(limit_str)
        if period:
            budget = service.set_budget_for_period(account_id, limit, period.lower())
        else:
            start, end = day_window(parse_date(start_date), parse_date(end_date))
            budget = service.set_budget(account_id, limit, start, end)
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(
        f"Set budget {budget.id}: {budget.limit:,.2f} from {budget.start:%Y-%m-%d} "
        f"to {budget.end:%Y-%m-%d}"
    )


@budget_group.command("check")
@click.option("--account", required=True, help="Account name or ID")
@click.pass_context
def check_budget(ctx, account: str):
    """Show spending against the account's active budget."""
    db = ctx.obj["db"]
    account_id = resolve_account_or_exit(ctx, AccountService(db), account)
    service = _budget_service(ctx)

    try:
        status = service.check_budget(account_id)
    except NotFoundError as e:
        click.echo(str(e))
        return

    click.echo(f"Limit:      {status.budget_limit:>12,.2f}")
    click.echo(f"Spent:      {status.total_expenses:>12,.2f}")
    click.echo(f"Remaining:  {status.remaining_budget:>12,.2f}")
    click.echo(f"Used:       {status.percentage_used:>11.1f}%")
    if status.is_exceeded:
        click.echo("Budget exceeded!")


@budget_group.command("list")
@click.option("--account", required=True, help="Account name or ID")
@click.pass_context
def list_budgets(ctx, account: str):
    """List all budgets of an account with their state."""
    db = ctx.obj["db"]
    account_id = resolve_account_or_exit(ctx, AccountService(db), account)
    service = _budget_service(ctx)

    budgets = service.list_budgets(account_id)
    if not budgets:
        click.echo("No budgets found.")
        return

    for budget in budgets:
        click.echo(
            f"{budget.id:4d} | {budget.start:%Y-%m-%d} - {budget.end:%Y-%m-%d} | "
            f"{budget.limit:>10,.2f} | {service.get_state(budget).value}"
        )


@budget_group.command("alerts")
@click.option("--threshold", type=float, help="Warning threshold percentage (default from settings)")
@click.pass_context
def budget_alerts(ctx, threshold: float | None):
    """Show budget alerts for all accounts."""
    db = ctx.obj["db"]
    service = _budget_service(ctx, threshold)
    context = RequestContext.for_accounts(acc.id for acc in AccountService(db).list_accounts())

    alerts = service.budget_alerts(context)
    if not alerts:
        click.echo("No budget alerts.")
        return

    for alert in alerts:
        click.echo(f"[{alert.severity.value.upper()}] {alert.message}")


def register_commands(cli):
    """Register budget commands with main CLI."""
    cli.add_command(budget_group, name="budget")
