"""Reporting commands."""

import click

from pocketbook.cli.date_filters import period_options, resolve_cli_date_range
from pocketbook.cli.error_handling import handle_domain_error
from pocketbook.cli.resolution import resolve_account_or_exit
from pocketbook.domain.account import AccountService
from pocketbook.domain.context import RequestContext
from pocketbook.domain.entities import Granularity
from pocketbook.domain.errors import DomainError
from pocketbook.domain.trends import TrendService


def _scope(ctx, account: str | None) -> tuple[int | None, RequestContext]:
    account_service = AccountService(ctx.obj["db"])
    context = RequestContext.for_accounts(acc.id for acc in account_service.list_accounts())
    account_id = None
    if account is not None:
        account_id = resolve_account_or_exit(ctx, account_service, account)
    return account_id, context


@click.group()
def report_group():
    """Spending reports."""
    pass


@report_group.command("trend")
@click.option("--account", help="Account name or ID (default: all accounts)")
@click.option("--yearly", is_flag=True, help="Group by year instead of month")
@click.pass_context
def spending_trend(ctx, account: str | None, yearly: bool):
    """Show total expenses per month (or year)."""
    account_id, context = _scope(ctx, account)
    granularity = Granularity.YEARLY if yearly else Granularity.MONTHLY

    try:
        points = TrendService(ctx.obj["db"]).spending_trend(
            granularity, account_id=account_id, context=context
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not points:
        click.echo("No expenses found.")
        return

    for point in points:
        click.echo(f"{point.period:<10} {point.amount:>14,.2f}")


@report_group.command("distribution")
@click.option("--account", help="Account name or ID (default: all accounts)")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")
@period_options
@click.pass_context
def category_distribution(
    ctx,
    account: str | None,
    start_date: str | None,
    end_date: str | None,
    this_month: bool,
    this_year: bool,
    last_month: bool,
    last_year: bool,
):
    """Show expenses per top-level category."""
    account_id, context = _scope(ctx, account)
    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags={
            "this-month": this_month,
            "this-year": this_year,
            "last-month": last_month,
            "last-year": last_year,
        },
    )

    try:
        rows = TrendService(ctx.obj["db"]).category_distribution(
            start_date=start, end_date=end, account_id=account_id, context=context
        )
    except DomainError as e:
        handle_domain_error(ctx, e)

    if not rows:
        click.echo("No expenses found.")
        return

    total = sum(row.amount for row in rows)
    for row in rows:
        share = row.amount / total * 100 if total else 0
        click.echo(f"{row.category:<30} {row.amount:>14,.2f} {share:>6.1f}%")


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(report_group, name="report")
