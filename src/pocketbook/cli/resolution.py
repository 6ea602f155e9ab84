"""CLI helpers for resolving account and category references."""

from __future__ import annotations

import click

from pocketbook.cli.error_handling import handle_domain_error
from pocketbook.domain.account import AccountService
from pocketbook.domain.category import CategoryService
from pocketbook.domain.errors import CrossAccountError, DomainError, category_in_other_account
from pocketbook.utils.account_resolver import resolve_account


def resolve_account_or_exit(
    ctx: click.Context, account_service: AccountService, account: str | int
) -> int:
    """Resolve account name or ID, or exit with a CLI error.

    This keeps error messaging and exit behavior consistent across commands.
    """
    try:
        return resolve_account(account_service, account)
    except DomainError as exc:
        handle_domain_error(ctx, exc)


def resolve_category_or_exit(
    ctx: click.Context, category_service: CategoryService, account_id: int, category: str
) -> int:
    """Resolve a category ID or path ("Food > Groceries") within an account."""
    try:
        if category.strip().isdigit():
            category_id = int(category)
            found = category_service.require_category(category_id)
            if found.account_id != account_id:
                raise CrossAccountError(category_in_other_account(category_id, account_id))
            return category_id
        return category_service.require_category_by_path(account_id, category).id
    except DomainError as exc:
        handle_domain_error(ctx, exc)
