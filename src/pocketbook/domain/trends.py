"""Spending trend and distribution reports."""

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Optional

from pocketbook.database.base import Database
from pocketbook.domain.category import CategoryService
from pocketbook.domain.context import RequestContext
from pocketbook.domain.entities import (
    CategoryAmount,
    Granularity,
    SpendingPoint,
    Transaction,
    TransactionType,
)
from pocketbook.domain.errors import NotFoundError, ValidationError, account_not_found

UNCATEGORIZED = "Uncategorized"


def period_key(day: date, granularity: Granularity) -> str:
    """Return the bucket label of a date: "YYYY-MM" or "YYYY"."""
    if granularity == Granularity.MONTHLY:
        return day.strftime("%Y-%m")
    return day.strftime("%Y")


class TrendService:
    """Read-only aggregations over the ledger, recomputed on every call."""

    def __init__(self, db: Database):
        """Initialize trend service.

        Args:
            db: Database instance
        """
        self.db = db
        self.categories = CategoryService(db)

    def _scope(
        self, account_id: Optional[int], context: Optional[RequestContext]
    ) -> Optional[set[int]]:
        if account_id is not None:
            if context is not None:
                context.require_access(account_id)
            if self.db.get_account(account_id) is None:
                raise NotFoundError(account_not_found(account_id))
            return {account_id}
        if context is not None:
            return set(context.account_ids)
        return None

    def _expenses(
        self,
        account_ids: Optional[set[int]],
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Transaction]:
        return self.db.list_transactions(
            start_date=start_date,
            end_date=end_date,
            account_ids=account_ids,
            transaction_type=TransactionType.EXPENSE,
        )

    def spending_trend(
        self,
        granularity: Granularity = Granularity.MONTHLY,
        account_id: Optional[int] = None,
        context: Optional[RequestContext] = None,
    ) -> list[SpendingPoint]:
        """Sum expenses per calendar month or year.

        Buckets come out in chronological order. Periods without expenses
        are left out rather than reported as zero.

        Args:
            granularity: MONTHLY or YEARLY buckets
            account_id: Optional single account scope
            context: Optional caller scope used when no account is given
        """
        try:
            granularity = Granularity(granularity)
        except ValueError:
            raise ValidationError(f"Unknown granularity '{granularity}'")

        totals: dict[str, Decimal] = defaultdict(Decimal)
        for txn in self._expenses(self._scope(account_id, context)):
            totals[period_key(txn.date, granularity)] += txn.amount

        return [SpendingPoint(period=key, amount=totals[key]) for key in sorted(totals)]

    def category_distribution(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[int] = None,
        context: Optional[RequestContext] = None,
    ) -> list[CategoryAmount]:
        """Sum expenses per top-level category within an inclusive date range.

        Expenses filed under a subcategory count toward its top-level
        ancestor. Results are ordered by amount, largest first.
        """
        if start_date is not None and end_date is not None and end_date < start_date:
            raise ValidationError(f"End date {end_date} is before start date {start_date}")

        scope = self._scope(account_id, context)
        top_level = self.categories.get_top_level_map(account_id)
        names = {cat.id: cat.name for cat in self.db.list_categories(account_id=account_id)}

        totals: dict[str, Decimal] = defaultdict(Decimal)
        for txn in self._expenses(scope, start_date, end_date):
            root_id = top_level.get(txn.category_id) if txn.category_id is not None else None
            label = names.get(root_id, UNCATEGORIZED) if root_id is not None else UNCATEGORIZED
            totals[label] += txn.amount

        return [
            CategoryAmount(category=label, amount=amount)
            for label, amount in sorted(totals.items(), key=lambda item: (-item[1], item[0]))
        ]
