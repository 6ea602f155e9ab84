"""Budget domain service.

Budgets are stored with explicit start/end instants. Calendar keywords such as
"monthly" are resolved into a window before a budget is stored, so everything
here reasons about windows only.

A budget is UPCOMING before its start, ACTIVE while the clock is inside the
window and EXPIRED afterwards. Overlapping budgets are kept as they are; when
several are active the most recently created one wins.
"""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional

from pocketbook.config import DEFAULT_WARNING_THRESHOLD, parse_threshold
from pocketbook.database.base import Database
from pocketbook.domain.context import RequestContext
from pocketbook.domain.entities import (
    AlertSeverity,
    Budget,
    BudgetAlert,
    BudgetState,
    BudgetStatus,
)
from pocketbook.domain.errors import (
    NotFoundError,
    ValidationError,
    account_not_found,
    no_active_budget,
)
from pocketbook.domain.transaction import TransactionService
from pocketbook.logging_setup import get_logger
from pocketbook.utils.amount_parser import has_sub_cent_digits
from pocketbook.utils.date_parser import resolve_period_window

logger = get_logger(__name__)

Clock = Callable[[], datetime]

HUNDRED = Decimal("100")


def compute_status(limit: Decimal, total_expenses: Decimal) -> BudgetStatus:
    """Measure total expenses against a limit.

    A zero limit reports 100% used instead of dividing by zero.
    """
    if limit == 0:
        percentage = 100.0
    else:
        percentage = float((total_expenses / limit * HUNDRED).quantize(Decimal("0.01")))
    return BudgetStatus(
        budget_limit=limit,
        total_expenses=total_expenses,
        remaining_budget=limit - total_expenses,
        is_exceeded=total_expenses > limit,
        percentage_used=percentage,
    )


def severity_for(percentage_used: float, threshold: float) -> Optional[AlertSeverity]:
    """Map a percentage to an alert severity, or None below the threshold."""
    if percentage_used >= 100:
        return AlertSeverity.ERROR
    if percentage_used >= threshold:
        return AlertSeverity.WARNING
    return None


def _validate_threshold(threshold: float) -> float:
    try:
        return parse_threshold(threshold)
    except ValueError as e:
        raise ValidationError(str(e))


class BudgetService:
    """Service for setting budgets and evaluating spend against them."""

    def __init__(
        self,
        db: Database,
        clock: Optional[Clock] = None,
        warning_threshold: float = DEFAULT_WARNING_THRESHOLD,
    ):
        """Initialize budget service.

        Args:
            db: Database instance
            clock: Callable returning the current instant (defaults to datetime.now)
            warning_threshold: Default percentage at which a warning alert fires
        """
        self.db = db
        self.clock = clock or datetime.now
        self.warning_threshold = _validate_threshold(warning_threshold)
        self.ledger = TransactionService(db)

    def set_budget(
        self, account_id: int, limit: Decimal, start: datetime, end: datetime
    ) -> Budget:
        """Store a budget for an explicit window.

        Earlier budgets are never replaced; resolution happens at query time.

        Raises:
            ValidationError: If limit is negative, finer than a cent, or end is not after start
            NotFoundError: If the account doesn't exist
        """
        try:
            limit = Decimal(limit)
        except (InvalidOperation, TypeError, ValueError):
            raise ValidationError(f"Invalid budget limit '{limit}'")
        if not limit.is_finite() or limit < 0:
            raise ValidationError("Budget limit cannot be negative")
        if has_sub_cent_digits(limit):
            raise ValidationError(f"Budget limit '{limit}' has more than two decimal places")
        if end <= start:
            raise ValidationError(f"Budget end {end} must be after start {start}")
        if self.db.get_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))

        budget_id = self.db.create_budget(account_id=account_id, limit=limit, start=start, end=end)
        logger.info(
            "Set budget %s for account %s: %s from %s to %s",
            budget_id, account_id, limit, start, end,
        )
        return self.db.get_budget(budget_id)

    def set_budget_for_period(
        self,
        account_id: int,
        limit: Decimal,
        period: str,
        reference: Optional[datetime] = None,
    ) -> Budget:
        """Store a budget for the calendar month or year containing ``reference``.

        Args:
            period: "monthly" or "yearly"
            reference: Instant inside the wanted period (defaults to now)
        """
        if reference is None:
            reference = self.clock()
        try:
            start, end = resolve_period_window(period, reference)
        except ValueError as e:
            raise ValidationError(str(e))
        return self.set_budget(account_id, limit, start, end)

    def list_budgets(self, account_id: int) -> list[Budget]:
        """List every budget of an account, oldest first."""
        return self.db.list_budgets(account_id=account_id)

    def get_state(self, budget: Budget, now: Optional[datetime] = None) -> BudgetState:
        """Return the state of one budget at ``now`` (defaults to the clock)."""
        if now is None:
            now = self.clock()
        if now < budget.start:
            return BudgetState.UPCOMING
        if now > budget.end:
            return BudgetState.EXPIRED
        return BudgetState.ACTIVE

    def get_account_state(self, account_id: int) -> BudgetState:
        """Return UNSET, ACTIVE, UPCOMING or EXPIRED for an account's budgets."""
        budgets = self.list_budgets(account_id)
        if not budgets:
            return BudgetState.UNSET
        now = self.clock()
        states = {self.get_state(b, now) for b in budgets}
        for state in (BudgetState.ACTIVE, BudgetState.UPCOMING):
            if state in states:
                return state
        return BudgetState.EXPIRED

    def find_active_budget(self, account_id: int) -> Optional[Budget]:
        """Return the authoritative active budget, or None.

        When windows overlap, the most recently created budget wins.
        """
        now = self.clock()
        active = [b for b in self.list_budgets(account_id) if b.contains(now)]
        if not active:
            return None
        # IDs are assigned in creation order
        return max(active, key=lambda b: b.id)

    def get_active_budget(self, account_id: int) -> Budget:
        """Return the active budget or raise NotFoundError."""
        budget = self.find_active_budget(account_id)
        if budget is None:
            raise NotFoundError(no_active_budget(account_id))
        return budget

    def check_budget(self, account_id: int) -> BudgetStatus:
        """Measure an account's expenses against its active budget.

        Expenses dated within the window's start and end dates (inclusive)
        are counted, across all of the account's categories.

        Raises:
            NotFoundError: If the account doesn't exist or has no active budget
        """
        if self.db.get_account(account_id) is None:
            raise NotFoundError(account_not_found(account_id))
        budget = self.get_active_budget(account_id)
        return self._status_for(budget)

    def _status_for(self, budget: Budget) -> BudgetStatus:
        total = self.ledger.sum_expenses(
            budget.account_id,
            start_date=budget.start.date(),
            end_date=budget.end.date(),
        )
        return compute_status(budget.limit, total)

    def alert_for(self, account_id: int, threshold: Optional[float] = None) -> Optional[BudgetAlert]:
        """Build the alert for an account, or None.

        No alert is produced when the account has no active budget or its
        spending is below the warning threshold.

        Raises:
            NotFoundError: If the account doesn't exist
        """
        threshold = self.warning_threshold if threshold is None else _validate_threshold(threshold)
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))

        budget = self.find_active_budget(account_id)
        if budget is None:
            return None

        status = self._status_for(budget)
        severity = severity_for(status.percentage_used, threshold)
        if severity is None:
            return None

        if severity == AlertSeverity.ERROR:
            verb = "exceeded" if status.is_exceeded else "reached"
            message = (
                f"Budget {verb} for '{account.name}': spent {status.total_expenses} "
                f"of {status.budget_limit} ({status.percentage_used:.1f}%)"
            )
            crossed = 100.0
        else:
            message = (
                f"Budget warning for '{account.name}': {status.percentage_used:.1f}% "
                f"of {status.budget_limit} used"
            )
            crossed = threshold

        logger.debug("Budget alert for account %s: %s", account_id, message)
        return BudgetAlert(
            account_id=account_id,
            message=message,
            severity=severity,
            threshold=crossed,
        )

    def budget_alerts(
        self, context: RequestContext, threshold: Optional[float] = None
    ) -> list[BudgetAlert]:
        """Collect alerts for every account in the request context."""
        alerts = []
        for account_id in sorted(context.account_ids):
            alert = self.alert_for(account_id, threshold=threshold)
            if alert is not None:
                alerts.append(alert)
        return alerts
