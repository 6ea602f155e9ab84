"""Domain model entities for pocketbook.

These are pure data classes representing business concepts, independent of
database schema. Services return these, never ORM rows.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class TransactionType(str, Enum):
    """Direction of a transaction; amounts are always stored as magnitudes."""

    INCOME = "Income"
    EXPENSE = "Expense"


class AlertSeverity(str, Enum):
    """Severity of a budget alert."""

    WARNING = "warning"
    ERROR = "error"


class BudgetState(str, Enum):
    """Lifecycle state of a budget relative to the current instant."""

    UNSET = "unset"
    UPCOMING = "upcoming"
    ACTIVE = "active"
    EXPIRED = "expired"


class Granularity(str, Enum):
    """Calendar bucket size for spending trends."""

    MONTHLY = "monthly"
    YEARLY = "yearly"


class DeletePolicy(str, Enum):
    """What happens to the subcategories of a deleted category.

    PROMOTE re-parents children to the deleted category's parent,
    CASCADE deletes the whole subtree and REJECT refuses while children exist.
    """

    PROMOTE = "promote"
    CASCADE = "cascade"
    REJECT = "reject"


@dataclass(frozen=True)
class Account:
    """Account domain entity. Balance is maintained independently of transactions."""

    id: int
    name: str
    balance: Decimal
    created_at: datetime


@dataclass(frozen=True)
class Category:
    """Category domain entity with hierarchical structure."""

    id: int
    name: str
    account_id: int
    parent_id: Optional[int]
    created_at: datetime


@dataclass(frozen=True)
class HierarchicalCategory:
    """A category with its materialized descendant tree."""

    id: int
    name: str
    account_id: int
    parent_id: Optional[int]
    children: tuple["HierarchicalCategory", ...] = ()

    def iter_ids(self):
        """Yield this category's ID followed by all descendant IDs."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node.id
            stack.extend(reversed(node.children))


@dataclass(frozen=True)
class Transaction:
    """Transaction domain entity."""

    id: int
    account_id: int
    category_id: Optional[int]
    amount: Decimal
    transaction_type: TransactionType
    date: date
    description: Optional[str]
    created_at: datetime

    @property
    def is_expense(self) -> bool:
        return self.transaction_type == TransactionType.EXPENSE

    @property
    def signed_amount(self) -> Decimal:
        """Amount with expenses negative and income positive."""
        return -self.amount if self.is_expense else self.amount


@dataclass(frozen=True)
class Budget:
    """Spending limit for an account over an explicit window."""

    id: int
    account_id: int
    limit: Decimal
    start: datetime
    end: datetime
    created_at: datetime

    def contains(self, instant: datetime) -> bool:
        """Return True if the instant falls inside the window (inclusive)."""
        return self.start <= instant <= self.end


@dataclass(frozen=True)
class BudgetStatus:
    """Spend of an account measured against its active budget."""

    budget_limit: Decimal
    total_expenses: Decimal
    remaining_budget: Decimal
    is_exceeded: bool
    percentage_used: float


@dataclass(frozen=True)
class BudgetAlert:
    """Alert raised when spending crosses a budget threshold."""

    account_id: int
    message: str
    severity: AlertSeverity
    threshold: float


@dataclass(frozen=True)
class SpendingPoint:
    """Total expenses for one calendar period."""

    period: str
    amount: Decimal


@dataclass(frozen=True)
class CategoryAmount:
    """Total expenses for one top-level category."""

    category: str
    amount: Decimal


@dataclass(frozen=True)
class CategoryIndex:
    """Flat lookup maps over one account's categories."""

    categories: dict[int, Category] = field(default_factory=dict)
    children: dict[Optional[int], list[int]] = field(default_factory=dict)
