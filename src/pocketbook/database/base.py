"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Optional
from datetime import date, datetime
from decimal import Decimal

# Entities only; services import this module
from pocketbook.domain.entities import (
    Account,
    Budget,
    Category,
    Transaction,
    TransactionType,
)


class Database(ABC):
    """Abstract database interface for pocketbook."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def category_tree_lock(self, account_id: int) -> AbstractContextManager:
        """Return a lock serializing category tree mutations for one account."""
        pass

    # Account operations
    @abstractmethod
    def create_account(self, name: str, balance: Decimal = Decimal("0")) -> int:
        """Create a new account. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def list_accounts(self) -> list[Account]:
        """List all accounts."""
        pass

    @abstractmethod
    def update_account_balance(self, account_id: int, balance: Decimal) -> None:
        """Set the account's independently maintained balance."""
        pass

    @abstractmethod
    def delete_account(self, account_id: int) -> None:
        """Delete an account."""
        pass

    @abstractmethod
    def get_account_dependency_counts(self, account_id: int) -> tuple[int, int, int]:
        """Return (category, transaction, budget) counts for an account."""
        pass

    # Category operations
    @abstractmethod
    def create_category(self, name: str, account_id: int, parent_id: Optional[int] = None) -> int:
        """Create a category. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def list_categories(self, account_id: Optional[int] = None) -> list[Category]:
        """List categories in storage order, optionally filtered by account."""
        pass

    @abstractmethod
    def update_category(
        self,
        category_id: int,
        name: Optional[str] = None,
        parent_id: Optional[int] = None,
        update_parent: bool = False,
    ) -> None:
        """Update category fields.

        Args:
            update_parent: If True, write parent_id even if it's None (to make a root)
        """
        pass

    @abstractmethod
    def delete_category(
        self,
        category_id: int,
        promote_to: Optional[int] = None,
    ) -> None:
        """Delete a single category.

        Direct children and directly filed transactions are moved to
        ``promote_to`` (None makes children roots and transactions
        uncategorized) before the row is removed.
        """
        pass

    @abstractmethod
    def delete_categories(self, category_ids: set[int]) -> None:
        """Delete a set of categories, uncategorizing their transactions."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        account_id: int,
        category_id: Optional[int],
        amount: Decimal,
        transaction_type: TransactionType,
        date: date,
        description: Optional[str] = None,
    ) -> int:
        """Create a transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def update_transaction(
        self,
        transaction_id: int,
        category_id: Optional[int] = None,
        amount: Optional[Decimal] = None,
        transaction_type: Optional[TransactionType] = None,
        date: Optional[date] = None,
        description: Optional[str] = None,
    ) -> None:
        """Update transaction fields that are not None."""
        pass

    @abstractmethod
    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_ids: Optional[set[int]] = None,
        category_ids: Optional[set[int]] = None,
        transaction_type: Optional[TransactionType] = None,
    ) -> list[Transaction]:
        """List transactions with optional filters, oldest first.

        Args:
            start_date: Optional inclusive start date
            end_date: Optional inclusive end date
            account_ids: Optional set of account IDs to include
            category_ids: Optional set of category IDs to include
            transaction_type: Optional type filter
        """
        pass

    # Budget operations
    @abstractmethod
    def create_budget(
        self, account_id: int, limit: Decimal, start: datetime, end: datetime
    ) -> int:
        """Create a budget. Returns budget ID."""
        pass

    @abstractmethod
    def get_budget(self, budget_id: int) -> Optional[Budget]:
        """Get budget by ID."""
        pass

    @abstractmethod
    def list_budgets(self, account_id: Optional[int] = None) -> list[Budget]:
        """List budgets in creation order, optionally filtered by account."""
        pass
