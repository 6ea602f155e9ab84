"""Transaction domain service."""

from typing import Optional
from datetime import date
from decimal import Decimal, InvalidOperation

from pocketbook.database.base import Database
from pocketbook.domain.category import CategoryService
from pocketbook.domain.entities import Transaction as TransactionEntity, TransactionType
from pocketbook.domain.errors import (
    CrossAccountError,
    InvalidReferenceError,
    NotFoundError,
    ValidationError,
    account_not_found,
    category_in_other_account,
    category_not_found,
    transaction_not_found,
)
from pocketbook.logging_setup import get_logger
from pocketbook.utils.amount_parser import has_sub_cent_digits

logger = get_logger(__name__)


def _validate_amount(amount) -> Decimal:
    try:
        value = Decimal(amount)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"Invalid amount '{amount}'")
    if not value.is_finite():
        raise ValidationError(f"Invalid amount '{amount}'")
    if value < 0:
        raise ValidationError("Amount cannot be negative; use the transaction type for direction")
    if has_sub_cent_digits(value):
        raise ValidationError(f"Amount '{amount}' has more than two decimal places")
    return value


def _validate_type(transaction_type) -> TransactionType:
    try:
        return TransactionType(transaction_type)
    except ValueError:
        raise ValidationError(
            f"Invalid transaction type '{transaction_type}'. Expected 'Income' or 'Expense'"
        )


class TransactionService:
    """Service for managing and aggregating transactions."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db
        self.categories = CategoryService(db)

    def create_transaction(
        self,
        account_id: int,
        category_id: int,
        amount: Decimal,
        transaction_type: TransactionType,
        date: date,
        description: Optional[str] = None,
    ) -> TransactionEntity:
        """Create a transaction.

        Args:
            account_id: Account ID
            category_id: Category ID (must belong to the same account)
            amount: Non-negative magnitude
            transaction_type: Income or Expense
            date: Transaction date
            description: Optional description

        Returns:
            The created transaction

        Raises:
            ValidationError: If amount is negative or the type is unknown
            InvalidReferenceError: If account or category doesn't exist
                (both a NotFoundError and a ValidationError)
            CrossAccountError: If the category belongs to another account
        """
        amount = _validate_amount(amount)
        transaction_type = _validate_type(transaction_type)

        if self.db.get_account(account_id) is None:
            raise InvalidReferenceError(account_not_found(account_id))
        self._check_category(account_id, category_id)

        transaction_id = self.db.create_transaction(
            account_id=account_id,
            category_id=category_id,
            amount=amount,
            transaction_type=transaction_type,
            date=date,
            description=description,
        )
        logger.info(
            "Created transaction %s: %s %s on %s in account %s",
            transaction_id, transaction_type.value, amount, date, account_id,
        )
        return self.require_transaction(transaction_id)

    def _check_category(self, account_id: int, category_id: Optional[int]) -> None:
        if category_id is None:
            raise ValidationError("A category is required")
        category = self.db.get_category(category_id)
        if category is None:
            raise InvalidReferenceError(category_not_found(category_id))
        if category.account_id != account_id:
            raise CrossAccountError(category_in_other_account(category_id, account_id))

    def get_transaction(self, transaction_id: int) -> Optional[TransactionEntity]:
        """Get transaction by ID.

        Returns:
            Transaction entity or None if not found
        """
        return self.db.get_transaction(transaction_id)

    def require_transaction(self, transaction_id: int) -> TransactionEntity:
        """Get transaction by ID or raise NotFoundError."""
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        return txn

    def update_transaction(
        self,
        transaction_id: int,
        category_id: Optional[int] = None,
        amount: Optional[Decimal] = None,
        transaction_type: Optional[TransactionType] = None,
        date: Optional[date] = None,
        description: Optional[str] = None,
    ) -> TransactionEntity:
        """Update transaction fields.

        Only the fields that are not None change. The account of a
        transaction is fixed once created.

        Raises:
            NotFoundError: If the transaction or new category doesn't exist
            ValidationError: If the new amount is negative
            CrossAccountError: If the new category belongs to another account
        """
        txn = self.require_transaction(transaction_id)

        if amount is not None:
            amount = _validate_amount(amount)
        if transaction_type is not None:
            transaction_type = _validate_type(transaction_type)
        if category_id is not None:
            self._check_category(txn.account_id, category_id)

        self.db.update_transaction(
            transaction_id=transaction_id,
            category_id=category_id,
            amount=amount,
            transaction_type=transaction_type,
            date=date,
            description=description,
        )
        logger.info("Updated transaction %s", transaction_id)
        return self.require_transaction(transaction_id)

    def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction.

        Raises:
            NotFoundError: If transaction doesn't exist
        """
        self.require_transaction(transaction_id)
        self.db.delete_transaction(transaction_id)
        logger.info("Deleted transaction %s", transaction_id)

    def query(
        self,
        account_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_ids: Optional[set[int]] = None,
    ) -> list[TransactionEntity]:
        """List transactions, oldest first.

        Both date bounds are inclusive; a missing bound is unbounded.
        Transactions on the same date keep creation order.

        Args:
            account_id: Optional single account filter
            start_date: Optional start date
            end_date: Optional end date
            account_ids: Optional set of accounts (ignored when account_id is given)
        """
        if start_date is not None and end_date is not None and end_date < start_date:
            raise ValidationError(f"End date {end_date} is before start date {start_date}")

        scope = {account_id} if account_id is not None else account_ids
        return self.db.list_transactions(
            start_date=start_date,
            end_date=end_date,
            account_ids=scope,
        )

    def sum_by_category_subtree(
        self,
        account_id: int,
        root_category_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Decimal:
        """Sum expenses filed under a category or any of its descendants.

        The subtree is flattened into an ID set once; transactions are then
        filtered against that set.

        Raises:
            NotFoundError: If the category doesn't exist
            CrossAccountError: If the category belongs to another account
        """
        root = self.categories.require_category(root_category_id)
        if root.account_id != account_id:
            raise CrossAccountError(category_in_other_account(root_category_id, account_id))

        subtree_ids = self.categories.get_descendant_ids(root_category_id)
        transactions = self.db.list_transactions(
            start_date=start_date,
            end_date=end_date,
            account_ids={account_id},
            category_ids=subtree_ids,
            transaction_type=TransactionType.EXPENSE,
        )
        return sum((txn.amount for txn in transactions), Decimal("0"))

    def sum_expenses(
        self,
        account_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Decimal:
        """Sum all expenses of an account within an inclusive date range."""
        transactions = self.db.list_transactions(
            start_date=start_date,
            end_date=end_date,
            account_ids={account_id},
            transaction_type=TransactionType.EXPENSE,
        )
        return sum((txn.amount for txn in transactions), Decimal("0"))
