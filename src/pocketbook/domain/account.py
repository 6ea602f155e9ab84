"""Account domain service."""

from decimal import Decimal
from typing import Optional

from pocketbook.database.base import Database
from pocketbook.domain.entities import Account as AccountEntity
from pocketbook.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    ValidationError,
    account_delete_blocked,
    account_not_found,
    duplicate_account_name,
)
from pocketbook.logging_setup import get_logger
from pocketbook.utils.amount_parser import has_sub_cent_digits

logger = get_logger(__name__)


def _validate_balance(balance) -> Decimal:
    balance = Decimal(balance)
    if has_sub_cent_digits(balance):
        raise ValidationError(f"Balance '{balance}' has more than two decimal places")
    return balance


class AccountService:
    """Service for managing accounts."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(self, name: str, balance: Decimal = Decimal("0")) -> AccountEntity:
        """Create a new account.

        Args:
            name: Account name
            balance: Opening balance (signed)

        Returns:
            The created account

        Raises:
            ValidationError: If the name is empty or the balance is finer than a cent
            ConflictError: If account name already exists
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Account name cannot be empty")
        balance = _validate_balance(balance)

        for acc in self.db.list_accounts():
            if acc.name == name:
                raise ConflictError(duplicate_account_name(name))

        account_id = self.db.create_account(name=name, balance=balance)
        logger.info("Created account %s (%r)", account_id, name)
        return self.require_account(account_id)

    def get_account(self, account_id: int) -> Optional[AccountEntity]:
        """Get account by ID.

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(account_id)

    def require_account(self, account_id: int) -> AccountEntity:
        """Get account by ID or raise NotFoundError."""
        account = self.db.get_account(account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))
        return account

    def list_accounts(self) -> list[AccountEntity]:
        """List all accounts."""
        return self.db.list_accounts()

    def set_balance(self, account_id: int, balance: Decimal) -> AccountEntity:
        """Set an account's balance.

        The balance is maintained by the user; creating or deleting
        transactions never changes it.
        """
        self.require_account(account_id)
        self.db.update_account_balance(account_id, _validate_balance(balance))
        return self.require_account(account_id)

    def delete_account(self, account_id: int) -> None:
        """Delete an account.

        Raises:
            NotFoundError: If account not found
            DependencyError: If account still has categories, transactions or budgets
        """
        self.require_account(account_id)

        category_count, transaction_count, budget_count = (
            self.db.get_account_dependency_counts(account_id)
        )
        if category_count or transaction_count or budget_count:
            raise DependencyError(
                account_delete_blocked(account_id, category_count, transaction_count, budget_count)
            )

        self.db.delete_account(account_id)
        logger.info("Deleted account %s", account_id)
