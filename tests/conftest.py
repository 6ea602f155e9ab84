"""Shared pytest fixtures for pocketbook tests."""

import tempfile
import os
from datetime import datetime
from decimal import Decimal
import pytest

from pocketbook.database.factories import create_sqlite_database
from pocketbook.domain.account import AccountService
from pocketbook.domain.budget import BudgetService
from pocketbook.domain.category import CategoryService
from pocketbook.domain.entities import TransactionType
from pocketbook.domain.transaction import TransactionService
from pocketbook.domain.trends import TrendService

FIXED_NOW = datetime(2024, 1, 15, 12, 0, 0)

# (name, parent path) in creation order
SAMPLE_CATEGORIES = [
    ("Food & Dining", None),
    ("Groceries", "Food & Dining"),
    ("Restaurants", "Food & Dining"),
    ("Fast Food", "Food & Dining > Restaurants"),
    ("Transportation", None),
    ("Fuel", "Transportation"),
    ("Income", None),
    ("Salary", "Income"),
]


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def fixed_clock():
    """Clock pinned to 2024-01-15 12:00."""
    return lambda: FIXED_NOW


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def budget_service(temp_db, fixed_clock):
    """Create a BudgetService with a fixed clock."""
    return BudgetService(temp_db, clock=fixed_clock)


@pytest.fixture
def trend_service(temp_db):
    """Create a TrendService with a temporary database."""
    return TrendService(temp_db)


@pytest.fixture
def sample_account(account_service):
    """Create a sample account for testing."""
    return account_service.create_account(name="Test Account", balance=Decimal("100.00"))


@pytest.fixture
def other_account(account_service):
    """Create a second account for cross-account tests."""
    return account_service.create_account(name="Other Account")


@pytest.fixture
def sample_categories(category_service, sample_account):
    """Create a small category tree and return IDs keyed by path."""
    category_ids = {}
    for name, parent_path in SAMPLE_CATEGORIES:
        parent_id = category_ids[parent_path] if parent_path else None
        category = category_service.create_category(
            account_id=sample_account.id, name=name, parent_id=parent_id
        )
        path = f"{parent_path} > {name}" if parent_path else name
        category_ids[path] = category.id
    return category_ids


@pytest.fixture
def add_expense(transaction_service, sample_account):
    """Return a helper that records an expense in the sample account."""

    def _add(category_id, amount, day, account_id=None, description=None):
        return transaction_service.create_transaction(
            account_id=account_id if account_id is not None else sample_account.id,
            category_id=category_id,
            amount=Decimal(str(amount)),
            transaction_type=TransactionType.EXPENSE,
            date=day,
            description=description,
        )

    return _add


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
