"""Mapper functions to convert SQLAlchemy models into domain entities.

This layer isolates the conversion logic so the rest of the code never
touches ORM rows.
"""

from decimal import Decimal

from pocketbook.domain import entities as domain
from pocketbook.database.models import (
    Account as ORMAccount,
    Budget as ORMBudget,
    Category as ORMCategory,
    Transaction as ORMTransaction,
)


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        name=orm_account.name,
        balance=Decimal(orm_account.balance if orm_account.balance is not None else 0),
        created_at=orm_account.created_at,
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        name=orm_category.name,
        account_id=orm_category.account_id,
        parent_id=orm_category.parent_id,
        created_at=orm_category.created_at,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        account_id=orm_transaction.account_id,
        category_id=orm_transaction.category_id,
        amount=Decimal(orm_transaction.amount),
        transaction_type=domain.TransactionType(orm_transaction.transaction_type),
        date=orm_transaction.date,
        description=orm_transaction.description,
        created_at=orm_transaction.created_at,
    )


def budget_to_domain(orm_budget: ORMBudget) -> domain.Budget:
    """Convert SQLAlchemy Budget model to domain Budget entity."""
    return domain.Budget(
        id=orm_budget.id,
        account_id=orm_budget.account_id,
        limit=Decimal(orm_budget.limit),
        start=orm_budget.start,
        end=orm_budget.end,
        created_at=orm_budget.created_at,
    )
