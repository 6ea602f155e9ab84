"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class CycleError(ValidationError):
    """Reparenting would introduce a cycle in the category tree."""


class InvalidReferenceError(NotFoundError, ValidationError):
    """Input references an entity that is missing or unusable for the operation."""


class CrossAccountError(InvalidReferenceError):
    """Referenced entity belongs to a different account than the operation."""


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def category_not_found(category_id: int) -> str:
    """Return message for missing category by ID."""
    return f"Category {category_id} not found"


def category_path_not_found(path: str) -> str:
    """Return message for missing category by path."""
    return f"Category '{path}' not found"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def no_active_budget(account_id: int) -> str:
    """Return message when an account has no budget covering the current instant."""
    return f"No active budget for account {account_id}"


def category_in_other_account(category_id: int, account_id: int) -> str:
    """Return message for a category referenced outside its account."""
    return f"Category {category_id} does not belong to account {account_id}"


def category_cycle(category_id: int, parent_id: int) -> str:
    """Return message for a reparent that would create a cycle."""
    if category_id == parent_id:
        return f"Category {category_id} cannot be its own parent"
    return (
        f"Cannot move category {category_id} under category {parent_id}: "
        f"{parent_id} is a descendant of {category_id}"
    )


def duplicate_account_name(name: str) -> str:
    """Return message for duplicate account names."""
    return f"Account with name '{name}' already exists"


def account_delete_blocked(
    account_id: int, category_count: int, transaction_count: int, budget_count: int
) -> str:
    """Return message when account has dependent categories, transactions or budgets."""
    parts = []
    if category_count > 0:
        parts.append(f"{category_count} categor{'ies' if category_count != 1 else 'y'}")
    if transaction_count > 0:
        parts.append(
            f"{transaction_count} transaction{'s' if transaction_count != 1 else ''}"
        )
    if budget_count > 0:
        parts.append(f"{budget_count} budget{'s' if budget_count != 1 else ''}")
    return (
        f"Cannot delete account {account_id}: it has {', '.join(parts)}. "
        "Please delete them first."
    )


def category_delete_blocked(category_id: int, child_count: int) -> str:
    """Return message when a category with children cannot be deleted."""
    return (
        f"Cannot delete category {category_id}: it has {child_count} "
        f"subcategor{'ies' if child_count != 1 else 'y'}"
    )
