"""Domain layer for pocketbook.

Services live in their own modules (``pocketbook.domain.category`` and so on)
and are imported from there; this package only re-exports the shared entities
and errors so that the database layer can import them without cycles.
"""

from pocketbook.domain.entities import (
    Account,
    AlertSeverity,
    Budget,
    BudgetAlert,
    BudgetState,
    BudgetStatus,
    Category,
    CategoryAmount,
    DeletePolicy,
    Granularity,
    HierarchicalCategory,
    SpendingPoint,
    Transaction,
    TransactionType,
)
from pocketbook.domain.errors import (
    ConflictError,
    CrossAccountError,
    CycleError,
    DependencyError,
    DomainError,
    InvalidReferenceError,
    NotFoundError,
    ValidationError,
)

__all__ = [
    "Account",
    "AlertSeverity",
    "Budget",
    "BudgetAlert",
    "BudgetState",
    "BudgetStatus",
    "Category",
    "CategoryAmount",
    "DeletePolicy",
    "Granularity",
    "HierarchicalCategory",
    "SpendingPoint",
    "Transaction",
    "TransactionType",
    "ConflictError",
    "CrossAccountError",
    "CycleError",
    "DependencyError",
    "DomainError",
    "InvalidReferenceError",
    "NotFoundError",
    "ValidationError",
]
