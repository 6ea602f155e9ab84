"""Explicit request scope passed into cross-account queries."""

from dataclasses import dataclass
from typing import Iterable

from pocketbook.domain.errors import CrossAccountError


@dataclass(frozen=True)
class RequestContext:
    """Accounts the current caller may read.

    The boundary (CLI or a host application) builds one per request from its
    authenticated identity; the core never reads ambient session state.
    """

    account_ids: frozenset[int]

    @classmethod
    def for_accounts(cls, account_ids: Iterable[int]) -> "RequestContext":
        return cls(account_ids=frozenset(account_ids))

    def require_access(self, account_id: int) -> None:
        """Raise CrossAccountError if the account is outside this context."""
        if account_id not in self.account_ids:
            raise CrossAccountError(f"Account {account_id} is outside the request scope")
