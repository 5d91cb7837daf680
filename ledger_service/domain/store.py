"""Ledger store contract - what the services need from persistence.

The services depend only on these Protocols. ``SqlLedgerStore`` in
``ledger_service.infrastructure.database.store`` is the production
implementation.

Signals an implementation must raise (see ``domain.exceptions``):
    - DuplicateRequestIdError: transfer insert hit the request id unique index
    - ConcurrentUpdateError: balance compare-and-set matched no row
    - StoreError: any other write/commit failure
"""

from decimal import Decimal
from typing import Callable, List, Optional, Protocol, TypeVar

from ledger_service.domain.models import Account, Transfer, User

T = TypeVar("T")


class UserRepositoryLike(Protocol):
    def get(self, user_id: int) -> Optional[User]: ...
    def add(self, first_name: str, last_name: str, email: str) -> User: ...
    def update(self, user_id: int, first_name: str, last_name: str, email: str) -> User: ...
    def delete(self, user_id: int) -> None: ...


class AccountRepositoryLike(Protocol):
    def get(self, account_id: int) -> Optional[Account]: ...
    def list_for_user(self, user_id: int) -> List[Account]: ...
    def add(self, user_id: int, currency: str, balance: Decimal) -> Account: ...
    def update_balance(self, account: Account, new_balance: Decimal) -> Account: ...
    def delete(self, account_id: int) -> None: ...


class TransferRepositoryLike(Protocol):
    def find_by_request_id(self, request_id: str) -> Optional[Transfer]: ...
    def add(
        self,
        from_account_id: int,
        to_account_id: int,
        amount: Decimal,
        request_id: str,
        receipt: str,
    ) -> Transfer: ...


class LedgerSession(Protocol):
    """Repositories bound to one open transaction"""

    users: UserRepositoryLike
    accounts: AccountRepositoryLike
    transfers: TransferRepositoryLike


class LedgerStore(Protocol):
    """Durable ledger with atomic units of work"""

    def run_atomic(self, work: Callable[[LedgerSession], T]) -> T:
        """Run ``work`` in one transaction: commit on return, roll back on any exception."""
        ...
