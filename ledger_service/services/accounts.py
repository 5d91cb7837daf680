"""Account operations: create, read, deposit, delete"""

import logging
from typing import List, Optional

from ledger_service.config import settings
from ledger_service.domain.exceptions import (
    InternalError,
    InvalidRequestError,
    LedgerError,
    NotFoundError,
    StoreError,
)
from ledger_service.domain.models import Account, AccountBalance
from ledger_service.domain.money import AmountLike, ZERO, require_in_range, require_positive, to_decimal
from ledger_service.domain.store import LedgerSession, LedgerStore
from ledger_service.infrastructure.observability.metrics import record_deposit
from ledger_service.services.atomic import run_with_conflict_retry

DEFAULT_CURRENCY = "usd"

logger = logging.getLogger(__name__)


def _balance(account: Account) -> AccountBalance:
    return AccountBalance(currency=account.currency, balance=account.balance)


def normalize_currency(currency: str) -> str:
    """Currency codes are 3 ASCII letters, stored lower-case"""
    if not isinstance(currency, str) or len(currency) != 3 or not currency.isascii() or not currency.isalpha():
        raise InvalidRequestError(f"Invalid currency code: {currency!r}")
    return currency.lower()


class AccountService:
    """Single-account operations sharing the transfer engine's atomicity discipline"""

    def __init__(
        self,
        store: LedgerStore,
        max_attempts: Optional[int] = None,
        backoff_seconds: Optional[float] = None,
    ):
        self.store = store
        self.max_attempts = (
            settings.transfer_max_attempts if max_attempts is None else max_attempts
        )
        self.backoff_seconds = (
            settings.conflict_backoff_seconds if backoff_seconds is None else backoff_seconds
        )

    def _run(self, work, action: str):
        """Run a unit of work, converting store failures into InternalError"""
        try:
            return self.store.run_atomic(work)
        except StoreError as e:
            raise InternalError(f"Cannot {action}") from e

    def create_account(
        self,
        user_id: int,
        currency: str = DEFAULT_CURRENCY,
        initial_balance: AmountLike = ZERO,
    ) -> int:
        """Open an account for an existing user. Returns the account id."""
        code = normalize_currency(currency)
        balance = to_decimal(initial_balance)
        if balance < 0:
            raise InvalidRequestError("Initial balance cannot be negative")

        def work(session: LedgerSession) -> int:
            if session.users.get(user_id) is None:
                raise NotFoundError(f"Cannot find user {user_id}")
            return session.accounts.add(user_id, code, balance).id

        account_id = self._run(work, f"add account for user {user_id}")
        logger.info("Account created", extra={"account_id": account_id, "user_id": user_id})
        return account_id

    def get_account(self, account_id: int) -> AccountBalance:
        account = self._run(lambda session: session.accounts.get(account_id), f"get account {account_id}")
        if account is None:
            raise NotFoundError(f"Cannot find account {account_id}")
        return _balance(account)

    def get_accounts_for_user(self, user_id: int) -> List[AccountBalance]:
        def work(session: LedgerSession) -> List[Account]:
            if session.users.get(user_id) is None:
                raise NotFoundError(f"Cannot find user {user_id}")
            return session.accounts.list_for_user(user_id)

        return [_balance(a) for a in self._run(work, f"get accounts for user {user_id}")]

    def deposit(self, account_id: int, amount: AmountLike) -> AccountBalance:
        """
        Credit ``amount`` to an account.

        The new balance is written by compare-and-set on the version read in the
        same transaction; a concurrent writer forces a re-read and retry.

        Raises:
            InvalidRequestError: Amount not positive or over-precise, or balance would overflow
            NotFoundError: Account does not exist
            InternalError: Store failure or unresolved concurrent updates
        """
        try:
            value = require_positive(amount)
        except InvalidRequestError:
            record_deposit("rejected")
            raise

        def work(session: LedgerSession) -> Account:
            account = session.accounts.get(account_id)
            if account is None:
                raise NotFoundError(f"Cannot find account {account_id}")
            new_balance = require_in_range(account.balance + value, "Balance")
            return session.accounts.update_balance(account, new_balance)

        try:
            updated = run_with_conflict_retry(
                self.store,
                work,
                operation="deposit",
                max_attempts=self.max_attempts,
                backoff_seconds=self.backoff_seconds,
            )
        except InternalError:
            record_deposit("failed")
            raise
        except LedgerError:
            record_deposit("rejected")
            raise
        except StoreError as e:
            record_deposit("failed")
            raise InternalError(f"Cannot update account {account_id}") from e

        record_deposit("applied")
        logger.info(
            "Deposit applied",
            extra={"account_id": account_id, "amount": str(value), "balance": str(updated.balance)},
        )
        return _balance(updated)

    def delete_account(self, account_id: int) -> int:
        """
        Delete an account regardless of its balance.

        Raises:
            NotFoundError: Account does not exist
            InternalError: Store refused, e.g. transfers still reference the account
        """

        def work(session: LedgerSession) -> None:
            if session.accounts.get(account_id) is None:
                raise NotFoundError(f"Cannot find account {account_id}")
            session.accounts.delete(account_id)

        self._run(work, f"delete account {account_id}")
        logger.info("Account deleted", extra={"account_id": account_id})
        return account_id
