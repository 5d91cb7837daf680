"""Transfer engine - validated, atomic and idempotent movement of funds"""

import uuid
from decimal import Decimal
from typing import Optional, Tuple

from ledger_service.config import settings
from ledger_service.domain.exceptions import (
    DuplicateRequestIdError,
    InternalError,
    InvalidRequestError,
    LedgerError,
    NotFoundError,
    StoreError,
)
from ledger_service.domain.models import Account, Transfer, TransferResult
from ledger_service.domain.money import AmountLike, require_in_range, require_positive
from ledger_service.domain.store import LedgerSession, LedgerStore
from ledger_service.infrastructure.observability.logging import log_transfer
from ledger_service.infrastructure.observability.metrics import record_transfer
from ledger_service.services.atomic import run_with_conflict_retry

MAX_REQUEST_ID_LENGTH = 40


class TransferEngine:
    """Moves funds between two accounts of the same currency"""

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

    def transfer(
        self,
        from_account_id: int,
        to_account_id: int,
        amount: AmountLike,
        request_id: str,
    ) -> TransferResult:
        """
        Debit ``from_account_id`` and credit ``to_account_id`` by ``amount``.

        Validation order (first failure wins):
        1. Source and destination differ
        2. Amount is positive with at most 4 decimal places; request id is usable
        3. A transfer with this request id already succeeded → return it as-is
        4. Both accounts exist
        5. Source balance covers the amount
        6. Currencies match
        7. The credited balance stays within the storable range

        The debit, the credit and the transfer row commit together or not at all.
        Retrying with the same request id after success never applies twice.

        Raises:
            InvalidRequestError: Business rule violated (1, 2, 5, 6, 7)
            NotFoundError: Source or destination account missing (4)
            InternalError: Store failure or unresolved concurrent updates
        """
        try:
            value = self._validate(from_account_id, to_account_id, amount, request_id)
        except InvalidRequestError as e:
            self._record(from_account_id, to_account_id, amount, request_id, "rejected", reason=e.message)
            raise

        def apply(session: LedgerSession) -> Tuple[Transfer, bool]:
            return self._apply(session, from_account_id, to_account_id, value, request_id)

        try:
            transfer, applied = run_with_conflict_retry(
                self.store,
                apply,
                operation="transfer",
                max_attempts=self.max_attempts,
                backoff_seconds=self.backoff_seconds,
            )
        except DuplicateRequestIdError:
            # Lost the insert race to a concurrent caller with the same request id
            transfer, applied = self._fetch_committed(request_id), False
        except InternalError as e:
            self._record(from_account_id, to_account_id, value, request_id, "failed", reason=e.message)
            raise
        except LedgerError as e:
            self._record(from_account_id, to_account_id, value, request_id, "rejected", reason=e.message)
            raise
        except StoreError as e:
            self._record(from_account_id, to_account_id, value, request_id, "failed", reason=str(e))
            raise InternalError(f"Cannot complete transfer {request_id}") from e

        self._record(
            from_account_id,
            to_account_id,
            value,
            request_id,
            "applied" if applied else "replayed",
            receipt=transfer.receipt,
        )
        return TransferResult(request_id=transfer.request_id, receipt=transfer.receipt)

    @staticmethod
    def _validate(from_account_id: int, to_account_id: int, amount: AmountLike, request_id: str) -> Decimal:
        if from_account_id == to_account_id:
            raise InvalidRequestError("Source and destination must differ")
        value = require_positive(amount)
        if not request_id or len(request_id) > MAX_REQUEST_ID_LENGTH:
            raise InvalidRequestError(f"Request id must be 1-{MAX_REQUEST_ID_LENGTH} characters")
        return value

    def _apply(
        self,
        session: LedgerSession,
        from_account_id: int,
        to_account_id: int,
        amount: Decimal,
        request_id: str,
    ) -> Tuple[Transfer, bool]:
        """One attempt of the atomic unit. Returns (transfer, newly_applied)."""
        existing = session.transfers.find_by_request_id(request_id)
        if existing is not None:
            return existing, False

        try:
            source, destination = self._load_checked(session, from_account_id, to_account_id, amount)
        except (NotFoundError, InvalidRequestError):
            # A concurrent caller with this request id may have committed since the
            # lookup above; its debit is what made our checks fail.
            committed = session.transfers.find_by_request_id(request_id)
            if committed is not None:
                return committed, False
            raise

        # Lower account id is written first so opposing transfers lock rows in the same order
        writes = sorted(
            [(source, source.balance - amount), (destination, destination.balance + amount)],
            key=lambda write: write[0].id,
        )
        for account, new_balance in writes:
            session.accounts.update_balance(account, new_balance)
        transfer = session.transfers.add(
            from_account_id=from_account_id,
            to_account_id=to_account_id,
            amount=amount,
            request_id=request_id,
            receipt=str(uuid.uuid4()),
        )
        return transfer, True

    @staticmethod
    def _load_checked(
        session: LedgerSession,
        from_account_id: int,
        to_account_id: int,
        amount: Decimal,
    ) -> Tuple[Account, Account]:
        source = session.accounts.get(from_account_id)
        if source is None:
            raise NotFoundError(f"Cannot find account {from_account_id}")
        destination = session.accounts.get(to_account_id)
        if destination is None:
            raise NotFoundError(f"Cannot find account {to_account_id}")

        if source.balance < amount:
            raise InvalidRequestError("Insufficient funds")
        if source.currency != destination.currency:
            raise InvalidRequestError("Currency mismatch")
        require_in_range(destination.balance + amount, "Balance")
        return source, destination

    def _fetch_committed(self, request_id: str) -> Transfer:
        try:
            transfer = self.store.run_atomic(
                lambda session: session.transfers.find_by_request_id(request_id)
            )
        except StoreError as e:
            raise InternalError(f"Cannot load transfer {request_id}") from e
        if transfer is None:
            raise InternalError(f"Transfer {request_id} rejected as duplicate but not found")
        return transfer

    @staticmethod
    def _record(
        from_account_id: int,
        to_account_id: int,
        amount: AmountLike,
        request_id: str,
        outcome: str,
        receipt: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> None:
        record_transfer(outcome)
        log_transfer(
            request_id=request_id,
            from_account_id=from_account_id,
            to_account_id=to_account_id,
            amount=amount,
            outcome=outcome,
            receipt=receipt,
            reason=reason,
        )
