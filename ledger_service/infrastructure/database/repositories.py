"""Data access layer for ledger entities"""

from dataclasses import replace
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ledger_service.domain.exceptions import ConcurrentUpdateError, DuplicateRequestIdError, StoreError
from ledger_service.domain.models import Account, Transfer, User
from ledger_service.infrastructure.database.errors import is_unique_violation
from ledger_service.infrastructure.database.models import AccountRecord, TransferRecord, UserRecord


def _to_user(record: UserRecord) -> User:
    return User(
        id=record.id,
        first_name=record.first_name,
        last_name=record.last_name,
        email=record.email,
    )


def _to_account(record: AccountRecord) -> Account:
    return Account(
        id=record.id,
        user_id=record.user_id,
        currency=record.currency,
        balance=record.balance,
        version=record.version,
    )


def _to_transfer(record: TransferRecord) -> Transfer:
    return Transfer(
        id=record.id,
        from_account_id=record.from_account_id,
        to_account_id=record.to_account_id,
        amount=record.amount,
        request_id=record.request_id,
        receipt=record.receipt,
        created_at=record.created_at,
    )


class UserRepository:
    """Repository for users"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: int) -> Optional[User]:
        record = self.db.get(UserRecord, user_id)
        return _to_user(record) if record else None

    def add(self, first_name: str, last_name: str, email: str) -> User:
        record = UserRecord(first_name=first_name, last_name=last_name, email=email)
        self.db.add(record)
        self.db.flush()  # Get ID without committing
        return _to_user(record)

    def update(self, user_id: int, first_name: str, last_name: str, email: str) -> User:
        record = self.db.get(UserRecord, user_id)
        record.first_name = first_name
        record.last_name = last_name
        record.email = email
        self.db.flush()
        return _to_user(record)

    def delete(self, user_id: int) -> None:
        """Fails with IntegrityError while the user still owns accounts"""
        self.db.delete(self.db.get(UserRecord, user_id))
        self.db.flush()


class AccountRepository:
    """Repository for accounts"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, account_id: int) -> Optional[Account]:
        record = self.db.get(AccountRecord, account_id)
        return _to_account(record) if record else None

    def list_for_user(self, user_id: int) -> List[Account]:
        records = self.db.scalars(
            select(AccountRecord)
            .where(AccountRecord.user_id == user_id)
            .order_by(AccountRecord.id)
        )
        return [_to_account(r) for r in records]

    def add(self, user_id: int, currency: str, balance: Decimal) -> Account:
        record = AccountRecord(user_id=user_id, currency=currency, balance=balance, version=1)
        self.db.add(record)
        self.db.flush()
        return _to_account(record)

    def update_balance(self, account: Account, new_balance: Decimal) -> Account:
        """
        Compare-and-set the balance against the version the caller read.

        Raises:
            ConcurrentUpdateError: The row changed (or vanished) since ``account`` was read
        """
        result = self.db.execute(
            update(AccountRecord)
            .where(AccountRecord.id == account.id, AccountRecord.version == account.version)
            .values(balance=new_balance, version=account.version + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise ConcurrentUpdateError(account.id)
        return replace(account, balance=new_balance, version=account.version + 1)

    def delete(self, account_id: int) -> None:
        """Fails with IntegrityError while transfers reference the account"""
        self.db.delete(self.db.get(AccountRecord, account_id))
        self.db.flush()


class TransferRepository:
    """Repository for transfers"""

    def __init__(self, db: Session):
        self.db = db

    def find_by_request_id(self, request_id: str) -> Optional[Transfer]:
        record = self.db.scalars(
            select(TransferRecord).where(TransferRecord.request_id == request_id)
        ).first()
        return _to_transfer(record) if record else None

    def add(
        self,
        from_account_id: int,
        to_account_id: int,
        amount: Decimal,
        request_id: str,
        receipt: str,
    ) -> Transfer:
        """
        Insert a transfer row.

        Raises:
            DuplicateRequestIdError: request_id already taken by a committed transfer
            StoreError: Any other constraint rejected the row
        """
        record = TransferRecord(
            from_account_id=from_account_id,
            to_account_id=to_account_id,
            amount=amount,
            request_id=request_id,
            receipt=receipt,
        )
        self.db.add(record)
        try:
            self.db.flush()
        except IntegrityError as e:
            if is_unique_violation(e, "request_id"):
                raise DuplicateRequestIdError(request_id) from e
            raise StoreError(f"Cannot insert transfer {request_id}: {e.orig}") from e
        return _to_transfer(record)
