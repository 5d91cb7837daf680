"""SQLAlchemy implementation of the LedgerStore contract"""

import logging
from typing import Callable, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from ledger_service.domain.exceptions import ConcurrentUpdateError, StoreError
from ledger_service.infrastructure.database.errors import is_retryable_conflict
from ledger_service.infrastructure.database.session import build_session_factory, create_schema
from ledger_service.infrastructure.database.repositories import (
    AccountRepository,
    TransferRepository,
    UserRepository,
)

T = TypeVar("T")

logger = logging.getLogger(__name__)


class SqlLedgerSession:
    """Repositories sharing one SQLAlchemy session (one transaction)"""

    def __init__(self, db: Session):
        self.users = UserRepository(db)
        self.accounts = AccountRepository(db)
        self.transfers = TransferRepository(db)


class SqlLedgerStore:
    """Runs units of work in a fresh session, committing or rolling back as a whole"""

    def __init__(self, engine: Engine):
        self.engine = engine
        self.session_factory = build_session_factory(engine)

    def create_schema(self) -> None:
        create_schema(self.engine)

    def run_atomic(self, work: Callable[[SqlLedgerSession], T]) -> T:
        """
        Execute ``work`` inside a single database transaction.

        Any exception rolls the transaction back, leaving no partial writes.
        Store signals (StoreError subclasses) and domain errors propagate as-is;
        deadlocks and serialization failures become ConcurrentUpdateError so the
        caller can re-run the unit; other SQLAlchemy failures are wrapped in StoreError.
        """
        db = self.session_factory()
        try:
            result = work(SqlLedgerSession(db))
            db.commit()
            return result
        except SQLAlchemyError as e:
            db.rollback()
            if is_retryable_conflict(e):
                logger.info(f"Atomic unit aborted by the database to resolve contention: {e}")
                raise ConcurrentUpdateError() from e
            logger.warning(f"Atomic unit aborted: {e}")
            raise StoreError(f"Database error: {e.__class__.__name__}") from e
        except BaseException:
            db.rollback()
            raise
        finally:
            db.close()
