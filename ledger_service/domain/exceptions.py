"""Domain-specific exceptions"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Outcome category of a failed ledger operation"""

    NOT_FOUND = "not_found"
    INVALID_REQUEST = "invalid_request"
    INTERNAL = "internal"


class LedgerError(Exception):
    """Base exception for domain layer"""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(LedgerError):
    """Referenced user, account or transfer does not exist"""

    kind = ErrorKind.NOT_FOUND


class InvalidRequestError(LedgerError):
    """Request violates a business rule"""

    kind = ErrorKind.INVALID_REQUEST


class InternalError(LedgerError):
    """Store or transaction failure not attributable to caller input"""

    kind = ErrorKind.INTERNAL


# Signals raised by a LedgerStore implementation. Services interpret them;
# they never reach the request adapter.


class StoreError(Exception):
    """Store write or commit failed"""

    pass


class DuplicateRequestIdError(StoreError):
    """Unique index on transfer request id rejected an insert"""

    def __init__(self, request_id: str):
        super().__init__(f"Transfer with request id {request_id!r} already exists")
        self.request_id = request_id


class ConcurrentUpdateError(StoreError):
    """Account row changed since it was read, or the database aborted the unit to resolve a conflict"""

    def __init__(self, account_id: Optional[int] = None):
        if account_id is None:
            super().__init__("Transaction aborted by a concurrent update")
        else:
            super().__init__(f"Account {account_id} was modified concurrently")
        self.account_id = account_id
