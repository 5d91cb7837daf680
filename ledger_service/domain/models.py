"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class User:
    """Account owner"""

    id: int
    first_name: str
    last_name: str
    email: str


@dataclass(frozen=True)
class Account:
    """Snapshot of an account row as read inside one atomic unit"""

    id: int
    user_id: int
    currency: str  # 3-letter code, e.g. "usd"
    balance: Decimal
    version: int  # Compare-and-set token for balance writes


@dataclass(frozen=True)
class Transfer:
    """Persisted movement of funds between two accounts"""

    id: int
    from_account_id: int
    to_account_id: int
    amount: Decimal
    request_id: str
    receipt: str
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class TransferResult:
    """Outcome returned to the caller of a transfer"""

    request_id: str
    receipt: str


@dataclass(frozen=True)
class AccountBalance:
    """Currency and balance of a single account"""

    currency: str
    balance: Decimal
