"""SQLAlchemy ORM models for users, accounts and transfers"""

from decimal import Decimal
from typing import Optional

from sqlalchemy import Column, String, BigInteger, Integer, DateTime, ForeignKey
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func
from sqlalchemy.types import TypeDecorator

from ledger_service.domain.money import to_units, from_units

Base = declarative_base()


class FixedDecimal(TypeDecorator):
    """Exact 4-digit decimal stored as BIGINT minor units (1/10000)"""

    impl = BigInteger
    cache_ok = True

    def process_bind_param(self, value: Optional[Decimal], dialect) -> Optional[int]:
        if value is None:
            return None
        return to_units(Decimal(value))

    def process_result_value(self, value: Optional[int], dialect) -> Optional[Decimal]:
        if value is None:
            return None
        return from_units(value)


class UserRecord(Base):
    """Account owner"""

    __tablename__ = "ledger_user"

    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    email = Column(String(50), nullable=False)


class AccountRecord(Base):
    """Single-currency account; balance written only via version compare-and-set"""

    __tablename__ = "account"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("ledger_user.id"), nullable=False, index=True)
    currency = Column(String(3), nullable=False)
    balance = Column(FixedDecimal, nullable=False, default=Decimal(0))
    version = Column(Integer, nullable=False, default=1)


class TransferRecord(Base):
    """Immutable transfer; request_id is the idempotency key"""

    __tablename__ = "transfer"

    id = Column(Integer, primary_key=True, autoincrement=True)
    from_account_id = Column(Integer, ForeignKey("account.id"), nullable=False, index=True)
    to_account_id = Column(Integer, ForeignKey("account.id"), nullable=False, index=True)
    amount = Column(FixedDecimal, nullable=False)
    request_id = Column(String(40), nullable=False, unique=True)
    receipt = Column(String(40), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
