"""Dependency injection for FastAPI endpoints"""

from functools import lru_cache

from fastapi import Depends, Request

from ledger_service.config import settings
from ledger_service.domain.store import LedgerStore
from ledger_service.infrastructure.database.session import build_engine
from ledger_service.infrastructure.database.store import SqlLedgerStore
from ledger_service.services.accounts import AccountService
from ledger_service.services.transfers import TransferEngine
from ledger_service.services.users import UserService


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


@lru_cache
def get_store() -> SqlLedgerStore:
    """Provide the process-wide ledger store (engine and pool created on first use)"""
    engine = build_engine(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    return SqlLedgerStore(engine)


def get_transfer_engine(store: LedgerStore = Depends(get_store)) -> TransferEngine:
    """Provide transfer engine bound to the store"""
    return TransferEngine(store)


def get_account_service(store: LedgerStore = Depends(get_store)) -> AccountService:
    """Provide account operations bound to the store"""
    return AccountService(store)


def get_user_service(store: LedgerStore = Depends(get_store)) -> UserService:
    """Provide user operations bound to the store"""
    return UserService(store)
