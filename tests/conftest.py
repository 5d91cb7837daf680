"""Pytest fixtures for testing"""

import pytest
from decimal import Decimal
from typing import Callable, Generator
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from ledger_service.api.main import create_app
from ledger_service.api.dependencies import get_store
from ledger_service.infrastructure.database.session import build_engine
from ledger_service.infrastructure.database.store import SqlLedgerStore
from ledger_service.services.accounts import AccountService
from ledger_service.services.transfers import TransferEngine
from ledger_service.services.users import UserService


@pytest.fixture
def db_engine(tmp_path) -> Generator[Engine, None, None]:
    """File-backed SQLite database, fresh per test (shared across threads)"""
    engine = build_engine(f"sqlite:///{tmp_path / 'ledger.db'}")
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def store(db_engine: Engine) -> SqlLedgerStore:
    """Ledger store with tables created"""
    ledger_store = SqlLedgerStore(db_engine)
    ledger_store.create_schema()
    return ledger_store


@pytest.fixture
def users(store: SqlLedgerStore) -> UserService:
    return UserService(store)


@pytest.fixture
def accounts(store: SqlLedgerStore) -> AccountService:
    return AccountService(store, backoff_seconds=0)


@pytest.fixture
def transfer_engine(store: SqlLedgerStore) -> TransferEngine:
    return TransferEngine(store, backoff_seconds=0)


@pytest.fixture
def user_id(users: UserService) -> int:
    """A user owning no accounts yet"""
    return users.create_user("Ada", "Lovelace", "ada@example.com")


@pytest.fixture
def make_account(accounts: AccountService, user_id: int) -> Callable[..., int]:
    """Factory: open an account for the default user and return its id"""

    def _make(balance: str = "0", currency: str = "usd") -> int:
        return accounts.create_account(user_id, currency, Decimal(balance))

    return _make


@pytest.fixture
def client(store: SqlLedgerStore) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()
    app.dependency_overrides[get_store] = lambda: store
    return TestClient(app)
