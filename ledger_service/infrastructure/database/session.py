"""Database engine and session factory construction"""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from ledger_service.infrastructure.database.models import Base


def build_engine(database_url: str, pool_size: int = 10, max_overflow: int = 10) -> Engine:
    """
    Create an engine for the configured database.

    SQLite gets foreign key enforcement and cross-thread connections; other
    backends get a bounded, pre-pinged pool recycled hourly.
    """
    if database_url.startswith("sqlite"):
        engine = create_engine(database_url, connect_args={"check_same_thread": False})

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return engine

    return create_engine(
        database_url,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_recycle=3600,
    )


def build_session_factory(engine: Engine) -> sessionmaker:
    """Sessions never autoflush: repositories flush explicitly to surface write conflicts"""
    return sessionmaker(autoflush=False, expire_on_commit=False, bind=engine)


def create_schema(engine: Engine) -> None:
    """Create ledger tables if they do not exist"""
    Base.metadata.create_all(bind=engine)
