"""Classification of driver errors raised through SQLAlchemy"""

from typing import Optional

from sqlalchemy.exc import DBAPIError

# serialization_failure, deadlock_detected
RETRYABLE_SQLSTATES = frozenset({"40001", "40P01"})
UNIQUE_VIOLATION = "23505"


def sqlstate(error: DBAPIError) -> Optional[str]:
    """SQLSTATE of the driver error (psycopg2 ``pgcode``, psycopg 3 ``sqlstate``)"""
    orig = error.orig
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


def is_retryable_conflict(error: Exception) -> bool:
    """The database aborted the transaction to resolve contention; re-running it may succeed"""
    return isinstance(error, DBAPIError) and sqlstate(error) in RETRYABLE_SQLSTATES


def is_unique_violation(error: DBAPIError, column: str) -> bool:
    """A unique constraint on ``column`` rejected the write"""
    detail = str(error.orig)
    if sqlstate(error) == UNIQUE_VIOLATION:
        return column in detail
    # SQLite: "UNIQUE constraint failed: <table>.<column>"
    return "UNIQUE constraint failed" in detail and column in detail
