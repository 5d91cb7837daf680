"""Optimistic-concurrency retry around LedgerStore.run_atomic"""

import logging
import time
from typing import Callable, TypeVar

from ledger_service.domain.exceptions import ConcurrentUpdateError, InternalError
from ledger_service.domain.store import LedgerSession, LedgerStore
from ledger_service.infrastructure.observability.metrics import conflict_retry_counter

T = TypeVar("T")

logger = logging.getLogger(__name__)


def run_with_conflict_retry(
    store: LedgerStore,
    work: Callable[[LedgerSession], T],
    operation: str,
    max_attempts: int,
    backoff_seconds: float,
) -> T:
    """
    Run ``work`` atomically, re-running it from scratch when a balance
    compare-and-set loses a race.

    Retry strategy:
    - Each attempt opens a new transaction and re-reads every row it needs
    - Linear backoff: backoff_seconds * attempt between attempts
    - Other store failures are not retried

    Raises:
        InternalError: Still conflicting after ``max_attempts`` attempts
    """
    attempt = 0
    while True:
        attempt += 1
        try:
            return store.run_atomic(work)
        except ConcurrentUpdateError as e:
            if attempt >= max_attempts:
                logger.error(
                    f"{operation} gave up after {attempt} conflicting attempts",
                    extra={"operation": operation, "account_id": e.account_id},
                )
                raise InternalError(f"Could not complete {operation}: concurrent updates") from e

            conflict_retry_counter.labels(operation=operation).inc()
            logger.info(
                f"{operation} conflict, retrying: {e}",
                extra={"operation": operation, "attempt": attempt, "account_id": e.account_id},
            )
            time.sleep(backoff_seconds * attempt)
