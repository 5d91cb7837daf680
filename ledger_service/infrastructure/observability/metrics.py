"""Prometheus metrics for monitoring transfers, deposits and HTTP latency"""

from prometheus_client import Counter, Histogram

# Transfer metrics
transfer_counter = Counter(
    "ledger_transfer_total",
    "Transfer requests by outcome",
    ["outcome"],  # applied | replayed | rejected | failed
)

conflict_retry_counter = Counter(
    "ledger_conflict_retries_total",
    "Atomic units re-run after an optimistic concurrency conflict",
    ["operation"],  # transfer | deposit
)

# Account metrics
deposit_counter = Counter(
    "ledger_deposit_total",
    "Deposit requests by outcome",
    ["outcome"],  # applied | rejected | failed
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_transfer(outcome: str) -> None:
    """Record a transfer outcome"""
    transfer_counter.labels(outcome=outcome).inc()


def record_deposit(outcome: str) -> None:
    """Record a deposit outcome"""
    deposit_counter.labels(outcome=outcome).inc()
