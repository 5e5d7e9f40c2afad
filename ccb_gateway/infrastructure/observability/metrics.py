"""Prometheus metrics for ledger operations, withdrawal progress and mail delivery"""

from decimal import Decimal
from prometheus_client import Counter, Histogram

# Business operations
operation_counter = Counter(
    "ccb_operation_total",
    "Business operations processed",
    ["operation", "outcome"],  # outcome: success | rejected
)

withdrawal_amount_histogram = Histogram(
    "ccb_withdrawal_amount",
    "Amounts debited by new withdrawals",
    buckets=[10, 50, 100, 500, 1_000, 5_000, 10_000, 50_000],
)

stage_advance_counter = Counter(
    "ccb_withdrawal_stage_advance_total",
    "Withdrawal stages completed",
    ["stage"],
)

# Mail metrics
mail_latency_histogram = Histogram(
    "mail_latency_seconds",
    "Mail relay response time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

mail_failure_counter = Counter(
    "mail_failures_total",
    "Failed mail deliveries",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_operation(operation: str, success: bool = True) -> None:
    operation_counter.labels(operation=operation, outcome="success" if success else "rejected").inc()


def record_withdrawal(amount: Decimal) -> None:
    """Bucket the amount of a created withdrawal"""
    withdrawal_amount_histogram.observe(float(amount))
