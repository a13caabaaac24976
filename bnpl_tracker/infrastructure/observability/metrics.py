"""Prometheus metrics for tracker activity, validation failures and credit usage"""

from prometheus_client import Counter, Histogram, Gauge

# Mutation metrics
mutation_counter = Counter(
    "bnpl_mutations_total",
    "State changes applied to tracker collections",
    ["entity", "action"],  # transaction|payment|borrower|settings, create|update|delete|replace
)

transactions_created_counter = Counter(
    "bnpl_transactions_created_total",
    "Transactions recorded by plan and mode",
    ["plan", "mode"],
)

validation_failures_counter = Counter(
    "bnpl_validation_failures_total",
    "Rejected user input",
    ["kind"],  # transaction | payment | borrower | import
)

import_counter = Counter(
    "bnpl_import_total",
    "Data imports by outcome",
    ["outcome"],  # success | rejected | failed
)

# Storage health
storage_failures_counter = Counter(
    "bnpl_storage_failures_total",
    "Database reads/writes that failed",
)

# Credit usage, as of the last computed cycle summary
used_credit_gauge = Gauge(
    "bnpl_used_credit",
    "Outstanding principal across all installment months",
)

credit_utilization_gauge = Gauge(
    "bnpl_credit_utilization_percent",
    "Used credit as a percentage of the configured limit",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_transaction_created(plan: str, mode: str) -> None:
    transactions_created_counter.labels(plan=plan, mode=mode).inc()
    mutation_counter.labels(entity="transaction", action="create").inc()


def record_credit(used_credit: float, utilization) -> None:
    """Publish the latest credit figures; utilization is None without a limit"""
    used_credit_gauge.set(used_credit)
    credit_utilization_gauge.set(utilization or 0.0)
