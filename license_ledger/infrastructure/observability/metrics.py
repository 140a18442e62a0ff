"""Prometheus metrics for monitoring report usage, billing events and request latency"""

from prometheus_client import Counter, Histogram

# Report metrics
report_counter = Counter(
    "license_ledger_report_total",
    "Reports generated",
    ["report"],  # revenue | billing | dashboard | export
)

report_duration_histogram = Histogram(
    "license_ledger_report_duration_seconds",
    "Time spent building a report from its snapshot",
    ["report"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0],
)

report_failure_counter = Counter(
    "license_ledger_report_failures_total",
    "Reports rejected because of malformed input",
    ["report"],
)

# Billing metrics
agreements_billed_counter = Counter(
    "license_ledger_agreements_billed_total",
    "Agreements advanced to their next billing date",
)

billing_due_counter = Counter(
    "license_ledger_billing_due_agreements",
    "Due agreements seen by billing reports",
    ["status"],  # overdue | upcoming
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_report(report: str, duration_seconds: float) -> None:
    """Record a successfully generated report"""
    report_counter.labels(report=report).inc()
    report_duration_histogram.labels(report=report).observe(duration_seconds)


def record_billing_due(overdue_count: int, upcoming_count: int) -> None:
    """Record how many agreements a billing report flagged"""
    billing_due_counter.labels(status="overdue").inc(overdue_count)
    billing_due_counter.labels(status="upcoming").inc(upcoming_count)
