"""
Prometheus metrics for the license governance service.

Custom metrics for business logic and performance monitoring.
"""

from prometheus_client import Counter, Histogram

# License metrics
licenses_created_total = Counter(
    "licenses_created_total",
    "Total licenses created",
    ["license_type", "approval"],
)

license_transitions_total = Counter(
    "license_transitions_total",
    "Total license state transitions",
    ["action"],
)

license_validations_total = Counter(
    "license_validations_total",
    "Total license validations",
    ["check", "result"],
)

# Approval metrics
approvals_submitted_total = Counter(
    "approvals_submitted_total",
    "Total approval requests submitted",
    ["approval_type"],
)

approvals_resolved_total = Counter(
    "approvals_resolved_total",
    "Total approval requests resolved",
    ["status"],
)

# Sweep metrics
sweep_duration_seconds = Histogram(
    "sweep_duration_seconds",
    "Duration of periodic expiry sweeps in seconds",
    ["sweep"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 30.0, 120.0],
)

# Error metrics
errors_total = Counter(
    "errors_total",
    "Total errors",
    ["error_type", "operation"],
)
