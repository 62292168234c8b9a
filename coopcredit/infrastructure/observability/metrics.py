"""Prometheus metrics for monitoring approval rates, risk levels, and bureau health"""

from prometheus_client import Counter, Histogram

# Decision metrics
evaluation_counter = Counter(
    "coopcredit_evaluation_total",
    "Total credit application evaluations",
    ["outcome"],  # approved | rejected
)

risk_level_counter = Counter(
    "coopcredit_risk_level_total",
    "Risk evaluations by level and source",
    ["level", "source"],  # HIGH | MEDIUM | LOW, bureau | fallback
)

# Risk bureau metrics
bureau_latency_histogram = Histogram(
    "risk_bureau_latency_seconds",
    "Risk bureau response time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

bureau_fallback_counter = Counter(
    "risk_bureau_fallback_total",
    "Evaluations scored by the deterministic fallback",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_evaluation(approved: bool, risk_level: str, source: str) -> None:
    """Record evaluation metrics for monitoring approval rates and risk distribution"""
    outcome = "approved" if approved else "rejected"
    evaluation_counter.labels(outcome=outcome).inc()
    risk_level_counter.labels(level=risk_level, source=source).inc()
