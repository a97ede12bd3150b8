"""Prometheus metrics for monitoring priority tiers and triage outcomes"""

from prometheus_client import Counter, Histogram

# Scoring metrics
priority_calculation_counter = Counter(
    "dropdebt_priority_calculations_total",
    "Bills scored by the priority engine",
    ["tier"],  # CRITICAL | HIGH | MEDIUM | LOW
)

priority_failure_counter = Counter(
    "dropdebt_priority_failures_total",
    "Bills that could not be scored",
)

# Triage metrics
triage_counter = Counter(
    "dropdebt_triage_total",
    "Triage runs",
    ["outcome"],  # crisis | stable
)

triage_allocated_histogram = Histogram(
    "dropdebt_triage_allocated_dollars",
    "Cash allocated per triage run",
    buckets=[0, 25, 100, 250, 500, 1000, 2500, 5000],
)

# Alert metrics
crisis_alert_counter = Counter(
    "dropdebt_crisis_alerts_total",
    "Crisis alerts raised",
    ["alert_type", "severity"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_priority(tier: str) -> None:
    """Record one scored bill under its tier"""
    priority_calculation_counter.labels(tier=tier).inc()


def record_triage(is_crisis: bool, total_allocated: float) -> None:
    """Record triage outcome and how much cash it put to work"""
    outcome = "crisis" if is_crisis else "stable"
    triage_counter.labels(outcome=outcome).inc()
    triage_allocated_histogram.observe(total_allocated)


def record_alert(alert_type: str, severity: str) -> None:
    crisis_alert_counter.labels(alert_type=alert_type, severity=severity).inc()
