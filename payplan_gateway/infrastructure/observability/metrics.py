"""Prometheus metrics for option generation, scoring fallbacks and custom plan review"""

from prometheus_client import Counter, Histogram

# Option generation
options_generated_counter = Counter(
    "payplan_options_generated_total",
    "Option sets generated, by source of the system plan",
    ["system_plan_source"],  # scoring | rules
)

scoring_fallback_counter = Counter(
    "payplan_scoring_fallback_total",
    "System plans that fell back to the rules engine",
    ["reason"],  # unavailable | error | low_confidence
)

# Custom schedules
custom_validation_counter = Counter(
    "payplan_custom_validation_total",
    "Custom schedule validations by outcome",
    ["outcome"],  # valid | review | invalid
)

plans_materialized_counter = Counter(
    "payplan_plans_materialized_total",
    "Payment plans created from options or custom schedules",
    ["plan_type"],
)

# Service health
request_duration_histogram = Histogram(
    "payplan_http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_validation(is_valid: bool, requires_manual_review: bool) -> None:
    """Record custom schedule verdicts for monitoring review load"""
    if not is_valid:
        outcome = "invalid"
    elif requires_manual_review:
        outcome = "review"
    else:
        outcome = "valid"

    custom_validation_counter.labels(outcome=outcome).inc()
