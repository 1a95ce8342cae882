"""
Prometheus metrics for the inventory core

Counters are process-global (default registry). Recording is a no-op when
METRICS_ENABLED is false.
"""
from prometheus_client import Counter, Histogram

from pantrykit.common.config import get_settings

CLASSIFICATIONS = Counter(
    "pantry_classifications_total",
    "Product classifications by deciding source",
    ["source"],
)

REMOTE_OPERATIONS = Counter(
    "pantry_remote_operations_total",
    "Remote GraphQL operations by outcome",
    ["operation", "outcome"],
)

REMOTE_LATENCY = Histogram(
    "pantry_remote_operation_seconds",
    "Remote GraphQL operation latency",
    ["operation"],
)


def record_classification(source: str) -> None:
    if get_settings().metrics_enabled:
        CLASSIFICATIONS.labels(source=source).inc()


def record_remote_operation(operation: str, outcome: str, seconds: float) -> None:
    if not get_settings().metrics_enabled:
        return
    REMOTE_OPERATIONS.labels(operation=operation, outcome=outcome).inc()
    REMOTE_LATENCY.labels(operation=operation).observe(seconds)
