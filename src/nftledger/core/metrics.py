"""
Prometheus instrumentation for PSP34 collections.

Counters and gauges are process-wide; helpers are safe to call from the
operation path.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge

operation_counter = Counter(
    "psp34_operations_total",
    "Total PSP34 collection operations by outcome",
    ["operation", "outcome"],
)

total_supply_gauge = Gauge(
    "psp34_total_supply", "Current number of live tokens in a collection", ["collection"]
)


def record_operation(operation: str, outcome: str) -> None:
    """Count one operation; outcome is "ok" or the error kind name."""
    if not operation:
        return

    operation_counter.labels(operation=operation, outcome=outcome).inc()


def update_supply_gauge(collection: str, total_supply: int) -> None:
    """Refresh the supply gauge for a collection."""
    if not collection:
        return

    total_supply_gauge.labels(collection=collection).set(total_supply)
