"""Prometheus metrics for the outbox sweeper.

Metrics are registered on the default registry and exposed by the liveness
app at ``/metrics``.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ============================================================================
# Sweep invocations
# ============================================================================

outbox_sweeps_total = Counter(
    "outbox_sweeps_total",
    "Sweep invocations by final status",
    ["status"],  # ok | aborted
)

outbox_sweep_duration_seconds = Histogram(
    "outbox_sweep_duration_seconds",
    "Wall-clock duration of one sweep invocation",
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
)

outbox_sweeps_in_flight = Gauge(
    "outbox_sweeps_in_flight",
    "Sweep invocations currently running",
)

# ============================================================================
# Per-topic outcomes
# ============================================================================

outbox_messages_dispatched_total = Counter(
    "outbox_messages_dispatched_total",
    "Messages delivered to a channel and marked dispatched",
    ["topic", "kind"],
)

outbox_dispatch_failures_total = Counter(
    "outbox_dispatch_failures_total",
    "Batches rejected or failed by the transport",
    ["topic", "kind"],
)

outbox_mark_failures_total = Counter(
    "outbox_mark_failures_total",
    "Batches delivered but not marked dispatched (will be re-sent)",
    ["topic"],
)

outbox_store_errors_total = Counter(
    "outbox_store_errors_total",
    "Outbox table access failures by operation",
    ["operation"],
)

# ============================================================================
# Database pool
# ============================================================================

database_pool_checkedout = Gauge(
    "database_pool_checkedout",
    "Database connections currently checked out of the pool",
)

database_pool_checkout_time_seconds = Histogram(
    "database_pool_checkout_time_seconds",
    "Time a connection stayed checked out of the pool",
    buckets=(0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 30.0),
)
