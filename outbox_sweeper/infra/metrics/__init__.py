"""Prometheus metrics."""

from outbox_sweeper.infra.metrics.prometheus import (
    database_pool_checkedout,
    database_pool_checkout_time_seconds,
    outbox_dispatch_failures_total,
    outbox_mark_failures_total,
    outbox_messages_dispatched_total,
    outbox_store_errors_total,
    outbox_sweep_duration_seconds,
    outbox_sweeps_in_flight,
    outbox_sweeps_total,
)

__all__ = [
    "database_pool_checkedout",
    "database_pool_checkout_time_seconds",
    "outbox_dispatch_failures_total",
    "outbox_mark_failures_total",
    "outbox_messages_dispatched_total",
    "outbox_store_errors_total",
    "outbox_sweep_duration_seconds",
    "outbox_sweeps_in_flight",
    "outbox_sweeps_total",
]
