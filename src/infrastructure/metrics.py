"""Prometheus metrics for the token store"""

import time
from contextlib import contextmanager
from typing import Iterator

from prometheus_client import REGISTRY, Counter, Histogram, Info

from src.core.config import get_settings

metrics_registry = REGISTRY

# ====================
# Service Information
# ====================

service_info = Info(
    "patstore_service",
    "Token store service information",
    registry=metrics_registry
)

service_info.info({
    "version": get_settings().app_version,
    "environment": get_settings().environment,
    "service": "patstore"
})

# ====================
# Token Store Metrics
# ====================

token_store_operations_total = Counter(
    "patstore_token_store_operations_total",
    "Total number of token store operations",
    ["operation", "outcome"],
    registry=metrics_registry
)

token_store_operation_duration_seconds = Histogram(
    "patstore_token_store_operation_duration_seconds",
    "Token store operation latency in seconds",
    ["operation"],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
    registry=metrics_registry
)

# ====================
# Logging Metrics
# ====================

log_messages_total = Counter(
    "patstore_log_messages_total",
    "Total number of log messages",
    ["level", "logger"],
    registry=metrics_registry
)


@contextmanager
def track_operation(operation: str) -> Iterator[None]:
    """Record duration and outcome of a store operation.

    The outcome label is the exception class name, or "success".
    """
    if not get_settings().enable_metrics:
        yield
        return

    start = time.perf_counter()
    outcome = "success"
    try:
        yield
    except BaseException as exc:
        outcome = type(exc).__name__
        raise
    finally:
        token_store_operation_duration_seconds.labels(operation=operation).observe(
            time.perf_counter() - start
        )
        token_store_operations_total.labels(
            operation=operation, outcome=outcome
        ).inc()
