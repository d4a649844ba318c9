"""
Prometheus metrics collection for nexuschain

This module provides metrics instrumentation for monitoring registration,
verification and timeline traffic and the health of the collaborators
(record store, blockchain, QR rendering) they depend on.
"""
import os
from typing import Optional

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)


# Global registry for metrics
REGISTRY = CollectorRegistry()


# =======================
# WORKFLOW METRICS
# =======================

registrations_total = Counter(
    name="nexus_registrations_total",
    documentation="Product registrations by outcome",
    labelnames=["outcome"],  # outcome: success, validation_error, duplicate, record_store_error
    registry=REGISTRY,
)

anchor_attempts_total = Counter(
    name="nexus_anchor_attempts_total",
    documentation="Blockchain anchoring steps by outcome",
    labelnames=["outcome"],  # outcome: anchored, unlinked, failed, skipped
    registry=REGISTRY,
)

identifier_renders_total = Counter(
    name="nexus_identifier_renders_total",
    documentation="QR identifier renders by outcome",
    labelnames=["outcome"],  # outcome: success, failed
    registry=REGISTRY,
)

verifications_total = Counter(
    name="nexus_verifications_total",
    documentation="Verification lookups by outcome",
    labelnames=["outcome"],  # outcome: verified, not_verified, invalid_input
    registry=REGISTRY,
)

timelines_built_total = Counter(
    name="nexus_timelines_built_total",
    documentation="Provenance timelines assembled",
    registry=REGISTRY,
)

checkpoints_recorded_total = Counter(
    name="nexus_checkpoints_recorded_total",
    documentation="Checkpoints written through the core, by status tag",
    labelnames=["status"],
    registry=REGISTRY,
)

# =======================
# COLLABORATOR METRICS
# =======================

collaborator_request_duration_seconds = Histogram(
    name="nexus_collaborator_request_duration_seconds",
    documentation="Time spent in collaborator calls in seconds",
    labelnames=["collaborator", "operation"],  # collaborator: record_store, blockchain, qr
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 120.0],
    registry=REGISTRY,
)

# =======================
# ERROR METRICS
# =======================

errors_total = Counter(
    name="nexus_errors_total",
    documentation="Total number of errors by class and component",
    labelnames=["error_type", "component"],
    registry=REGISTRY,
)


# =======================
# HELPER FUNCTIONS
# =======================

def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics in text format

    Returns:
        Metrics in Prometheus text format
    """
    return generate_latest(REGISTRY)


def get_content_type() -> str:
    """Content type for Prometheus metrics"""
    return CONTENT_TYPE_LATEST


def start_metrics_server(port: Optional[int] = None) -> None:
    """
    Start HTTP server for Prometheus metrics

    Args:
        port: Port to listen on (defaults to env var METRICS_PORT or 8000)
    """
    # Lazy import: the HTTP server is only needed when the endpoint is enabled
    from prometheus_client import start_http_server

    metrics_port = port or int(os.getenv("METRICS_PORT", "8000"))
    start_http_server(metrics_port, registry=REGISTRY)


# =======================
# CONTEXT MANAGERS
# =======================

class track_duration:
    """
    Context manager for tracking operation duration

    Usage:
        with track_duration(collaborator_request_duration_seconds,
                            collaborator="record_store", operation="create_product"):
            # do work
            pass
    """

    def __init__(self, histogram: Histogram, **labels):
        """
        Initialize duration tracker

        Args:
            histogram: Prometheus Histogram metric
            **labels: Label values for the metric
        """
        self.histogram = histogram
        self.labels = labels
        self.timer = None

    def __enter__(self):
        """Start timer"""
        self.timer = self.histogram.labels(**self.labels).time()
        self.timer.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Stop timer"""
        self.timer.__exit__(exc_type, exc_val, exc_tb)
        return False


def increment_counter(counter: Counter, value: float = 1.0, **labels) -> None:
    """
    Increment a counter metric

    Args:
        counter: Prometheus Counter metric
        value: Value to increment by
        **labels: Label values for the metric
    """
    if labels:
        counter.labels(**labels).inc(value)
    else:
        counter.inc(value)


def record_error(error: BaseException, component: str) -> None:
    """
    Count an error by its class name.

    Args:
        error: The exception raised or captured
        component: Where it happened (registration, verification, ...)
    """
    increment_counter(errors_total, 1, error_type=type(error).__name__, component=component)


def collaborator_call(collaborator: str, operation: str) -> track_duration:
    """Shorthand for timing one collaborator call."""
    return track_duration(
        collaborator_request_duration_seconds,
        collaborator=collaborator,
        operation=operation,
    )
