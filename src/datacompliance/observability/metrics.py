"""Prometheus metrics for erasure, export and audit operations.

Labels carry statuses, domain names and hold names only; user identifiers
are never used as label values.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import TYPE_CHECKING

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram, generate_latest

if TYPE_CHECKING:
    from collections.abc import Generator

__all__ = [
    "ERASURE_COUNT",
    "ERASURE_DURATION",
    "HOLD_VETO_COUNT",
    "EXPORT_SECTION_FAILURES",
    "AUDIT_WRITE_FAILURES",
    "observe_erasure",
    "record_hold_veto",
    "record_export_failure",
    "record_audit_write_failure",
    "get_metrics",
]

PREFIX = "datacompliance"

ERASURE_DURATION = Histogram(
    f"{PREFIX}_erasure_duration_seconds",
    "Time to complete an erasure request",
    ["request_type"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
)

ERASURE_COUNT = Counter(
    f"{PREFIX}_erasures_total",
    "Erasure requests by final status",
    ["request_type", "status"],
)

HOLD_VETO_COUNT = Counter(
    f"{PREFIX}_hold_vetoes_total",
    "Erasure attempts vetoed by a hold",
    ["hold"],
)

EXPORT_SECTION_FAILURES = Counter(
    f"{PREFIX}_export_section_failures_total",
    "Export sections left empty because their adapter failed",
    ["domain"],
)

AUDIT_WRITE_FAILURES = Counter(
    f"{PREFIX}_audit_write_failures_total",
    "Erasures whose audit entry could not be written",
)

_enabled = True


def set_metrics_enabled(enabled: bool) -> None:
    """Turn metric recording on or off (e.g. from Settings.metrics_enabled)."""
    global _enabled
    _enabled = enabled


@contextmanager
def observe_erasure(request_type: str) -> Generator[dict[str, str], None, None]:
    """Time an erasure and count it by the status the caller stores in the dict.

    Example:
        with observe_erasure("user") as observation:
            outcome = await run()
            observation["status"] = outcome.status.value
    """
    observation = {"status": "error"}
    start = time.perf_counter()
    try:
        yield observation
    finally:
        if _enabled:
            ERASURE_DURATION.labels(request_type=request_type).observe(
                time.perf_counter() - start
            )
            ERASURE_COUNT.labels(request_type=request_type, status=observation["status"]).inc()


def record_hold_veto(hold: str) -> None:
    if _enabled:
        HOLD_VETO_COUNT.labels(hold=hold).inc()


def record_export_failure(domain: str) -> None:
    if _enabled:
        EXPORT_SECTION_FAILURES.labels(domain=domain).inc()


def record_audit_write_failure() -> None:
    if _enabled:
        AUDIT_WRITE_FAILURES.inc()


def get_metrics(registry: CollectorRegistry | None = None) -> bytes:
    """Get current metrics in Prometheus format."""
    return generate_latest(registry or REGISTRY)
