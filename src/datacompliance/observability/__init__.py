"""Observability for datacompliance."""

from datacompliance.observability.metrics import (
    get_metrics,
    observe_erasure,
    record_audit_write_failure,
    record_export_failure,
    record_hold_veto,
    set_metrics_enabled,
)

__all__ = [
    "get_metrics",
    "observe_erasure",
    "record_audit_write_failure",
    "record_export_failure",
    "record_hold_veto",
    "set_metrics_enabled",
]
