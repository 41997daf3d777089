"""HTTP surface for erasure, export and the audit trail."""

from datacompliance.api.app import create_app

__all__ = ["create_app"]
