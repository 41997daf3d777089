"""FastAPI dependencies for API endpoints."""

from fastapi import Request

from datacompliance.api.middleware.context import actor_from_headers
from datacompliance.audit.trail import AuditTrail
from datacompliance.core.context import Actor
from datacompliance.core.exceptions import ConfigurationError
from datacompliance.service import DataComplianceService

__all__ = [
    "get_actor",
    "get_audit_trail",
    "get_service",
]


def get_actor(request: Request) -> Actor:
    """Get the acting principal resolved by RequestContextMiddleware."""
    actor = getattr(request.state, "actor", None)
    return actor if actor is not None else actor_from_headers(request)


def get_service(request: Request) -> DataComplianceService:
    """Get the service stored on app state at startup.

    Raises:
        ConfigurationError: If the application was started without a service
    """
    service = getattr(request.app.state, "service", None)
    if service is None:
        raise ConfigurationError("Data compliance service is not initialized")
    return service


def get_audit_trail(request: Request) -> AuditTrail:
    return get_service(request).audit_trail
