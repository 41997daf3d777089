"""API middleware components."""

from .context import RequestContextMiddleware, actor_from_headers
from .errors import ErrorHandlingMiddleware
from .logging import RequestLoggingMiddleware

__all__ = [
    "ErrorHandlingMiddleware",
    "RequestContextMiddleware",
    "RequestLoggingMiddleware",
    "actor_from_headers",
]
