"""Request context middleware: resolves the acting principal from headers."""

from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from uuid_utils.compat import uuid7

from datacompliance.core.context import Actor, ActorType, operation_context

ACTOR_ID_HEADER = "X-Actor-Id"
ACTOR_TYPE_HEADER = "X-Actor-Type"
ACTOR_CAPABILITIES_HEADER = "X-Actor-Capabilities"

ANONYMOUS_ACTOR_ID = "anonymous"


def actor_from_headers(request: Request) -> Actor:
    """Build the actor from headers set by the upstream authenticating proxy.

    Capabilities are a comma-separated list. Missing headers yield an
    anonymous actor without capabilities.
    """
    actor_id = request.headers.get(ACTOR_ID_HEADER, "").strip() or ANONYMOUS_ACTOR_ID

    raw_type = request.headers.get(ACTOR_TYPE_HEADER, ActorType.HUMAN.value).strip().lower()
    try:
        actor_type = ActorType(raw_type)
    except ValueError:
        actor_type = ActorType.HUMAN

    raw_capabilities = request.headers.get(ACTOR_CAPABILITIES_HEADER, "")
    capabilities = frozenset(c.strip() for c in raw_capabilities.split(",") if c.strip())

    return Actor(actor_id=actor_id, actor_type=actor_type, capabilities=capabilities)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Middleware that binds an OperationContext for each request.

    Sets:
        request.state.request_id: The generated request ID (UUIDv7)
        request.state.actor: The resolved Actor
        X-Request-ID / X-Correlation-ID response headers
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Process request within an OperationContext."""
        request_id = uuid7()
        request.state.request_id = request_id

        actor = actor_from_headers(request)
        request.state.actor = actor

        with operation_context(actor, correlation_id=request_id) as ctx:
            response = await call_next(request)

        response.headers["X-Request-ID"] = str(request_id)
        response.headers["X-Correlation-ID"] = str(ctx.correlation_id)
        return response
