"""Typed per-request authentication context."""

from dataclasses import dataclass

from starlette.requests import Request
from starlette.responses import JSONResponse

from urlmini.services.payload import Payload


@dataclass
class RequestContext:
    """Request-scoped state shared between the middleware chain and routes.

    `payload` is only ever written by AuthenticationMiddleware.
    """

    payload: Payload | None = None


def get_request_context(request: Request) -> RequestContext:
    """Return the context attached to this request, or an empty one."""
    context = getattr(request.state, "context", None)
    if isinstance(context, RequestContext):
        return context
    return RequestContext()


def is_protected(path: str, protected_paths: list[str]) -> bool:
    """Exact or segment-boundary prefix match against `protected_paths`."""
    for prefix in protected_paths:
        if path == prefix or path.startswith(prefix.rstrip("/") + "/"):
            return True
    return False


def unauthorized(detail: str) -> JSONResponse:
    return JSONResponse(
        status_code=401,
        content={"detail": detail},
        headers={"WWW-Authenticate": "Bearer"},
    )
