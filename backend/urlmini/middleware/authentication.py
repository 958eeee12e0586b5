"""Bearer token authentication middleware.

Guards the configured protected path prefixes. A request to a protected path
must carry ``Authorization: Bearer <token>`` where the token decodes with the
application's TokenCodec. The decoded Payload is attached to
``request.state.context`` for the identity check and the route handlers.

Only header inspection and local cryptography happen here; no I/O.
"""

import logging

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from urlmini.middleware.context import RequestContext, is_protected, unauthorized
from urlmini.services.token_codec import InvalidTokenError, TokenCodec

logger = logging.getLogger(__name__)

AUTHORIZATION_TYPE_BEARER = "bearer"


class AuthenticationMiddleware(BaseHTTPMiddleware):
    """Rejects protected requests without a valid bearer token with a 401."""

    def __init__(self, app: ASGIApp, codec: TokenCodec, protected_paths: list[str]):
        super().__init__(app)
        self.codec = codec
        self.protected_paths = list(protected_paths)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path

        # CORS preflight is answered by CORSMiddleware
        if request.method == "OPTIONS" or not is_protected(path, self.protected_paths):
            return await call_next(request)

        log_context = {"method": request.method, "path": path}

        header = request.headers.get("Authorization", "")
        if not header:
            logger.warning("Request without authorization header", extra=log_context)
            return unauthorized("authorization header is empty")

        fields = header.split()
        if len(fields) != 2:
            logger.warning("Malformed authorization header", extra=log_context)
            return unauthorized("authorization header is invalid")

        scheme, token = fields
        if scheme.lower() != AUTHORIZATION_TYPE_BEARER:
            logger.warning(f"Unsupported authorization type {scheme!r}", extra=log_context)
            return unauthorized("authorization type is invalid")

        try:
            payload = self.codec.decode(token)
        except InvalidTokenError as e:
            logger.warning(f"Invalid token: {e}", extra=log_context)
            return unauthorized("invalid token")

        request.state.context = RequestContext(payload=payload)
        return await call_next(request)
