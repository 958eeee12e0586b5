"""Identity-liveness middleware.

Runs after AuthenticationMiddleware on the same protected paths and confirms
that the token's subject still exists. Tokens stay cryptographically valid
after their user is deleted; this is where they stop working.
"""

import logging

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from urlmini.middleware.context import get_request_context, is_protected, unauthorized
from urlmini.services.store import StoreError, StoreFactory

logger = logging.getLogger(__name__)


class IdentityLivenessMiddleware(BaseHTTPMiddleware):
    """Rejects protected requests whose subject no longer resolves."""

    def __init__(self, app: ASGIApp, store_factory: StoreFactory, protected_paths: list[str]):
        super().__init__(app)
        self.store_factory = store_factory
        self.protected_paths = list(protected_paths)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path

        if request.method == "OPTIONS" or not is_protected(path, self.protected_paths):
            return await call_next(request)

        log_context = {"method": request.method, "path": path}
        payload = get_request_context(request).payload
        if payload is None:
            logger.warning("Unauthenticated request reached identity check", extra=log_context)
            return unauthorized("invalid token")

        # Not found and store failures are indistinguishable to the client
        try:
            async with self.store_factory() as store:
                await store.get_user_by_id(payload.subject_id)
        except StoreError as e:
            logger.warning(
                f"Token subject did not resolve: {e}",
                extra={**log_context, "user_id": payload.subject_id},
            )
            return unauthorized("invalid token")

        return await call_next(request)
