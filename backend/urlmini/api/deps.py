"""Shared FastAPI dependencies.

The TokenCodec, the Settings and the store factory are built once by
``create_app`` and kept on ``app.state``; these dependencies hand them to
route handlers.
"""

from collections.abc import AsyncIterator

from fastapi import Depends, HTTPException, Request, status

from urlmini.core.config import Settings
from urlmini.middleware.context import get_request_context
from urlmini.services.auth import AuthService
from urlmini.services.payload import Payload
from urlmini.services.store import Store
from urlmini.services.token_codec import TokenCodec


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_token_codec(request: Request) -> TokenCodec:
    return request.app.state.token_codec


async def get_store(request: Request) -> AsyncIterator[Store]:
    """Dependency to get a Store for the duration of the request."""
    async with request.app.state.store_factory() as store:
        yield store


def get_auth_service(
    store: Store = Depends(get_store),
    codec: TokenCodec = Depends(get_token_codec),
    settings: Settings = Depends(get_app_settings),
) -> AuthService:
    """Dependency to get auth service."""
    return AuthService(
        store,
        codec,
        access_token_duration=settings.access_token_duration,
        refresh_token_duration=settings.refresh_token_duration,
    )


def get_current_payload(request: Request) -> Payload:
    """Dependency to get the Payload attached by the authentication middleware.

    Only routes under a protected prefix ever see one; anywhere else this
    rejects the request.
    """
    payload = get_request_context(request).payload
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return payload
