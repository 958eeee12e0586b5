"""Authentication API endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from urlmini.api.deps import get_auth_service, get_current_payload, get_store
from urlmini.core.request_utils import get_client_ip, get_user_agent
from urlmini.schemas.auth import (
    LoginRequest,
    LoginResponse,
    RefreshRequest,
    RefreshResponse,
    SessionResponse,
    UserResponse,
)
from urlmini.services.auth import (
    AuthService,
    InvalidCredentialsError,
    InvalidTokenError,
    SessionUnusableError,
    TokenIssueError,
)
from urlmini.services.payload import Payload
from urlmini.services.store import NotFoundError, Store, StoreError

logger = logging.getLogger(__name__)

INTERNAL_ERROR_DETAIL = "an error occurred"

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
async def login(
    data: LoginRequest,
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    """Authenticate with username and password.

    Returns an access token, a refresh token and the logged-in user. The
    refresh token is backed by a server-side session that can be blocked.
    """
    try:
        result = await auth_service.login(
            data.username,
            data.password,
            client_ip=get_client_ip(request),
            user_agent=get_user_agent(request),
        )
    except InvalidCredentialsError as e:
        logger.warning(f"Failed login attempt for username: {data.username}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid username or password",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e
    except (StoreError, TokenIssueError) as e:
        logger.exception("Login failed after credential verification")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=INTERNAL_ERROR_DETAIL,
        ) from e

    return LoginResponse(
        session_id=result.session.id,
        access_token=result.access.token,
        access_token_expires_at=result.access.expires_at,
        refresh_token=result.refresh.token,
        refresh_token_expires_at=result.refresh.expires_at,
        user=UserResponse.model_validate(result.user),
    )


@router.post("/token/refresh", response_model=RefreshResponse)
async def refresh_token(
    data: RefreshRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> RefreshResponse:
    """Exchange a refresh token for a new access token.

    The refresh token is not rotated. It stays valid until its session
    expires or is blocked.
    """
    try:
        issued = await auth_service.renew_access_token(data.refresh_token)
    except InvalidTokenError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e
    except SessionUnusableError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except TokenIssueError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=INTERNAL_ERROR_DETAIL,
        ) from e

    return RefreshResponse(
        access_token=issued.token,
        access_token_expires_at=issued.expires_at,
    )


@router.get("/me", response_model=UserResponse)
async def get_me(
    payload: Payload = Depends(get_current_payload),
    store: Store = Depends(get_store),
) -> UserResponse:
    """Get the authenticated user."""
    try:
        user = await store.get_user_by_id(payload.subject_id)
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e
    except StoreError as e:
        logger.exception("Failed to load current user")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=INTERNAL_ERROR_DETAIL,
        ) from e
    return UserResponse.model_validate(user)


@router.get("/sessions", response_model=list[SessionResponse])
async def list_sessions(
    active_only: bool = Query(False, description="Only unexpired, unblocked sessions"),
    page_id: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    payload: Payload = Depends(get_current_payload),
    store: Store = Depends(get_store),
) -> list[SessionResponse]:
    """List the authenticated user's refresh sessions, newest first."""
    try:
        sessions = await store.list_sessions(
            payload.subject_id,
            limit=page_size,
            offset=(page_id - 1) * page_size,
            active_only=active_only,
        )
    except StoreError as e:
        logger.exception("Failed to list sessions")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=INTERNAL_ERROR_DETAIL,
        ) from e
    return [SessionResponse.model_validate(s) for s in sessions]
