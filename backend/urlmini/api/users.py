"""User account API endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from urlmini.api.deps import get_store
from urlmini.schemas.auth import UserResponse
from urlmini.schemas.user import UserCreate
from urlmini.services.auth import hash_password
from urlmini.services.store import DuplicateError, Store, StoreError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    data: UserCreate,
    store: Store = Depends(get_store),
) -> UserResponse:
    """Register a new account."""
    try:
        user = await store.create_user(
            username=data.username,
            hashed_password=hash_password(data.password),
            email=data.email,
            first_name=data.first_name,
            last_name=data.last_name,
        )
    except DuplicateError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="username or email already exists",
        ) from e
    except StoreError as e:
        logger.exception("Failed to create user")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="an error occurred",
        ) from e

    logger.info(f"User created: {user.username}")
    return UserResponse.model_validate(user)
