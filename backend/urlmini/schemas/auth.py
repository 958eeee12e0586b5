"""Pydantic schemas for authentication API."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class UserResponse(BaseModel):
    """Response with user information."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    first_name: str
    last_name: str
    email: str
    password_changed_at: datetime | None
    created_at: datetime


class LoginRequest(BaseModel):
    """Request for login."""

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    """Response with both tokens and the logged-in user."""

    session_id: UUID = Field(description="Id of the session backing the refresh token")
    access_token: str
    access_token_expires_at: datetime
    refresh_token: str
    refresh_token_expires_at: datetime
    user: UserResponse


class RefreshRequest(BaseModel):
    """Request for access token renewal."""

    refresh_token: str = Field(..., min_length=1)


class RefreshResponse(BaseModel):
    """Response with a freshly minted access token."""

    access_token: str
    access_token_expires_at: datetime


class SessionResponse(BaseModel):
    """A refresh session as seen by its owner. The refresh token is never returned."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    client_ip: str
    user_agent: str
    is_blocked: bool
    expires_at: datetime
    created_at: datetime
