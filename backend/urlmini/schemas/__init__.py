# urlmini Pydantic Schemas
from urlmini.schemas.auth import (
    LoginRequest,
    LoginResponse,
    RefreshRequest,
    RefreshResponse,
    SessionResponse,
    UserResponse,
)
from urlmini.schemas.link import LinkCodeUpdate, LinkCreate, LinkListResponse, LinkResponse
from urlmini.schemas.user import UserCreate

__all__ = [
    "LinkCodeUpdate",
    "LinkCreate",
    "LinkListResponse",
    "LinkResponse",
    "LoginRequest",
    "LoginResponse",
    "RefreshRequest",
    "RefreshResponse",
    "SessionResponse",
    "UserCreate",
    "UserResponse",
]
