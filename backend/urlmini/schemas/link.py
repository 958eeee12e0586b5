"""Pydantic schemas for Link API."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, HttpUrl

CODE_PATTERN = r"^[a-zA-Z]+$"


class LinkCreate(BaseModel):
    """Schema for creating a new short link."""

    link: HttpUrl = Field(..., description="Redirect target")
    code: str | None = Field(
        None,
        min_length=1,
        max_length=64,
        pattern=CODE_PATTERN,
        description="Custom short code (letters only). Random when omitted.",
    )


class LinkCodeUpdate(BaseModel):
    """Schema for changing a link's code."""

    code: str = Field(..., min_length=1, max_length=64, pattern=CODE_PATTERN)


class LinkResponse(BaseModel):
    """Schema for link response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    code: str
    link: str
    active: bool
    created_at: datetime


class LinkListResponse(BaseModel):
    """Paginated list of links."""

    items: list[LinkResponse]
    total: int
    page: int
    page_size: int
    pages: int
