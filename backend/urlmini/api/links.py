"""Short link API endpoints.

Everything under /links is behind the authentication middleware chain and
scoped to the token's subject. The public redirect lives on its own router so
it can be mounted last, after every fixed path.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from urlmini.api.deps import get_current_payload
from urlmini.core import get_db
from urlmini.schemas.link import LinkCodeUpdate, LinkCreate, LinkListResponse, LinkResponse
from urlmini.services.link import (
    DuplicateCodeError,
    LinkError,
    LinkForbiddenError,
    LinkNotFoundError,
    LinkService,
)
from urlmini.services.payload import Payload

router = APIRouter(prefix="/links", tags=["links"])
redirect_router = APIRouter(tags=["redirect"])


def get_link_service(db: AsyncSession = Depends(get_db)) -> LinkService:
    """Dependency to get link service."""
    return LinkService(db)


def _link_http_error(e: LinkError) -> HTTPException:
    if isinstance(e, LinkNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="link not found")
    if isinstance(e, LinkForbiddenError):
        return HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="link doesn't belong to the authenticated user",
        )
    if isinstance(e, DuplicateCodeError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail="code already in use")
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("", response_model=LinkResponse, status_code=status.HTTP_201_CREATED)
async def create_link(
    data: LinkCreate,
    payload: Payload = Depends(get_current_payload),
    service: LinkService = Depends(get_link_service),
) -> LinkResponse:
    """Create a short link. A random 6-letter code is used when none is given."""
    try:
        link = await service.create(payload.subject_id, str(data.link), data.code)
    except LinkError as e:
        raise _link_http_error(e) from e
    return LinkResponse.model_validate(link)


@router.get("", response_model=LinkListResponse)
async def list_links(
    page_id: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    payload: Payload = Depends(get_current_payload),
    service: LinkService = Depends(get_link_service),
) -> LinkListResponse:
    """List the authenticated user's links."""
    links, total = await service.list(payload.subject_id, page=page_id, page_size=page_size)
    pages = (total + page_size - 1) // page_size if total > 0 else 1
    return LinkListResponse(
        items=[LinkResponse.model_validate(link) for link in links],
        total=total,
        page=page_id,
        page_size=page_size,
        pages=pages,
    )


@router.get("/{link_id}", response_model=LinkResponse)
async def get_link(
    link_id: int,
    payload: Payload = Depends(get_current_payload),
    service: LinkService = Depends(get_link_service),
) -> LinkResponse:
    try:
        link = await service.get(link_id, payload.subject_id)
    except LinkError as e:
        raise _link_http_error(e) from e
    return LinkResponse.model_validate(link)


@router.patch("/{link_id}", response_model=LinkResponse)
async def change_code(
    link_id: int,
    data: LinkCodeUpdate,
    payload: Payload = Depends(get_current_payload),
    service: LinkService = Depends(get_link_service),
) -> LinkResponse:
    """Change a link's short code."""
    try:
        link = await service.change_code(link_id, payload.subject_id, data.code)
    except LinkError as e:
        raise _link_http_error(e) from e
    return LinkResponse.model_validate(link)


@router.patch("/{link_id}/toggle", response_model=LinkResponse)
async def toggle_link(
    link_id: int,
    payload: Payload = Depends(get_current_payload),
    service: LinkService = Depends(get_link_service),
) -> LinkResponse:
    """Activate or deactivate a link."""
    try:
        link = await service.toggle(link_id, payload.subject_id)
    except LinkError as e:
        raise _link_http_error(e) from e
    return LinkResponse.model_validate(link)


@redirect_router.get("/{code}", include_in_schema=False)
async def follow_link(
    code: str,
    service: LinkService = Depends(get_link_service),
) -> RedirectResponse:
    """Redirect to the target of an active link."""
    link = await service.get_by_code(code)
    if link is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="link not found")
    return RedirectResponse(link.link, status_code=status.HTTP_308_PERMANENT_REDIRECT)
