"""Link service - business logic for short link management."""

import builtins
import logging
import secrets
import string

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from urlmini.models import Link

logger = logging.getLogger(__name__)

CODE_LENGTH = 6
CODE_ALPHABET = string.ascii_letters


class LinkError(Exception):
    """Base link error."""

    pass


class LinkNotFoundError(LinkError):
    """Link does not exist."""

    pass


class LinkForbiddenError(LinkError):
    """Link belongs to another user."""

    pass


class DuplicateCodeError(LinkError):
    """Short code is already taken."""

    pass


def random_code(length: int = CODE_LENGTH) -> str:
    """Generate a random code of ASCII letters."""
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


class LinkService:
    """Service for managing a user's short links."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, user_id: int, target: str, code: str | None = None) -> Link:
        """Create a link. A random code is generated when none is given."""
        link = Link(user_id=user_id, code=code or random_code(), link=target, active=True)
        self.db.add(link)
        await self._flush(link.code)
        await self.db.refresh(link)
        logger.info(f"Link created: {link.code} (user {user_id})")
        return link

    async def get(self, link_id: int, user_id: int) -> Link:
        """Get a link owned by `user_id`.

        Raises:
            LinkNotFoundError: No link with this id.
            LinkForbiddenError: The link belongs to someone else.
        """
        result = await self.db.execute(select(Link).where(Link.id == link_id))
        link = result.scalar_one_or_none()
        if link is None:
            raise LinkNotFoundError(f"Link {link_id} not found")
        if link.user_id != user_id:
            raise LinkForbiddenError("Link doesn't belong to the authenticated user")
        return link

    async def get_by_code(self, code: str) -> Link | None:
        """Get an active link by its public code."""
        result = await self.db.execute(
            select(Link).where(Link.code == code, Link.active.is_(True))
        )
        return result.scalar_one_or_none()

    async def list(
        self, user_id: int, page: int = 1, page_size: int = 10
    ) -> tuple[builtins.list[Link], int]:
        """List a user's links, newest first.

        Returns a tuple of (links, total_count).
        """
        count_result = await self.db.execute(
            select(func.count(Link.id)).where(Link.user_id == user_id)
        )
        total = count_result.scalar() or 0

        offset = (page - 1) * page_size
        result = await self.db.execute(
            select(Link)
            .where(Link.user_id == user_id)
            .order_by(Link.created_at.desc(), Link.id.desc())
            .offset(offset)
            .limit(page_size)
        )
        return builtins.list(result.scalars().all()), total

    async def change_code(self, link_id: int, user_id: int, code: str) -> Link:
        link = await self.get(link_id, user_id)
        link.code = code
        await self._flush(code)
        await self.db.refresh(link)
        return link

    async def toggle(self, link_id: int, user_id: int) -> Link:
        link = await self.get(link_id, user_id)
        link.active = not link.active
        await self.db.flush()
        await self.db.refresh(link)
        return link

    async def _flush(self, code: str) -> None:
        try:
            await self.db.flush()
        except IntegrityError as e:
            await self.db.rollback()
            raise DuplicateCodeError(f"Code {code!r} is already taken") from e
