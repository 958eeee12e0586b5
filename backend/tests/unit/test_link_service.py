"""Unit tests for LinkService business logic."""

import pytest

from urlmini.services.link import (
    CODE_LENGTH,
    DuplicateCodeError,
    LinkForbiddenError,
    LinkNotFoundError,
    LinkService,
    random_code,
)


class TestRandomCode:
    def test_length_and_alphabet(self):
        for _ in range(50):
            code = random_code()
            assert len(code) == CODE_LENGTH
            assert code.isascii() and code.isalpha()

    def test_custom_length(self):
        assert len(random_code(12)) == 12


@pytest.mark.asyncio
class TestLinkService:
    """Tests for LinkService against PostgreSQL."""

    async def test_create_with_random_code(self, db_session, db_user_factory):
        user = await db_user_factory()
        link = await LinkService(db_session).create(user.id, "https://example.com/a")

        assert len(link.code) == CODE_LENGTH
        assert link.active is True
        assert link.created_at is not None

    async def test_duplicate_code(self, db_session, db_user_factory):
        user = await db_user_factory()
        await LinkService(db_session).create(user.id, "https://example.com/a", "same")

        with pytest.raises(DuplicateCodeError):
            await LinkService(db_session).create(user.id, "https://example.com/b", "same")

    async def test_ownership_checks(self, db_session, db_user_factory):
        owner = await db_user_factory("owner")
        other = await db_user_factory("other")
        service = LinkService(db_session)
        link = await service.create(owner.id, "https://example.com/a")

        assert (await service.get(link.id, owner.id)).id == link.id
        with pytest.raises(LinkForbiddenError):
            await service.get(link.id, other.id)
        with pytest.raises(LinkNotFoundError):
            await service.get(link.id + 1000, owner.id)

    async def test_get_by_code_ignores_inactive(self, db_session, db_user_factory):
        user = await db_user_factory()
        service = LinkService(db_session)
        link = await service.create(user.id, "https://example.com/a", "hidden")

        assert (await service.get_by_code("hidden")).id == link.id
        await service.toggle(link.id, user.id)
        assert await service.get_by_code("hidden") is None

    async def test_list_newest_first(self, db_session, db_user_factory):
        user = await db_user_factory()
        service = LinkService(db_session)
        first = await service.create(user.id, "https://example.com/1", "first")
        second = await service.create(user.id, "https://example.com/2", "second")

        links, total = await service.list(user.id)

        assert total == 2
        assert [link.id for link in links] == [second.id, first.id]
