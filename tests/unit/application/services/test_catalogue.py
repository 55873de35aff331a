"""Tests for CategoryService and TagService."""

from types import SimpleNamespace
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from src.application.services.catalogue import CategoryService, TagService
from src.infrastructure.persistence.models import Category, Tag


@pytest.fixture
def categories(uow):
    return CategoryService(uow)


@pytest.fixture
def tags(uow):
    return TagService(uow)


# --- CategoryService ---

async def test_add_category_persists(categories, session_factory):
    created = await categories.add("Massas", "Pratos com massa", "pasta")
    async with session_factory() as session:
        stored = await session.get(Category, created.id)
    assert stored.icon == "pasta"


async def test_get_paged_orders_by_name(categories):
    for name in ("Sopas", "Bolos", "Massas"):
        await categories.add(name)
    page = await categories.get_paged(1, 2)
    assert [c.name for c in page.items] == ["Bolos", "Massas"]
    assert page.total_items == 3


async def test_get_by_name_is_case_insensitive_substring(categories):
    await categories.add("Sobremesas")
    found = await categories.get_by_name("REMES")
    assert found.name == "Sobremesas"


async def test_get_by_name_missing_returns_none(categories):
    assert await categories.get_by_name("Massas") is None


async def test_update_category(categories):
    created = await categories.add("Masas")
    assert await categories.update(created.id, "Massas", icon="pasta") is True
    assert (await categories.get_by_id(created.id)).name == "Massas"


async def test_update_missing_category_returns_false(categories):
    assert await categories.update(uuid4(), "Massas") is False


async def test_delete_category_hides_it(categories):
    created = await categories.add("Massas")
    assert await categories.delete(created.id) is True
    assert await categories.get_by_id(created.id) is None
    assert await categories.list_all() == []
    assert await categories.count() == 0


async def test_delete_keeps_row(categories, session_factory):
    created = await categories.add("Massas")
    await categories.delete(created.id)
    async with session_factory() as session:
        stored = await session.get(Category, created.id)
    assert stored.is_deleted is True
    assert stored.deleted_at is not None


async def test_delete_missing_does_not_commit():
    repo = SimpleNamespace(soft_delete_by_id=AsyncMock(return_value=False))
    uow = SimpleNamespace(categories=repo, save_changes=AsyncMock())
    assert await CategoryService(uow).delete(uuid4()) is False
    uow.save_changes.assert_not_awaited()


# --- TagService ---

async def test_add_tag_strips_name(tags):
    tag = await tags.add("  Vegano ")
    assert tag.name == "Vegano"


async def test_update_tag(tags, session_factory):
    tag = await tags.add("Vegano")
    assert await tags.update(tag.id, "Vegetariano") is True
    async with session_factory() as session:
        stored = await session.get(Tag, tag.id)
    assert stored.name == "Vegetariano"
    assert stored.updated_at is not None


async def test_update_missing_tag_returns_false(tags):
    assert await tags.update(uuid4(), "Vegano") is False


async def test_tag_count_ignores_deleted(tags):
    keep = await tags.add("Vegano")
    gone = await tags.add("Festa")
    await tags.delete(gone.id)
    assert await tags.count() == 1
    assert [t.id for t in await tags.list_all()] == [keep.id]
