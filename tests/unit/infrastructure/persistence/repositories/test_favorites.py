"""Tests for SqlFavoriteRepository."""

from datetime import datetime, timedelta, timezone

import pytest

from src.domain.models.pagination import PaginationRequest
from src.infrastructure.persistence.models import Favorite, User
from src.infrastructure.persistence.repositories import SqlFavoriteRepository
from tests.factories import make_recipe

T0 = datetime(2025, 8, 9, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def favorites(session):
    return SqlFavoriteRepository(session)


@pytest.fixture
async def fan(session):
    user = User(username="bruno", full_name="Bruno Lima")
    session.add(user)
    await session.commit()
    return user


@pytest.fixture
async def two_recipes(session, author, category):
    bolo = make_recipe(author.id, "Bolo", category_id=category.id)
    pudim = make_recipe(author.id, "Pudim")
    session.add_all([bolo, pudim])
    await session.commit()
    return bolo, pudim


async def _favorite(session, user, *recipes):
    for offset, recipe in enumerate(recipes):
        session.add(
            Favorite(user_id=user.id, recipe_id=recipe.id, created_at=T0 + timedelta(minutes=offset))
        )
    await session.commit()


async def test_exists(session, favorites, fan, two_recipes):
    bolo, pudim = two_recipes
    await _favorite(session, fan, bolo)
    assert await favorites.exists(fan.id, bolo.id) is True
    assert await favorites.exists(fan.id, pudim.id) is False


async def test_page_for_user_is_newest_first(session, favorites, fan, two_recipes):
    bolo, pudim = two_recipes
    await _favorite(session, fan, bolo, pudim)
    page = await favorites.page_for_user(fan.id, PaginationRequest.of(1, 10))
    assert [f.recipe.title for f in page.items] == ["Pudim", "Bolo"]
    assert page.total_items == 2


async def test_page_for_user_loads_owner_and_category(session, favorites, fan, two_recipes):
    bolo, _ = two_recipes
    await _favorite(session, fan, bolo)
    session.expunge_all()
    page = await favorites.page_for_user(fan.id, PaginationRequest.of(1, 10))
    recipe = page.items[0].recipe
    assert recipe.user.username == "ana"
    assert recipe.category.name == "Sobremesas"


async def test_favorites_of_deleted_recipes_are_hidden(session, favorites, fan, two_recipes):
    bolo, pudim = two_recipes
    await _favorite(session, fan, bolo, pudim)
    pudim.mark_deleted()
    await session.commit()

    page = await favorites.page_for_user(fan.id, PaginationRequest.of(1, 10))
    assert [f.recipe.title for f in page.items] == ["Bolo"]
    assert page.total_items == 1
    assert await favorites.exists(fan.id, pudim.id) is False
    assert await favorites.count_by_user(fan.id) == 1
    assert await favorites.count_by_recipe(pudim.id) == 0


async def test_count_by_recipe(session, favorites, fan, author, two_recipes):
    bolo, _ = two_recipes
    await _favorite(session, fan, bolo)
    await _favorite(session, author, bolo)
    assert await favorites.count_by_recipe(bolo.id) == 2


async def test_remove_deletes_the_row(session, favorites, fan, two_recipes):
    bolo, _ = two_recipes
    await _favorite(session, fan, bolo)
    favorite = await favorites.get(fan.id, bolo.id)
    await favorites.remove(favorite)
    await session.commit()
    assert await favorites.get(fan.id, bolo.id) is None


async def test_add(session, favorites, fan, two_recipes):
    bolo, _ = two_recipes
    await favorites.add(Favorite(user_id=fan.id, recipe_id=bolo.id))
    await session.commit()
    assert await favorites.count_by_user(fan.id) == 1
