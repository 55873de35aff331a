"""Tests for SqlUnitOfWork and the lifecycle pass."""

import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from src.domain.exceptions import ConstraintViolationError, SlugConflictError
from src.infrastructure.persistence.models import Ingredient, Recipe, RecipeTag, Tag
from src.infrastructure.persistence.repositories import SqlRecipeRepository
from src.infrastructure.persistence.unit_of_work import (
    LifecycleReport,
    SqlUnitOfWork,
    enforce_lifecycle,
    translate_integrity_error,
)
from tests.factories import make_recipe

T0 = datetime(2025, 8, 9, 12, 0, tzinfo=timezone.utc)


def _clock(*times):
    it = iter(times)
    return lambda: next(it)


async def _seed_tags(session_factory, *names):
    async with session_factory() as session:
        rows = [Tag(name=name) for name in names]
        session.add_all(rows)
        await session.commit()
    return rows


async def _raw_tag(session_factory, tag_id):
    async with session_factory() as session:
        return await session.get(Tag, tag_id)


# --- enforce_lifecycle ---

async def test_pass_converts_delete_and_stamps_modification_together(session_factory):
    a, b = await _seed_tags(session_factory, "a", "b")
    async with session_factory() as session:
        a = await session.get(Tag, a.id)
        b = await session.get(Tag, b.id)
        await session.delete(a)
        b.name = "b2"

        report = enforce_lifecycle(session.sync_session, T0)

        assert report == LifecycleReport(converted=1, stamped=2)
        assert a.is_deleted is True
        assert a.deleted_at == T0
        assert a.updated_at == T0
        assert b.updated_at == T0
        assert b.is_deleted is False
        assert a not in session.deleted


async def test_pass_ignores_untouched_entities(session_factory):
    (a,) = await _seed_tags(session_factory, "a")
    async with session_factory() as session:
        loaded = await session.get(Tag, a.id)
        report = enforce_lifecycle(session.sync_session, T0)
        assert report == LifecycleReport(converted=0, stamped=0)
        assert loaded.updated_at is None


async def test_pass_does_not_stamp_new_entities(session_factory):
    async with session_factory() as session:
        tag = Tag(name="novo")
        session.add(tag)
        enforce_lifecycle(session.sync_session, T0)
        assert tag.updated_at is None


async def test_pass_leaves_association_rows_for_physical_delete(session_factory, author):
    (tag,) = await _seed_tags(session_factory, "doce")
    async with session_factory() as session:
        recipe = make_recipe(author.id, "Bolo")
        recipe.recipe_tags = [RecipeTag(tag_id=tag.id)]
        session.add(recipe)
        await session.commit()
        link = recipe.recipe_tags[0]
        await session.delete(link)
        enforce_lifecycle(session.sync_session, T0)
        assert link in session.deleted


# --- save_changes ---

async def test_delete_becomes_soft_delete_on_save(session_factory):
    (a,) = await _seed_tags(session_factory, "a")
    async with SqlUnitOfWork(session_factory, clock=lambda: T0) as uow:
        tag = await uow.tags.get_by_id(a.id)
        await uow.tags.delete(tag)
        await uow.save_changes()

    row = await _raw_tag(session_factory, a.id)
    assert row is not None
    assert row.is_deleted is True
    assert row.deleted_at is not None
    assert row.updated_at is not None


async def test_delete_range_soft_deletes_every_entity(session_factory):
    tags = await _seed_tags(session_factory, "a", "b", "c")
    async with SqlUnitOfWork(session_factory) as uow:
        loaded = await uow.tags.list_all()
        await uow.tags.delete_range(loaded)
        await uow.save_changes()
        assert await uow.tags.count() == 0
    for tag in tags:
        assert (await _raw_tag(session_factory, tag.id)).is_deleted


async def test_deleting_recipe_cascades_soft_delete_to_children(session_factory, author):
    async with SqlUnitOfWork(session_factory) as uow:
        recipe = make_recipe(author.id, "Bolo")
        recipe.ingredients = [Ingredient(name="farinha", unit="g", amount=300)]
        await uow.recipes.add(recipe)
        await uow.save_changes()

    async with SqlUnitOfWork(session_factory) as uow:
        recipe = await uow.recipes.get_by_id(recipe.id, ["ingredients"])
        await uow.recipes.delete(recipe)
        await uow.save_changes()
        assert await uow.ingredients.count() == 0

    async with session_factory() as session:
        ingredients = (await session.execute(select(Ingredient))).scalars().all()
    assert len(ingredients) == 1
    assert ingredients[0].is_deleted is True


async def test_deleting_recipe_removes_tag_links_physically(session_factory, author):
    (tag,) = await _seed_tags(session_factory, "doce")
    async with SqlUnitOfWork(session_factory) as uow:
        recipe = make_recipe(author.id, "Bolo")
        recipe.recipe_tags = [RecipeTag(tag_id=tag.id)]
        await uow.recipes.add(recipe)
        await uow.save_changes()

    async with SqlUnitOfWork(session_factory) as uow:
        recipe = await uow.recipes.get_by_id(recipe.id, ["recipe_tags"])
        await uow.recipes.delete(recipe)
        await uow.save_changes()

    async with session_factory() as session:
        links = (await session.execute(select(RecipeTag))).scalars().all()
        stored = await session.get(Recipe, recipe.id)
    assert links == []
    assert stored.is_deleted is True


async def test_updated_at_is_stamped_on_modification(session_factory):
    (a,) = await _seed_tags(session_factory, "a")
    async with SqlUnitOfWork(session_factory, clock=lambda: T0) as uow:
        tag = await uow.tags.get_by_id(a.id)
        tag.name = "a2"
        await uow.tags.update(tag)
        await uow.save_changes()
        assert tag.updated_at == T0


async def test_updated_at_only_increases(session_factory):
    (a,) = await _seed_tags(session_factory, "a")
    later, earlier = T0 + timedelta(hours=1), T0
    async with SqlUnitOfWork(session_factory, clock=_clock(later, earlier)) as uow:
        tag = await uow.tags.get_by_id(a.id)
        tag.name = "a2"
        await uow.save_changes()
        tag.name = "a3"
        await uow.save_changes()
        assert tag.updated_at == later


async def test_second_delete_keeps_first_deleted_at(session_factory):
    (a,) = await _seed_tags(session_factory, "a")
    async with SqlUnitOfWork(session_factory, clock=_clock(T0, T0 + timedelta(days=1))) as uow:
        tag = await uow.tags.get_by_id(a.id)
        await uow.tags.delete(tag)
        await uow.save_changes()
        await uow.tags.delete(tag)
        await uow.save_changes()
        assert tag.deleted_at == T0


# --- rollback ---

async def test_exception_in_block_rolls_back(session_factory):
    with pytest.raises(RuntimeError):
        async with SqlUnitOfWork(session_factory) as uow:
            await uow.tags.add(Tag(name="fantasma"))
            await uow.flush()
            raise RuntimeError("boom")

    async with SqlUnitOfWork(session_factory) as uow:
        assert await uow.tags.count() == 0


async def test_cancellation_leaves_no_partial_writes(session_factory):
    flushed = asyncio.Event()

    async def writer():
        async with SqlUnitOfWork(session_factory) as uow:
            await uow.tags.add(Tag(name="meio-caminho"))
            await uow.flush()
            flushed.set()
            await asyncio.sleep(3600)
            await uow.save_changes()

    task = asyncio.create_task(writer())
    await flushed.wait()
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    async with SqlUnitOfWork(session_factory) as uow:
        assert await uow.tags.count() == 0


async def test_uow_closes_owned_session(session_factory):
    uow = SqlUnitOfWork(session_factory)
    async with uow:
        pass
    with pytest.raises(RuntimeError):
        uow.session


async def test_uow_leaves_borrowed_session_open(session_factory):
    async with session_factory() as session:
        async with SqlUnitOfWork(session=session) as uow:
            assert uow.session is session
        assert uow.session is session


async def test_uow_binds_repositories(session_factory):
    async with SqlUnitOfWork(session_factory) as uow:
        assert isinstance(uow.recipes, SqlRecipeRepository)
        assert uow.tags.model is Tag


# --- savepoint and constraint translation ---

async def test_slug_index_violation_raises_slug_conflict(session_factory, author):
    async with SqlUnitOfWork(session_factory) as uow:
        await uow.recipes.add(make_recipe(author.id, "Bolo", slug="bolo"))
        await uow.save_changes()

    async with SqlUnitOfWork(session_factory) as uow:
        with pytest.raises(SlugConflictError):
            async with uow.savepoint():
                await uow.recipes.add(make_recipe(author.id, "Bolo", slug="bolo"))
        # the outer transaction survives the failed savepoint
        await uow.recipes.add(make_recipe(author.id, "Bolo", slug="bolo-2"))
        await uow.save_changes()
        assert await uow.recipes.count() == 2


async def test_savepoint_keeps_work_staged_before_it(session_factory, author):
    async with SqlUnitOfWork(session_factory) as uow:
        await uow.recipes.add(make_recipe(author.id, "Bolo", slug="bolo"))
        await uow.save_changes()

    async with SqlUnitOfWork(session_factory) as uow:
        await uow.tags.add(Tag(name="doce"))
        with pytest.raises(SlugConflictError):
            async with uow.savepoint():
                await uow.recipes.add(make_recipe(author.id, "Bolo", slug="bolo"))
        await uow.save_changes()
        assert await uow.tags.count() == 1


def test_translate_integrity_error_recognises_postgres_slug_index():
    orig = Exception('duplicate key value violates unique constraint "uq_recipes_slug_active"')
    err = translate_integrity_error(IntegrityError("INSERT", {}, orig), "flush")
    assert isinstance(err, SlugConflictError)


def test_translate_integrity_error_recognises_sqlite_slug_column():
    orig = Exception("UNIQUE constraint failed: recipes.slug")
    assert isinstance(translate_integrity_error(IntegrityError("INSERT", {}, orig), "flush"), SlugConflictError)


def test_translate_integrity_error_names_username_index():
    orig = Exception('duplicate key value violates unique constraint "uq_users_username_active"')
    err = translate_integrity_error(IntegrityError("INSERT", {}, orig), "save_changes")
    assert type(err) is ConstraintViolationError
    assert err.entity == "User"


def test_translate_integrity_error_other_constraint():
    orig = Exception('insert or update violates foreign key constraint "recipes_user_id_fkey"')
    err = translate_integrity_error(IntegrityError("INSERT", {}, orig), "save_changes")
    assert type(err) is ConstraintViolationError
    assert err.operation == "save_changes"


def test_enforce_lifecycle_on_empty_session():
    session = MagicMock(deleted=[], dirty=[])
    assert enforce_lifecycle(session, T0) == LifecycleReport(converted=0, stamped=0)
