"""Tests for src/infrastructure/persistence/predicates.py.

Predicates are checked by evaluating them against a small fixed recipe
dataset in SQLite, so associativity is verified on selected rows rather
than on SQL text.
"""

import pytest
from sqlalchemy import select

from src.infrastructure.persistence.models import Recipe
from src.infrastructure.persistence.predicates import (
    PredicateBuilder,
    always_true,
    combine,
    combine_all,
)
from tests.factories import make_recipe


@pytest.fixture
async def dataset(session, author):
    rows = [
        make_recipe(author.id, "Bolo", prep_time=40, servings=8, is_published=True),
        make_recipe(author.id, "Pudim", prep_time=90, servings=6, is_published=True),
        make_recipe(author.id, "Salada", prep_time=10, servings=2, is_published=False),
        make_recipe(author.id, "Lasanha", prep_time=60, servings=10, is_published=False),
        make_recipe(author.id, "Sopa", prep_time=30, servings=4, is_published=True),
    ]
    session.add_all(rows)
    await session.commit()
    return rows


async def _titles(session, predicate):
    result = await session.execute(select(Recipe.title).where(predicate))
    return set(result.scalars().all())


async def test_always_true_selects_everything(session, dataset):
    assert len(await _titles(session, always_true())) == len(dataset)


async def test_combine_is_conjunction(session, dataset):
    predicate = combine(Recipe.is_published.is_(True), Recipe.prep_time <= 45)
    assert await _titles(session, predicate) == {"Bolo", "Sopa"}


async def test_combine_is_associative(session, dataset):
    p1 = Recipe.servings >= 4
    p2 = Recipe.prep_time <= 60
    p3 = Recipe.is_published.is_(True)
    left = await _titles(session, combine(combine(p1, p2), p3))
    right = await _titles(session, combine(p1, combine(p2, p3)))
    assert left == right == {"Bolo", "Sopa"}


async def test_combine_with_always_true_is_identity(session, dataset):
    p = Recipe.servings > 5
    assert await _titles(session, combine(always_true(), p)) == await _titles(session, p)


async def test_combine_all_of_nothing_is_unconstrained(session, dataset):
    assert len(await _titles(session, combine_all([]))) == len(dataset)


async def test_builder_without_clauses_is_unconstrained(session, dataset):
    builder = PredicateBuilder(Recipe)
    assert len(builder) == 0
    assert len(await _titles(session, builder.build())) == len(dataset)


async def test_builder_where_if_skips_none(session, dataset):
    builder = PredicateBuilder(Recipe)
    builder.where_if(None, lambda: Recipe.servings >= 100)
    assert len(builder) == 0


async def test_builder_where_if_keeps_falsy_values(session, dataset):
    builder = PredicateBuilder(Recipe)
    builder.where_if(False, lambda: Recipe.is_published.is_(False))
    assert await _titles(session, builder.build()) == {"Salada", "Lasanha"}


async def test_builder_where_if_does_not_build_skipped_clause():
    def explode():
        raise AssertionError("factory called for unset value")

    PredicateBuilder(Recipe).where_if(None, explode)


async def test_builder_folds_clauses_with_and(session, dataset):
    predicate = (
        PredicateBuilder(Recipe)
        .where(Recipe.servings >= 4)
        .where_if(60, lambda: Recipe.prep_time <= 60)
        .where_if(None, lambda: Recipe.title == "nothing")
        .build()
    )
    assert await _titles(session, predicate) == {"Bolo", "Lasanha", "Sopa"}
