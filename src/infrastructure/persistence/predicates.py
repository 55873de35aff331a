"""Predicate composition over mapped entities.

A predicate is a SQLAlchemy boolean clause (ColumnElement[bool]) built
against a mapped class, e.g. ``Recipe.servings >= 4``.  combine() folds two
of them with an explicit AND; PredicateBuilder folds any number, starting
from an always-true clause so that no active filter means no constraint.

All clauses combined into one predicate must be written against the same
mapped class (not an aliased() copy of it).  A clause against a different
alias is not an error at build time; it silently turns the query into a
cross join, so builders should only ever be fed columns of their own model.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any, Generic, TypeVar

from sqlalchemy import ColumnElement, and_, true

T = TypeVar("T")

Predicate = ColumnElement[bool]


def always_true() -> Predicate:
    return true()


def combine(base: Predicate, additional: Predicate) -> Predicate:
    """Return a predicate equivalent to ``base AND additional``."""
    return and_(base, additional)


def combine_all(predicates: Iterable[Predicate]) -> Predicate:
    """AND together every predicate; the empty set yields always-true."""
    result = always_true()
    for predicate in predicates:
        result = combine(result, predicate)
    return result


class PredicateBuilder(Generic[T]):
    """Accumulates optional filter clauses for one mapped class.

        builder = PredicateBuilder(Recipe)
        builder.where_if(f.category_id, lambda: Recipe.category_id == f.category_id)
        builder.where_if(f.max_prep_time, lambda: Recipe.prep_time <= f.max_prep_time)
        predicate = builder.build()

    where_if takes a factory so the clause is only built when the value is
    set (``None`` means "no constraint"; False and 0 are real constraints).
    """

    def __init__(self, model: type[T]) -> None:
        self.model = model
        self._clauses: list[Predicate] = []

    def where(self, clause: Predicate) -> PredicateBuilder[T]:
        self._clauses.append(clause)
        return self

    def where_if(self, value: Any, factory: Callable[[], Predicate]) -> PredicateBuilder[T]:
        if value is not None:
            self._clauses.append(factory())
        return self

    def __len__(self) -> int:
        return len(self._clauses)

    def build(self) -> Predicate:
        return combine_all(self._clauses)
