"""Concrete SQLAlchemy repository implementations.

Exports the repository classes and the get_repositories() factory used by
SqlUnitOfWork to bind every repository to one AsyncSession.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.persistence.models import (
    Category,
    Ingredient,
    Instruction,
    Review,
    Tag,
    User,
)

from .base import SqlRepository, live
from .favorites import SqlFavoriteRepository
from .recipes import SqlRecipeRepository


@dataclass
class Repositories:
    """All repository instances bound to a single AsyncSession."""

    recipes: SqlRecipeRepository
    categories: SqlRepository[Category]
    tags: SqlRepository[Tag]
    users: SqlRepository[User]
    reviews: SqlRepository[Review]
    ingredients: SqlRepository[Ingredient]
    instructions: SqlRepository[Instruction]
    favorites: SqlFavoriteRepository


def get_repositories(session: AsyncSession) -> Repositories:
    """Construct all repositories bound to the given session.

        async with AsyncSessionLocal() as session:
            repos = get_repositories(session)
            recipe = await repos.recipes.get_by_slug("bolo-de-chocolate")
    """
    return Repositories(
        recipes=SqlRecipeRepository(session),
        categories=SqlRepository(session, Category),
        tags=SqlRepository(session, Tag),
        users=SqlRepository(session, User),
        reviews=SqlRepository(session, Review),
        ingredients=SqlRepository(session, Ingredient),
        instructions=SqlRepository(session, Instruction),
        favorites=SqlFavoriteRepository(session),
    )


__all__ = [
    "SqlRepository",
    "SqlRecipeRepository",
    "SqlFavoriteRepository",
    "Repositories",
    "get_repositories",
    "live",
]
