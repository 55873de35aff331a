"""SQLAlchemy implementation of RecipeRepository."""

from __future__ import annotations

from uuid import UUID

from src.domain.repositories.base import Includes
from src.domain.repositories.recipes import RecipeRepository
from src.infrastructure.persistence.models import Recipe

from .base import SqlRepository


class SqlRecipeRepository(SqlRepository[Recipe], RecipeRepository):
    """Recipe queries on top of the generic soft-delete-aware repository."""

    model = Recipe

    async def get_by_slug(self, slug: str, includes: Includes = ()) -> Recipe | None:
        return await self.first(Recipe.slug == slug, includes)

    async def slug_exists(self, slug: str, exclude_id: UUID | None = None) -> bool:
        predicate = Recipe.slug == slug
        if exclude_id is not None:
            predicate = predicate & (Recipe.id != exclude_id)
        return await self.exists(predicate)

    async def list_published(self) -> list[Recipe]:
        return await self.find(Recipe.is_published.is_(True))
