"""Favorite service."""

from __future__ import annotations

import logging
from uuid import UUID

from src.domain.models.pagination import PaginationRequest, PaginationResult
from src.domain.repositories.unit_of_work import UnitOfWork
from src.infrastructure.persistence.models import Favorite

logger = logging.getLogger(__name__)


class FavoriteService:
    """Bookmarks of recipes by users.

    Favorites are plain association rows: removing one deletes it.  Reads
    hide favorites whose recipe has been soft-deleted.
    """

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    async def get_user_favorites(
        self, user_id: UUID, page_number: int = 1, page_size: int = 10
    ) -> PaginationResult[Favorite]:
        return await self._uow.favorites.page_for_user(
            user_id, PaginationRequest.of(page_number, page_size)
        )

    async def is_favorite(self, user_id: UUID, recipe_id: UUID) -> bool:
        return await self._uow.favorites.exists(user_id, recipe_id)

    async def add_favorite(self, user_id: UUID, recipe_id: UUID) -> bool:
        """False when the recipe does not exist or is already a favorite."""
        if not await self._uow.recipes.exists_id(recipe_id):
            return False
        if await self._uow.favorites.get(user_id, recipe_id) is not None:
            return False
        await self._uow.favorites.add(Favorite(user_id=user_id, recipe_id=recipe_id))
        await self._uow.save_changes()
        return True

    async def remove_favorite(self, user_id: UUID, recipe_id: UUID) -> bool:
        favorite = await self._uow.favorites.get(user_id, recipe_id)
        if favorite is None:
            return False
        await self._uow.favorites.remove(favorite)
        await self._uow.save_changes()
        return True

    async def count_by_recipe(self, recipe_id: UUID) -> int:
        return await self._uow.favorites.count_by_recipe(recipe_id)

    async def count_by_user(self, user_id: UUID) -> int:
        return await self._uow.favorites.count_by_user(user_id)
