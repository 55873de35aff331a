"""SQLAlchemy implementation of FavoriteRepository.

Favorite rows have no lifecycle columns, so SqlRepository does not apply.
Every read joins the favorited recipe and keeps only live ones; a favorite
of a soft-deleted recipe stays in the table but is invisible.
"""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload, with_loader_criteria

from src.domain.exceptions import RepositoryError
from src.domain.models.pagination import PaginationRequest, PaginationResult, build_result
from src.domain.repositories.favorites import FavoriteRepository
from src.infrastructure.persistence.models import Favorite, LifecycleMixin, Recipe

from .base import live

logger = logging.getLogger(__name__)


class SqlFavoriteRepository(FavoriteRepository):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _execute(self, stmt, operation: str):
        try:
            return await self._session.execute(stmt)
        except SQLAlchemyError as exc:
            logger.warning("%s on Favorite failed: %s", operation, exc)
            raise RepositoryError(operation, "Favorite", str(exc)) from exc

    @staticmethod
    def _live_favorites(stmt: Select) -> Select:
        return stmt.join(Recipe, Favorite.recipe_id == Recipe.id).where(live(Recipe))

    async def page_for_user(
        self, user_id: UUID, request: PaginationRequest
    ) -> PaginationResult[Favorite]:
        total = await self.count_by_user(user_id)
        items: list[Favorite] = []
        if request.skip < total:
            stmt = (
                self._live_favorites(select(Favorite))
                .where(Favorite.user_id == user_id)
                .options(
                    selectinload(Favorite.recipe).selectinload(Recipe.user),
                    selectinload(Favorite.recipe).selectinload(Recipe.category),
                    with_loader_criteria(
                        LifecycleMixin,
                        lambda cls: cls.is_deleted == False,  # noqa: E712
                        include_aliases=True,
                    ),
                )
                .order_by(Favorite.created_at.desc(), Favorite.recipe_id)
                .offset(request.skip)
                .limit(request.take)
            )
            result = await self._execute(stmt, "page_for_user")
            items = list(result.scalars().all())
        return build_result(items, total, request.page_number, request.page_size)

    async def exists(self, user_id: UUID, recipe_id: UUID) -> bool:
        stmt = (
            self._live_favorites(select(Favorite.user_id))
            .where(Favorite.user_id == user_id, Favorite.recipe_id == recipe_id)
            .limit(1)
        )
        result = await self._execute(stmt, "exists")
        return result.first() is not None

    async def get(self, user_id: UUID, recipe_id: UUID) -> Favorite | None:
        stmt = select(Favorite).where(
            Favorite.user_id == user_id, Favorite.recipe_id == recipe_id
        )
        result = await self._execute(stmt, "get")
        return result.scalars().first()

    async def add(self, favorite: Favorite) -> Favorite:
        self._session.add(favorite)
        return favorite

    async def remove(self, favorite: Favorite) -> None:
        await self._session.delete(favorite)

    async def count_by_recipe(self, recipe_id: UUID) -> int:
        stmt = self._live_favorites(select(func.count()).select_from(Favorite)).where(
            Favorite.recipe_id == recipe_id
        )
        result = await self._execute(stmt, "count_by_recipe")
        return int(result.scalar_one())

    async def count_by_user(self, user_id: UUID) -> int:
        stmt = self._live_favorites(select(func.count()).select_from(Favorite)).where(
            Favorite.user_id == user_id
        )
        result = await self._execute(stmt, "count_by_user")
        return int(result.scalar_one())
