"""Favorite repository interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING
from uuid import UUID

from src.domain.models.pagination import PaginationRequest, PaginationResult

if TYPE_CHECKING:
    from src.infrastructure.persistence.models import Favorite


class FavoriteRepository(ABC):
    """Read/write interface for the user -> recipe favorites association.

    Favorites carry no lifecycle columns and are removed physically.  A
    favorite pointing at a soft-deleted recipe is treated as absent by every
    read.
    """

    @abstractmethod
    async def page_for_user(
        self, user_id: UUID, request: PaginationRequest
    ) -> PaginationResult[Favorite]:
        """Return the user's favorites, newest first, with recipe/owner/category loaded."""

    @abstractmethod
    async def exists(self, user_id: UUID, recipe_id: UUID) -> bool:
        """Return True if the user has favorited the (live) recipe."""

    @abstractmethod
    async def get(self, user_id: UUID, recipe_id: UUID) -> Favorite | None:
        """Return the favorite row, or None."""

    @abstractmethod
    async def add(self, favorite: Favorite) -> Favorite:
        """Stage a new favorite."""

    @abstractmethod
    async def remove(self, favorite: Favorite) -> None:
        """Stage the physical removal of a favorite."""

    @abstractmethod
    async def count_by_recipe(self, recipe_id: UUID) -> int:
        """Number of users who favorited the recipe."""

    @abstractmethod
    async def count_by_user(self, user_id: UUID) -> int:
        """Number of live recipes the user has favorited."""
