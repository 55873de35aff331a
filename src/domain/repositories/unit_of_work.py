"""Unit-of-work interface.

A unit of work owns one storage session for the duration of a request and
is the only place writes become durable.  Every save runs the lifecycle
pass first (staged removals become soft deletes, then every modified
entity gets its updated_at stamp), as one batch over the whole staged set.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.domain.repositories.base import Repository
    from src.domain.repositories.favorites import FavoriteRepository
    from src.domain.repositories.recipes import RecipeRepository


class UnitOfWork(ABC):
    """Transaction boundary plus the repositories bound to it."""

    recipes: RecipeRepository
    categories: Repository
    tags: Repository
    users: Repository
    reviews: Repository
    ingredients: Repository
    instructions: Repository
    favorites: FavoriteRepository

    @abstractmethod
    async def save_changes(self) -> None:
        """Run the lifecycle pass and commit."""

    @abstractmethod
    async def flush(self) -> None:
        """Run the lifecycle pass and flush without committing."""

    @abstractmethod
    def savepoint(self) -> AbstractAsyncContextManager[None]:
        """Nested transaction; rolled back alone if its block raises."""

    @abstractmethod
    async def rollback(self) -> None:
        """Discard everything staged since the last commit."""
