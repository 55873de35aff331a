"""Recipe repository interface."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING
from uuid import UUID

from .base import Includes, Repository

if TYPE_CHECKING:
    from src.infrastructure.persistence.models import Recipe


class RecipeRepository(Repository["Recipe"]):
    """Read/write interface for Recipe entities.

    slug_exists is the uniqueness probe used by slug resolution; it only
    sees live recipes, so a soft-deleted recipe's slug counts as free.
    """

    @abstractmethod
    async def get_by_slug(self, slug: str, includes: Includes = ()) -> Recipe | None:
        """Return the live recipe with exactly this slug, or None."""

    @abstractmethod
    async def slug_exists(self, slug: str, exclude_id: UUID | None = None) -> bool:
        """Return True if a live recipe other than exclude_id already uses slug."""

    @abstractmethod
    async def list_published(self) -> list[Recipe]:
        """Return every live, published recipe, newest first."""
