"""Category and tag services.

Both are small named lookup tables with the same query surface, so they
share NamedEntityService and only differ in the fields they write.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Generic, TypeVar
from uuid import UUID

from sqlalchemy import func

from src.domain.models.pagination import PaginationRequest, PaginationResult
from src.domain.repositories.base import Repository
from src.domain.repositories.unit_of_work import UnitOfWork
from src.infrastructure.persistence.models import Category, Tag

logger = logging.getLogger(__name__)

T = TypeVar("T", Category, Tag)


class NamedEntityService(ABC, Generic[T]):
    """List / page / lookup / soft-delete for an entity with a ``name`` column."""

    model: type[T]

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    @property
    @abstractmethod
    def _repo(self) -> Repository:
        """The repository for model, bound to the unit of work."""

    async def list_all(self) -> list[T]:
        return await self._repo.list_all()

    async def get_paged(self, page_number: int, page_size: int) -> PaginationResult[T]:
        return await self._repo.page(
            PaginationRequest.of(page_number, page_size),
            order_by=[self.model.name.asc()],
        )

    async def get_by_id(self, entity_id: UUID) -> T | None:
        return await self._repo.get_by_id(entity_id)

    async def get_by_name(self, name: str) -> T | None:
        """First live entity whose name contains ``name``, ignoring case."""
        return await self._repo.first(
            func.lower(self.model.name).contains(name.strip().lower(), autoescape=True)
        )

    async def delete(self, entity_id: UUID) -> bool:
        deleted = await self._repo.soft_delete_by_id(entity_id)
        if deleted:
            await self._uow.save_changes()
            logger.info("deleted %s %s", self.model.__name__, entity_id)
        return deleted

    async def count(self) -> int:
        return await self._repo.count()


class CategoryService(NamedEntityService[Category]):
    model = Category

    @property
    def _repo(self) -> Repository:
        return self._uow.categories

    async def add(
        self, name: str, description: str | None = None, icon: str | None = None
    ) -> Category:
        category = await self._repo.add(Category(name=name, description=description, icon=icon))
        await self._uow.save_changes()
        return category

    async def update(
        self,
        category_id: UUID,
        name: str,
        description: str | None = None,
        icon: str | None = None,
    ) -> bool:
        category = await self._repo.get_by_id(category_id)
        if category is None:
            return False
        category.name = name
        category.description = description
        category.icon = icon
        await self._repo.update(category)
        await self._uow.save_changes()
        return True


class TagService(NamedEntityService[Tag]):
    model = Tag

    @property
    def _repo(self) -> Repository:
        return self._uow.tags

    async def add(self, name: str) -> Tag:
        tag = await self._repo.add(Tag(name=name.strip()))
        await self._uow.save_changes()
        return tag

    async def update(self, tag_id: UUID, name: str) -> bool:
        tag = await self._repo.get_by_id(tag_id)
        if tag is None:
            return False
        tag.name = name.strip()
        await self._repo.update(tag)
        await self._uow.save_changes()
        return True
