"""Generic repository base interface.

Repository[T] is the root abstraction for all data-access interfaces in this
domain layer.  Concrete implementations live in src/infrastructure/persistence/
and are wired at the application boundary via dependency injection.

Design notes:
  - All methods are async to accommodate async database drivers (asyncpg / SQLAlchemy async).
  - T is an entity type exposing the lifecycle fields (see models.lifecycle).
  - Every read path excludes logically deleted entities before any caller
    predicate is applied; there is no way to read a deleted row through
    this interface.
  - Writes are only staged.  Timestamps are stamped and deletes are turned
    into soft deletes by the unit of work when it saves.
  - Absence is a value (None / False / empty), never an exception.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from typing import Any, Generic, TypeVar
from uuid import UUID

from src.domain.models.pagination import PaginationRequest, PaginationResult

T = TypeVar("T")

# A boolean condition over T in the backing store's expression language
# (SQLAlchemy ColumnElement[bool] for the SQL implementation).
Predicate = Any

# Relationship paths to load alongside the entity, e.g. "recipe_tags.tag".
Includes = Sequence[str]


class Repository(ABC, Generic[T]):
    """Abstract CRUD interface for a soft-deletable entity."""

    # --- reads --------------------------------------------------------------

    @abstractmethod
    async def get_by_id(self, id: UUID, includes: Includes = ()) -> T | None:
        """Return the live entity with the given id, or None."""

    @abstractmethod
    async def list_all(self, includes: Includes = ()) -> list[T]:
        """Return every live entity."""

    @abstractmethod
    async def find(self, predicate: Predicate, includes: Includes = ()) -> list[T]:
        """Return every live entity matching predicate (unbounded)."""

    @abstractmethod
    async def first(self, predicate: Predicate, includes: Includes = ()) -> T | None:
        """Return the first live entity matching predicate, or None."""

    @abstractmethod
    async def exists(self, predicate: Predicate | None = None) -> bool:
        """Return True if at least one live entity matches predicate."""

    @abstractmethod
    async def exists_id(self, id: UUID) -> bool:
        """Return True if a live entity with the given id exists."""

    @abstractmethod
    async def count(self, predicate: Predicate | None = None) -> int:
        """Count live entities matching predicate without loading them."""

    @abstractmethod
    async def page(
        self,
        request: PaginationRequest,
        predicate: Predicate | None = None,
        includes: Includes = (),
        order_by: Sequence[Any] | None = None,
    ) -> PaginationResult[T]:
        """Return one page of live entities plus the total under the same filter."""

    # --- writes -------------------------------------------------------------

    @abstractmethod
    async def add(self, entity: T) -> T:
        """Stage a new entity for insertion."""

    @abstractmethod
    async def add_range(self, entities: Iterable[T]) -> None:
        """Stage several new entities for insertion."""

    @abstractmethod
    async def update(self, entity: T) -> T:
        """Stage an already-mutated entity for update."""

    @abstractmethod
    async def update_range(self, entities: Iterable[T]) -> None:
        """Stage several already-mutated entities for update."""

    @abstractmethod
    async def delete(self, entity: T) -> None:
        """Stage a removal.  Becomes a soft delete when the unit of work saves."""

    @abstractmethod
    async def delete_range(self, entities: Iterable[T]) -> None:
        """Stage several removals (soft deletes at save time)."""

    @abstractmethod
    async def soft_delete(self, entity: T) -> None:
        """Flag the entity deleted now.  A second call leaves deleted_at untouched."""

    @abstractmethod
    async def soft_delete_by_id(self, id: UUID) -> bool:
        """Soft-delete the live entity with the given id.  False if none."""
