"""Generic SQLAlchemy repository over LifecycleMixin entities.

Every statement built here starts from the live-row predicate
(``is_deleted = false``) and only then ANDs in the caller's predicate, so
soft-deleted rows cannot leak through any read path.  Related rows loaded
through ``includes`` are filtered the same way with a per-statement
with_loader_criteria option.

Writes only touch the session; the unit of work decides when they reach
the database and runs the lifecycle pass before it does.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import Select, false, func, inspect, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import RelationshipProperty, selectinload, with_loader_criteria

from src.domain.exceptions import RepositoryError
from src.domain.models.pagination import PaginationRequest, PaginationResult, build_result
from src.domain.repositories.base import Includes, Repository
from src.infrastructure.persistence.models.entity import LifecycleMixin
from src.infrastructure.persistence.predicates import Predicate, combine

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=LifecycleMixin)


def live(model: type[LifecycleMixin]) -> Predicate:
    """The always-on condition: row is not soft-deleted."""
    return model.is_deleted == false()


class SqlRepository(Repository[ModelT], Generic[ModelT]):
    """Repository[T] for any mapped class using LifecycleMixin."""

    model: type[ModelT]

    def __init__(self, session: AsyncSession, model: type[ModelT] | None = None) -> None:
        self._session = session
        if model is not None:
            self.model = model
        if getattr(self, "model", None) is None:
            raise TypeError(f"{type(self).__name__} needs a mapped model")

    # ------------------------------------------------------------------ #
    # Statement building                                                   #
    # ------------------------------------------------------------------ #

    @property
    def _entity_name(self) -> str:
        return self.model.__name__

    def _where(self, predicate: Predicate | None) -> Predicate:
        if predicate is None:
            return live(self.model)
        return combine(live(self.model), predicate)

    def _default_order(self) -> list[Any]:
        return [self.model.created_at.desc(), self.model.id]

    def _relationship_chain(self, path: str) -> list[Any]:
        """The relationship attributes along one dotted include path."""
        chain: list[Any] = []
        current: Any = self.model
        for part in path.split("."):
            attr = getattr(current, part, None)
            prop = getattr(attr, "property", None)
            if not isinstance(prop, RelationshipProperty):
                raise ValueError(
                    f"{self._entity_name}: '{path}' is not a relationship path "
                    f"('{part}' is not a relationship of {current.__name__})"
                )
            chain.append(attr)
            current = prop.mapper.class_
        return chain

    def _load_options(self, chains: list[list[Any]]) -> list[Any]:
        """Chained selectinload options, one per include path."""
        options: list[Any] = []
        for chain in chains:
            loader = selectinload(chain[0])
            for attr in chain[1:]:
                loader = loader.selectinload(attr)
            options.append(loader)
        return options

    def _expire_included(self, chains: list[list[Any]]) -> None:
        """Expire already-loaded relationships that the includes will load.

        selectinload skips attributes an identity-map instance already
        holds, so without this a collection loaded earlier in the session
        would keep soft-deleted or replaced rows.  Only the included
        attributes are expired, which keeps a path that leads back to the
        root (``"user.recipes"``) from resetting the hops before it.
        Attributes with unflushed changes and instances that are pending or
        staged for deletion are left alone.
        """
        attrs = {attr for chain in chains for attr in chain}
        session = self._session.sync_session
        staged_deletes = set(session.deleted)
        for obj in list(session.identity_map.values()):
            if obj in staged_deletes:
                continue
            state = inspect(obj)
            stale = [
                attr.key
                for attr in attrs
                if isinstance(obj, attr.class_)
                and attr.key in state.dict
                and not state.attrs[attr.key].history.has_changes()
            ]
            if stale:
                session.expire(obj, stale)

    def _select(self, predicate: Predicate | None = None, includes: Includes = ()) -> Select:
        stmt = select(self.model).where(self._where(predicate))
        if includes:
            chains = [self._relationship_chain(path) for path in includes]
            self._expire_included(chains)
            stmt = stmt.options(
                *self._load_options(chains),
                with_loader_criteria(
                    LifecycleMixin,
                    lambda cls: cls.is_deleted == False,  # noqa: E712
                    include_aliases=True,
                ),
            )
        return stmt

    async def _execute(self, stmt: Any, operation: str):
        try:
            return await self._session.execute(stmt)
        except SQLAlchemyError as exc:
            logger.warning("%s on %s failed: %s", operation, self._entity_name, exc)
            raise RepositoryError(operation, self._entity_name, str(exc)) from exc

    # ------------------------------------------------------------------ #
    # Reads                                                                #
    # ------------------------------------------------------------------ #

    async def get_by_id(self, id: UUID, includes: Includes = ()) -> ModelT | None:
        stmt = self._select(self.model.id == id, includes)
        result = await self._execute(stmt, "get_by_id")
        return result.scalars().first()

    async def list_all(self, includes: Includes = ()) -> list[ModelT]:
        stmt = self._select(None, includes).order_by(*self._default_order())
        result = await self._execute(stmt, "list_all")
        return list(result.scalars().all())

    async def find(self, predicate: Predicate, includes: Includes = ()) -> list[ModelT]:
        stmt = self._select(predicate, includes).order_by(*self._default_order())
        result = await self._execute(stmt, "find")
        return list(result.scalars().all())

    async def first(self, predicate: Predicate, includes: Includes = ()) -> ModelT | None:
        stmt = self._select(predicate, includes).order_by(*self._default_order()).limit(1)
        result = await self._execute(stmt, "first")
        return result.scalars().first()

    async def exists(self, predicate: Predicate | None = None) -> bool:
        stmt = select(self.model.id).where(self._where(predicate)).limit(1)
        result = await self._execute(stmt, "exists")
        return result.first() is not None

    async def exists_id(self, id: UUID) -> bool:
        return await self.exists(self.model.id == id)

    async def count(self, predicate: Predicate | None = None) -> int:
        stmt = select(func.count()).select_from(self.model).where(self._where(predicate))
        result = await self._execute(stmt, "count")
        return int(result.scalar_one())

    async def page(
        self,
        request: PaginationRequest,
        predicate: Predicate | None = None,
        includes: Includes = (),
        order_by: Sequence[Any] | None = None,
    ) -> PaginationResult[ModelT]:
        # count and slice share one filter expression; they are not required
        # to run in the same snapshot.
        total = await self.count(predicate)
        items: list[ModelT] = []
        if request.skip < total:
            ordering = list(order_by) if order_by else self._default_order()
            if order_by:
                ordering.append(self.model.id)  # stable tie-break across pages
            stmt = (
                self._select(predicate, includes)
                .order_by(*ordering)
                .offset(request.skip)
                .limit(request.take)
            )
            result = await self._execute(stmt, "page")
            items = list(result.scalars().all())
        return build_result(items, total, request.page_number, request.page_size)

    # ------------------------------------------------------------------ #
    # Writes (staged on the session)                                       #
    # ------------------------------------------------------------------ #

    async def add(self, entity: ModelT) -> ModelT:
        self._session.add(entity)
        return entity

    async def add_range(self, entities: Iterable[ModelT]) -> None:
        self._session.add_all(list(entities))

    async def update(self, entity: ModelT) -> ModelT:
        if inspect(entity).transient:
            raise ValueError(f"{self._entity_name} {entity.id} has never been saved; use add()")
        self._session.add(entity)
        return entity

    async def update_range(self, entities: Iterable[ModelT]) -> None:
        for entity in entities:
            await self.update(entity)

    async def delete(self, entity: ModelT) -> None:
        await self._session.delete(entity)

    async def delete_range(self, entities: Iterable[ModelT]) -> None:
        for entity in entities:
            await self._session.delete(entity)

    async def soft_delete(self, entity: ModelT) -> None:
        if entity.mark_deleted():
            logger.debug("soft-deleted %s %s", self._entity_name, entity.id)
        self._session.add(entity)

    async def soft_delete_by_id(self, id: UUID) -> bool:
        entity = await self.get_by_id(id)
        if entity is None:
            return False
        await self.soft_delete(entity)
        return True
