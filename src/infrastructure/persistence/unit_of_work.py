"""SQLAlchemy unit of work and the pre-commit lifecycle pass.

enforce_lifecycle() is called explicitly by SqlUnitOfWork before every
flush and commit; it is not registered as a session event.  It works on the
whole staged set in two phases:

    1. every LifecycleMixin entity in session.deleted is taken back out of
       the delete queue and flagged is_deleted / deleted_at
    2. every LifecycleMixin entity that is now modified (including the ones
       converted in phase 1) gets updated_at

Both phases use a single timestamp, so a converted delete ends up with
updated_at == deleted_at.  Rows without lifecycle columns (favorites,
recipe_tags) are left in the delete queue and removed physically.

Sessions must be created with autoflush=False; an autoflush would write
staged deletes before the pass sees them.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import Session

from src.domain.exceptions import ConstraintViolationError, SlugConflictError
from src.domain.repositories.unit_of_work import UnitOfWork
from src.infrastructure.database import AsyncSessionLocal
from src.infrastructure.persistence.models.entity import LifecycleMixin, utcnow
from src.infrastructure.persistence.repositories import get_repositories

logger = logging.getLogger(__name__)

# PostgreSQL reports the index name, SQLite the column (or the index name
# for an expression index).
_SLUG_CONSTRAINT_MARKERS = ("uq_recipes_slug_active", "recipes.slug")
_USERNAME_CONSTRAINT = "uq_users_username_active"


@dataclass(frozen=True)
class LifecycleReport:
    converted: int
    stamped: int


def enforce_lifecycle(session: Session, now: datetime) -> LifecycleReport:
    """Turn staged deletes into soft deletes, then stamp updated_at."""
    staged_removals = [obj for obj in session.deleted if isinstance(obj, LifecycleMixin)]
    for entity in staged_removals:
        # add() on an instance pending deletion takes it off the delete queue.
        # Relies on add()'s save-update cascade halting at instances the
        # session already holds: cascaded recipe_tags rows staged for
        # deletion stay in session.deleted and are removed physically.
        session.add(entity)
        entity.mark_deleted(now)

    modified = [
        obj
        for obj in session.dirty
        if isinstance(obj, LifecycleMixin) and session.is_modified(obj)
    ]
    for entity in modified:
        entity.touch(now)

    report = LifecycleReport(converted=len(staged_removals), stamped=len(modified))
    if report.converted or report.stamped:
        logger.debug(
            "lifecycle pass: %d delete(s) converted, %d entit(ies) stamped",
            report.converted,
            report.stamped,
        )
    return report


def translate_integrity_error(exc: IntegrityError, operation: str) -> ConstraintViolationError:
    detail = str(exc.orig) if exc.orig is not None else str(exc)
    if any(marker in detail for marker in _SLUG_CONSTRAINT_MARKERS):
        return SlugConflictError(operation, "Recipe", "uq_recipes_slug_active", detail)
    if _USERNAME_CONSTRAINT in detail:
        return ConstraintViolationError(operation, "User", _USERNAME_CONSTRAINT, detail)
    return ConstraintViolationError(operation, "unknown", None, detail)


class SqlUnitOfWork(UnitOfWork):
    """One AsyncSession per request, with the repositories bound to it.

        async with SqlUnitOfWork() as uow:
            recipe = await uow.recipes.get_by_id(recipe_id)
            await uow.recipes.delete(recipe)
            await uow.save_changes()

    Leaving the block with an exception (cancellation included) rolls the
    transaction back, so nothing staged in the block becomes visible.
    A session passed in explicitly is not closed on exit.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] = AsyncSessionLocal,
        session: AsyncSession | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._session_factory = session_factory
        self._session = session
        self._owns_session = session is None
        self._clock = clock

    @property
    def session(self) -> AsyncSession:
        if self._session is None:
            raise RuntimeError("SqlUnitOfWork used outside 'async with'")
        return self._session

    async def __aenter__(self) -> SqlUnitOfWork:
        if self._session is None:
            self._session = self._session_factory()
        repos = get_repositories(self._session)
        self.recipes = repos.recipes
        self.categories = repos.categories
        self.tags = repos.tags
        self.users = repos.users
        self.reviews = repos.reviews
        self.ingredients = repos.ingredients
        self.instructions = repos.instructions
        self.favorites = repos.favorites
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type is not None:
                await self.rollback()
        finally:
            if self._owns_session and self._session is not None:
                await self._session.close()
                self._session = None

    def _run_lifecycle(self) -> LifecycleReport:
        return enforce_lifecycle(self.session.sync_session, self._clock())

    async def flush(self) -> None:
        self._run_lifecycle()
        try:
            await self.session.flush()
        except IntegrityError as exc:
            raise translate_integrity_error(exc, "flush") from exc

    async def save_changes(self) -> None:
        self._run_lifecycle()
        try:
            await self.session.commit()
        except IntegrityError as exc:
            logger.warning("commit rejected by constraint: %s", exc.orig)
            raise translate_integrity_error(exc, "save_changes") from exc

    @asynccontextmanager
    async def savepoint(self) -> AsyncIterator[None]:
        # Flush outer staged work first so a savepoint rollback only
        # discards what the block itself staged.
        await self.flush()
        async with self.session.begin_nested():
            yield
            await self.flush()

    async def rollback(self) -> None:
        await self.session.rollback()
