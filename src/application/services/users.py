"""User service: directory search and account records.

search_users() can order by the number of live recipes a user owns; that
count is a correlated subquery, so it never loads the recipes.
"""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import func, or_, select

from src.domain.exceptions import DuplicateEntityError
from src.domain.models.enums import SortDirection, UserRole, UserSortField
from src.domain.models.filters import UserFilter
from src.domain.models.pagination import PaginationRequest, PaginationResult
from src.domain.repositories.unit_of_work import UnitOfWork
from src.infrastructure.persistence.models import Recipe, User
from src.infrastructure.persistence.predicates import Predicate, PredicateBuilder
from src.infrastructure.persistence.repositories.base import live

logger = logging.getLogger(__name__)

LIST_INCLUDES = ("recipes",)
DETAIL_INCLUDES = ("recipes", "favorites", "reviews")


def live_recipe_count():
    return (
        select(func.count(Recipe.id))
        .where(Recipe.user_id == User.id, live(Recipe))
        .correlate(User)
        .scalar_subquery()
    )


def has_published_recipe() -> Predicate:
    return User.recipes.any(Recipe.is_published.is_(True) & live(Recipe))


def user_predicate(f: UserFilter) -> Predicate:
    builder = PredicateBuilder(User)
    if f.search:
        needle = f.search.strip().lower()
        builder.where(
            or_(
                func.lower(User.username).contains(needle, autoescape=True),
                func.lower(User.full_name).contains(needle, autoescape=True),
            )
        )
    builder.where_if(f.role, lambda: User.role == f.role.value)
    if f.has_published_recipes is not None:
        clause = has_published_recipe()
        builder.where(clause if f.has_published_recipes else ~clause)
    return builder.build()


def user_ordering(f: UserFilter) -> list:
    columns = {
        UserSortField.CREATED_AT: User.created_at,
        UserSortField.FULL_NAME: User.full_name,
        UserSortField.USERNAME: User.username,
        UserSortField.RECIPE_COUNT: live_recipe_count(),
    }
    column = columns[f.order_by]
    if f.order_direction is SortDirection.ASC:
        return [column.asc()]
    return [column.desc()]


class UserService:
    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    async def list_all(self) -> list[User]:
        return await self._uow.users.list_all(LIST_INCLUDES)

    async def get_paged(self, page_number: int, page_size: int) -> PaginationResult[User]:
        return await self._uow.users.page(
            PaginationRequest.of(page_number, page_size), None, LIST_INCLUDES
        )

    async def search_users(self, f: UserFilter) -> PaginationResult[User]:
        return await self._uow.users.page(
            f.pagination(), user_predicate(f), LIST_INCLUDES, user_ordering(f)
        )

    async def get_by_id(self, user_id: UUID) -> User | None:
        return await self._uow.users.get_by_id(user_id, DETAIL_INCLUDES)

    async def get_by_username(self, username: str) -> User | None:
        """First live user whose username contains ``username``, ignoring case."""
        needle = username.strip().lower()
        return await self._uow.users.first(
            func.lower(User.username).contains(needle, autoescape=True), DETAIL_INCLUDES
        )

    async def add_user(
        self, username: str, full_name: str, role: UserRole = UserRole.USER
    ) -> User:
        if await self._uow.users.exists(func.lower(User.username) == username.lower()):
            raise DuplicateEntityError("User", "username", username)
        user = await self._uow.users.add(
            User(username=username, full_name=full_name, role=role.value)
        )
        await self._uow.save_changes()
        logger.info("created user %s", user.id)
        return user

    async def update_user(self, user_id: UUID, username: str, full_name: str) -> bool:
        user = await self._uow.users.get_by_id(user_id)
        if user is None:
            return False
        if username.lower() != user.username.lower() and await self._uow.users.exists(
            func.lower(User.username) == username.lower()
        ):
            raise DuplicateEntityError("User", "username", username)
        user.username = username
        user.full_name = full_name
        await self._uow.users.update(user)
        await self._uow.save_changes()
        return True

    async def delete_user(self, user_id: UUID) -> bool:
        deleted = await self._uow.users.soft_delete_by_id(user_id)
        if deleted:
            await self._uow.save_changes()
            logger.info("deleted user %s", user_id)
        return deleted

    async def count_users(self) -> int:
        return await self._uow.users.count()
