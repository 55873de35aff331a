"""Filter specifications handed down from the request layer.

Every field is optional; an unset field imposes no constraint.  The
owning service turns a filter into a single predicate, so nothing here
knows about the storage layer.  Filters are built per request and never
persisted.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .enums import RecipeSortField, SortDirection, UserRole, UserSortField
from .pagination import PaginationRequest


def _split_csv(value: Any) -> Any:
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return value


class RecipeFilter(BaseModel):
    """Multi-criteria recipe search.

    search       — case-insensitive substring of title or description
    tags         — recipe must carry at least one of these tag names;
                   accepts a comma-separated string
    max_prep_time, min_servings, max_servings — inclusive bounds
    """

    model_config = ConfigDict(frozen=True)

    page_number: int = 1
    page_size: int = 12
    search: str | None = None
    category_id: UUID | None = None
    user_id: UUID | None = None
    is_published: bool | None = None
    difficulty: str | None = None
    max_prep_time: int | None = Field(default=None, ge=0)
    min_servings: int | None = Field(default=None, ge=0)
    max_servings: int | None = Field(default=None, ge=0)
    tags: list[str] | None = None
    sort_by: RecipeSortField = RecipeSortField.CREATED_AT
    sort_direction: SortDirection = SortDirection.DESC

    @field_validator("tags", mode="before")
    @classmethod
    def _split_tags(cls, value: Any) -> Any:
        return _split_csv(value)

    @field_validator("search", "difficulty", mode="before")
    @classmethod
    def _blank_is_unset(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def _servings_range(self) -> RecipeFilter:
        if (
            self.min_servings is not None
            and self.max_servings is not None
            and self.min_servings > self.max_servings
        ):
            raise ValueError(
                f"min_servings ({self.min_servings}) must not exceed max_servings ({self.max_servings})"
            )
        return self

    def pagination(self) -> PaginationRequest:
        return PaginationRequest.of(self.page_number, self.page_size)


class UserFilter(BaseModel):
    """User directory search.

    search                — case-insensitive substring of username or full name
    has_published_recipes — True: only authors with at least one live
                            published recipe; False: only users without one
    """

    model_config = ConfigDict(frozen=True)

    page_number: int = 1
    page_size: int = 10
    search: str | None = None
    role: UserRole | None = None
    has_published_recipes: bool | None = None
    order_by: UserSortField = UserSortField.CREATED_AT
    order_direction: SortDirection = SortDirection.DESC

    @field_validator("search", mode="before")
    @classmethod
    def _blank_is_unset(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def pagination(self) -> PaginationRequest:
        return PaginationRequest.of(self.page_number, self.page_size)
