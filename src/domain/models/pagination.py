"""Pagination request / result value objects.

PaginationRequest  — page number + size, coerced into bounds on construction
PaginationResult   — one materialized page plus whole-set metadata

normalize() and build_result() are the functional core; the models wrap
them so the request layer can hand over raw query parameters.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

T = TypeVar("T")
U = TypeVar("U")

MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 10


def normalize(
    page_number: int | None,
    page_size: int | None,
    *,
    max_page_size: int = MAX_PAGE_SIZE,
    default_page_size: int = DEFAULT_PAGE_SIZE,
) -> tuple[int, int]:
    """Return (skip, take) for the requested page.

    page_number < 1 (or None) is coerced to 1.  page_size above the maximum
    is capped; page_size < 1 (or None) falls back to the default.  Never
    raises; both results are always >= 0 and take <= max_page_size.
    """
    number = _clamp_page_number(page_number)
    size = _clamp_page_size(page_size, max_page_size, default_page_size)
    return (number - 1) * size, size


def _clamp_page_number(page_number: int | None) -> int:
    if page_number is None or page_number < 1:
        return 1
    return page_number


def _clamp_page_size(page_size: int | None, max_page_size: int, default_page_size: int) -> int:
    if page_size is None or page_size < 1:
        return min(default_page_size, max_page_size)
    return min(page_size, max_page_size)


class PaginationRequest(BaseModel):
    """Requested page.  Out-of-range input is coerced, never rejected."""

    model_config = ConfigDict(frozen=True)

    page_number: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    @model_validator(mode="before")
    @classmethod
    def _coerce_bounds(cls, data: Any) -> Any:
        if isinstance(data, dict):
            data = dict(data)
            data["page_number"] = _clamp_page_number(data.get("page_number"))
            data["page_size"] = _clamp_page_size(
                data.get("page_size"), MAX_PAGE_SIZE, DEFAULT_PAGE_SIZE
            )
        return data

    @classmethod
    def of(cls, page_number: int | None = None, page_size: int | None = None) -> PaginationRequest:
        return cls(page_number=page_number, page_size=page_size)

    @property
    def skip(self) -> int:
        return (self.page_number - 1) * self.page_size

    @property
    def take(self) -> int:
        return self.page_size


class PaginationResult(BaseModel, Generic[T]):
    """One page of items plus metadata about the whole filtered set.

    total_items ignores pagination but honours the filter and the
    soft-delete condition.  A page past the end is valid and simply empty.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    items: list[T] = Field(default_factory=list)
    total_items: int = Field(ge=0)
    page_number: int = Field(ge=1)
    page_size: int = Field(ge=1)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_items / self.page_size)

    @property
    def has_previous(self) -> bool:
        return self.page_number > 1

    @property
    def has_next(self) -> bool:
        return self.page_number < self.total_pages

    @model_validator(mode="after")
    def _page_not_overfull(self) -> PaginationResult[T]:
        if len(self.items) > self.page_size:
            raise ValueError(
                f"page holds {len(self.items)} items but page_size is {self.page_size}"
            )
        return self

    def map(self, fn: Callable[[T], U]) -> PaginationResult[U]:
        """Project the items, keeping the page metadata."""
        return PaginationResult(
            items=[fn(item) for item in self.items],
            total_items=self.total_items,
            page_number=self.page_number,
            page_size=self.page_size,
        )


def build_result(
    items: Sequence[T],
    total_count: int,
    page_number: int,
    page_size: int,
) -> PaginationResult[T]:
    """Package already-fetched items with their count metadata."""
    return PaginationResult(
        items=list(items),
        total_items=total_count,
        page_number=page_number,
        page_size=page_size,
    )
