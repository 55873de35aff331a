"""Domain model package.

All domain objects are pure Python / Pydantic models with no ORM or
infrastructure dependencies.  Import from this package to avoid coupling
application code to individual module paths.
"""

from .enums import Difficulty, RecipeSortField, SortDirection, UserRole, UserSortField
from .filters import RecipeFilter, UserFilter
from .lifecycle import Lifecycle
from .pagination import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    PaginationRequest,
    PaginationResult,
    build_result,
    normalize,
)
from .recipes import IngredientDraft, InstructionDraft, RecipeDraft

__all__ = [
    # enums
    "Difficulty",
    "UserRole",
    "SortDirection",
    "RecipeSortField",
    "UserSortField",
    # lifecycle
    "Lifecycle",
    # pagination
    "MAX_PAGE_SIZE",
    "DEFAULT_PAGE_SIZE",
    "normalize",
    "build_result",
    "PaginationRequest",
    "PaginationResult",
    # filters
    "RecipeFilter",
    "UserFilter",
    # write models
    "IngredientDraft",
    "InstructionDraft",
    "RecipeDraft",
]
