"""Domain enumerations for the recipe backend.

All string-valued enums use str mixin so they serialize cleanly to JSON
and remain comparable to plain strings (FastAPI / Pydantic default behaviour).
"""

from enum import Enum


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class RecipeSortField(str, Enum):
    """Whitelisted recipe listing orders."""

    CREATED_AT = "created_at"
    TITLE = "title"
    PREP_TIME = "prep_time"
    SERVINGS = "servings"


class UserSortField(str, Enum):
    """Whitelisted user listing orders."""

    CREATED_AT = "created_at"
    FULL_NAME = "full_name"
    USERNAME = "username"
    RECIPE_COUNT = "recipe_count"
