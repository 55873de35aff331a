"""Application services.

Each service wraps an entered UnitOfWork and returns ORM entities or
PaginationResult pages of them; mapping to response shapes belongs to the
caller.
"""

from .catalogue import CategoryService, NamedEntityService, TagService
from .favorites import FavoriteService
from .recipes import RecipeService
from .reviews import ReviewService
from .users import UserService

__all__ = [
    "NamedEntityService",
    "CategoryService",
    "TagService",
    "RecipeService",
    "UserService",
    "FavoriteService",
    "ReviewService",
]
