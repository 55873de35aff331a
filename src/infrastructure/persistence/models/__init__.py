"""ORM model registry — imports all layer modules so every mapper class is
registered with Base.metadata before Alembic or SQLAlchemy runs.

Import order follows the dependency graph (referenced tables first).
"""

from src.infrastructure.persistence.models.entity import LifecycleMixin
from src.infrastructure.persistence.models.users import Favorite, Review, User
from src.infrastructure.persistence.models.recipes import (
    Category,
    Ingredient,
    Instruction,
    Recipe,
    RecipeTag,
    Tag,
)

__all__ = [
    "LifecycleMixin",
    # Community
    "User",
    "Favorite",
    "Review",
    # Catalogue
    "Category",
    "Tag",
    "Recipe",
    "RecipeTag",
    "Ingredient",
    "Instruction",
]
