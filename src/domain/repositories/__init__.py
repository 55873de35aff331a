"""Domain repository interfaces.

All abstractions are defined here with abc.ABC and @abstractmethod.
Concrete implementations live in src/infrastructure/persistence/ and are
bound to a session by the unit of work.

Import from this package rather than individual modules to avoid coupling
services to specific repository module paths.
"""

from .base import Includes, Predicate, Repository
from .favorites import FavoriteRepository
from .recipes import RecipeRepository
from .unit_of_work import UnitOfWork

__all__ = [
    "Includes",
    "Predicate",
    "Repository",
    "RecipeRepository",
    "FavoriteRepository",
    "UnitOfWork",
]
