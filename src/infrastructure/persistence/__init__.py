"""Persistence package.

Importing this package registers every ORM mapper with Base.metadata
(required for Alembic and SQLAlchemy mapper configuration) and exports the
repository implementations, the predicate helpers and the unit of work.
"""

from src.infrastructure.persistence.models import *  # noqa: F401, F403
from src.infrastructure.persistence.models import __all__ as _orm_all
from src.infrastructure.persistence.predicates import (
    Predicate,
    PredicateBuilder,
    always_true,
    combine,
    combine_all,
)
from src.infrastructure.persistence.repositories import (
    Repositories,
    SqlFavoriteRepository,
    SqlRecipeRepository,
    SqlRepository,
    get_repositories,
)
from src.infrastructure.persistence.unit_of_work import (
    LifecycleReport,
    SqlUnitOfWork,
    enforce_lifecycle,
)

__all__ = _orm_all + [
    "Predicate",
    "PredicateBuilder",
    "always_true",
    "combine",
    "combine_all",
    "Repositories",
    "SqlRepository",
    "SqlRecipeRepository",
    "SqlFavoriteRepository",
    "get_repositories",
    "LifecycleReport",
    "SqlUnitOfWork",
    "enforce_lifecycle",
]
