"""Domain exception hierarchy.

Repository reads never raise on absence (they return None / False / an
empty page); the errors here cover storage failures, constraint
violations, and the few service-level rule breaches.
"""

from __future__ import annotations


class RecipeHubError(Exception):
    """Base class for every error raised by this package."""


class RepositoryError(RecipeHubError):
    """A storage-layer failure, wrapped with the operation that hit it.

    The original driver / SQLAlchemy exception is always chained as
    __cause__ so callers can still inspect its kind.
    """

    def __init__(self, operation: str, entity: str, message: str | None = None) -> None:
        self.operation = operation
        self.entity = entity
        detail = f"{operation} on {entity} failed"
        if message:
            detail = f"{detail}: {message}"
        super().__init__(detail)


class ConstraintViolationError(RepositoryError):
    """A write broke a uniqueness, foreign-key, or check constraint."""

    def __init__(
        self,
        operation: str,
        entity: str,
        constraint: str | None = None,
        message: str | None = None,
    ) -> None:
        self.constraint = constraint
        super().__init__(operation, entity, message)


class SlugConflictError(ConstraintViolationError):
    """The recipe slug uniqueness index rejected a write."""


class SlugExhaustedError(RecipeHubError):
    """Retry-on-conflict could not find a free slug within SLUG_MAX_ATTEMPTS attempts."""

    def __init__(self, base_slug: str, attempts: int) -> None:
        self.base_slug = base_slug
        self.attempts = attempts
        super().__init__(f"no free slug for '{base_slug}' after {attempts} attempts")


class EntityNotFoundError(RecipeHubError):
    """A service operation required an entity that does not exist (or is deleted)."""

    def __init__(self, entity: str, entity_id: object | None = None) -> None:
        self.entity = entity
        self.entity_id = entity_id
        message = f"{entity} not found"
        if entity_id is not None:
            message = f"{entity} with id '{entity_id}' not found"
        super().__init__(message)


class DuplicateEntityError(RecipeHubError):
    """A service-level uniqueness rule was broken."""

    def __init__(self, entity: str, field: str, value: object) -> None:
        self.entity = entity
        self.field = field
        self.value = value
        super().__init__(f"{entity} with {field} '{value}' already exists")
