"""Recipe service.

Builds recipe queries from a RecipeFilter and owns the write path for
recipes, which is where slug assignment happens.

Slug assignment
---------------
The slug probe (SlugResolver) and the insert are separate statements, so
two requests with the same title can both see a candidate as free.  The
partial unique index uq_recipes_slug_active decides the winner: the write
runs inside a savepoint, and when the index rejects it the candidate is
added to ``taken`` and resolution starts over from the base slug.  After
``max_slug_attempts`` rejections SlugExhaustedError is raised.
"""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import func, or_

from src.domain.exceptions import SlugConflictError, SlugExhaustedError
from src.domain.models.enums import RecipeSortField, SortDirection
from src.domain.models.filters import RecipeFilter
from src.domain.models.pagination import PaginationRequest, PaginationResult
from src.domain.models.recipes import RecipeDraft
from src.domain.repositories.unit_of_work import UnitOfWork
from src.domain.services.slugs import SlugResolver, slugify
from src.infrastructure.database import settings
from src.infrastructure.persistence.models import (
    Ingredient,
    Instruction,
    Recipe,
    RecipeTag,
    Tag,
)
from src.infrastructure.persistence.predicates import Predicate, PredicateBuilder
from src.infrastructure.persistence.repositories.base import live

logger = logging.getLogger(__name__)

LIST_INCLUDES = ("user", "category")
DETAIL_INCLUDES = ("instructions", "ingredients", "recipe_tags.tag", "user", "category")
EDIT_INCLUDES = ("instructions", "ingredients", "recipe_tags")

_SORT_COLUMNS = {
    RecipeSortField.CREATED_AT: Recipe.created_at,
    RecipeSortField.TITLE: Recipe.title,
    RecipeSortField.PREP_TIME: Recipe.prep_time,
    RecipeSortField.SERVINGS: Recipe.servings,
}


def search_clause(term: str) -> Predicate:
    """Case-insensitive substring match on title or description."""
    needle = term.strip().lower()
    return or_(
        func.lower(Recipe.title).contains(needle, autoescape=True),
        func.lower(Recipe.description).contains(needle, autoescape=True),
    )


def recipe_predicate(f: RecipeFilter) -> Predicate:
    """Fold every set field of the filter into one AND-ed predicate."""
    builder = PredicateBuilder(Recipe)
    builder.where_if(f.search, lambda: search_clause(f.search))
    builder.where_if(f.category_id, lambda: Recipe.category_id == f.category_id)
    builder.where_if(f.user_id, lambda: Recipe.user_id == f.user_id)
    builder.where_if(f.is_published, lambda: Recipe.is_published == f.is_published)
    builder.where_if(f.difficulty, lambda: Recipe.difficulty == f.difficulty)
    builder.where_if(f.max_prep_time, lambda: Recipe.prep_time <= f.max_prep_time)
    builder.where_if(f.min_servings, lambda: Recipe.servings >= f.min_servings)
    builder.where_if(f.max_servings, lambda: Recipe.servings <= f.max_servings)
    if f.tags:
        names = [name.lower() for name in f.tags]
        builder.where(
            Recipe.recipe_tags.any(
                RecipeTag.tag.has((func.lower(Tag.name).in_(names)) & live(Tag))
            )
        )
    return builder.build()


def recipe_ordering(f: RecipeFilter) -> list:
    column = _SORT_COLUMNS[f.sort_by]
    if f.sort_direction is SortDirection.ASC:
        return [column.asc()]
    return [column.desc()]


class RecipeService:
    """Queries and writes for recipes.

    The unit of work must already be entered; the service never opens or
    closes it.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        slugs: SlugResolver | None = None,
        max_slug_attempts: int | None = None,
    ) -> None:
        self._uow = uow
        self._slugs = slugs or SlugResolver()
        self._max_slug_attempts = max_slug_attempts or settings.slug_max_attempts

    # ------------------------------------------------------------------ #
    # Queries                                                              #
    # ------------------------------------------------------------------ #

    async def get_recipes(self, f: RecipeFilter) -> PaginationResult[Recipe]:
        return await self._uow.recipes.page(
            f.pagination(),
            recipe_predicate(f),
            LIST_INCLUDES,
            recipe_ordering(f),
        )

    async def get_recipes_paged(self, page_number: int, page_size: int) -> PaginationResult[Recipe]:
        return await self._uow.recipes.page(
            PaginationRequest.of(page_number, page_size), None, LIST_INCLUDES
        )

    async def get_recipe_by_id(self, recipe_id: UUID) -> Recipe | None:
        return await self._uow.recipes.get_by_id(recipe_id, DETAIL_INCLUDES)

    async def get_recipe_by_slug(self, slug: str) -> Recipe | None:
        return await self._uow.recipes.get_by_slug(slug, DETAIL_INCLUDES)

    async def search_recipes(
        self, term: str, page_number: int, page_size: int
    ) -> PaginationResult[Recipe]:
        return await self._page(page_number, page_size, search_clause(term))

    async def get_recipes_by_category(
        self, category_id: UUID, page_number: int, page_size: int
    ) -> PaginationResult[Recipe]:
        return await self._page(page_number, page_size, Recipe.category_id == category_id)

    async def get_recipes_by_user(
        self, user_id: UUID, page_number: int, page_size: int
    ) -> PaginationResult[Recipe]:
        return await self._page(page_number, page_size, Recipe.user_id == user_id)

    async def get_published_recipes(
        self, page_number: int, page_size: int
    ) -> PaginationResult[Recipe]:
        return await self._page(page_number, page_size, Recipe.is_published.is_(True))

    async def count_recipes(self) -> int:
        return await self._uow.recipes.count()

    async def count_published_recipes(self) -> int:
        return await self._uow.recipes.count(Recipe.is_published.is_(True))

    async def count_user_recipes(self, user_id: UUID) -> int:
        return await self._uow.recipes.count(Recipe.user_id == user_id)

    async def _page(
        self, page_number: int, page_size: int, predicate: Predicate
    ) -> PaginationResult[Recipe]:
        return await self._uow.recipes.page(
            PaginationRequest.of(page_number, page_size), predicate, LIST_INCLUDES
        )

    # ------------------------------------------------------------------ #
    # Writes                                                               #
    # ------------------------------------------------------------------ #

    async def add_recipe(self, user_id: UUID, draft: RecipeDraft) -> Recipe:
        """Create a recipe with a unique slug and commit it."""
        tags = await self._resolve_tags(draft.tag_names)
        taken: set[str] = set()
        for _ in range(self._max_slug_attempts):
            slug = await self._slugs.resolve(draft.title, self._uow.recipes.slug_exists, taken)
            # Fresh instances each attempt; a rolled-back savepoint leaves
            # the previous ones detached.
            recipe = _build_recipe(user_id, draft, slug, tags)
            try:
                async with self._uow.savepoint():
                    await self._uow.recipes.add(recipe)
            except SlugConflictError:
                logger.warning("slug %r claimed concurrently, retrying", slug)
                taken.add(slug)
                continue
            await self._uow.save_changes()
            logger.info("created recipe %s with slug %r", recipe.id, slug)
            return recipe
        raise SlugExhaustedError(slugify(draft.title), self._max_slug_attempts)

    async def update_recipe(self, recipe_id: UUID, draft: RecipeDraft) -> Recipe | None:
        """Replace the recipe's content.  None if there is no live recipe with that id.

        The slug is re-derived from the new title; the recipe's own current
        slug does not count as a collision.  Existing ingredients and
        instructions are deleted (soft) and replaced by the draft's.
        """
        recipe = await self._uow.recipes.get_by_id(recipe_id, EDIT_INCLUDES)
        if recipe is None:
            return None
        tags = await self._resolve_tags(draft.tag_names)

        async def slug_taken(candidate: str) -> bool:
            return await self._uow.recipes.slug_exists(candidate, exclude_id=recipe_id)

        taken: set[str] = set()
        for _ in range(self._max_slug_attempts):
            slug = await self._slugs.resolve(draft.title, slug_taken, taken)
            try:
                async with self._uow.savepoint():
                    await self._apply_draft(recipe, draft, slug, tags)
            except SlugConflictError:
                logger.warning("slug %r claimed concurrently, retrying", slug)
                taken.add(slug)
                # the savepoint rollback expired the recipe's state
                recipe = await self._uow.recipes.get_by_id(recipe_id, EDIT_INCLUDES)
                if recipe is None:
                    return None
                continue
            await self._uow.save_changes()
            return await self._uow.recipes.get_by_id(recipe_id, DETAIL_INCLUDES)
        raise SlugExhaustedError(slugify(draft.title), self._max_slug_attempts)

    async def delete_recipe(self, recipe_id: UUID) -> bool:
        """Soft-delete the recipe together with its ingredients and instructions."""
        recipe = await self._uow.recipes.get_by_id(recipe_id)
        if recipe is None:
            return False
        await self._uow.recipes.delete(recipe)
        await self._uow.save_changes()
        logger.info("deleted recipe %s", recipe_id)
        return True

    # ------------------------------------------------------------------ #
    # Helpers                                                              #
    # ------------------------------------------------------------------ #

    async def _resolve_tags(self, names: list[str]) -> list[Tag]:
        """Existing tags matched case-insensitively; unknown names become new tags."""
        tags: list[Tag] = []
        for name in names:
            tag = await self._uow.tags.first(func.lower(Tag.name) == name.lower())
            if tag is None:
                tag = await self._uow.tags.add(Tag(name=name))
                logger.debug("new tag %r", name)
            tags.append(tag)
        return tags

    async def _apply_draft(
        self, recipe: Recipe, draft: RecipeDraft, slug: str, tags: list[Tag]
    ) -> None:
        recipe.title = draft.title
        recipe.slug = slug
        recipe.description = draft.description
        recipe.category_id = draft.category_id
        recipe.prep_time = draft.prep_time
        recipe.servings = draft.servings
        recipe.difficulty = draft.difficulty
        recipe.is_published = draft.is_published

        await self._uow.ingredients.delete_range(
            [i for i in recipe.ingredients if not i.is_deleted]
        )
        await self._uow.instructions.delete_range(
            [i for i in recipe.instructions if not i.is_deleted]
        )
        recipe.ingredients.extend(_build_ingredients(draft))
        recipe.instructions.extend(_build_instructions(draft))

        wanted = {tag.id for tag in tags}
        for link in list(recipe.recipe_tags):
            if link.tag_id not in wanted:
                recipe.recipe_tags.remove(link)
        present = {link.tag_id for link in recipe.recipe_tags}
        recipe.recipe_tags.extend(
            RecipeTag(tag_id=tag.id) for tag in tags if tag.id not in present
        )
        await self._uow.recipes.update(recipe)


def _build_ingredients(draft: RecipeDraft) -> list[Ingredient]:
    return [Ingredient(name=i.name, unit=i.unit, amount=i.amount) for i in draft.ingredients]


def _build_instructions(draft: RecipeDraft) -> list[Instruction]:
    return [
        Instruction(step_number=i.step_number, content=i.content) for i in draft.instructions
    ]


def _build_recipe(user_id: UUID, draft: RecipeDraft, slug: str, tags: list[Tag]) -> Recipe:
    return Recipe(
        user_id=user_id,
        category_id=draft.category_id,
        title=draft.title,
        slug=slug,
        description=draft.description,
        prep_time=draft.prep_time,
        servings=draft.servings,
        difficulty=draft.difficulty,
        is_published=draft.is_published,
        ingredients=_build_ingredients(draft),
        instructions=_build_instructions(draft),
        # tag_id only; assigning .tag would cascade the recipe into the
        # session through the tag's backref
        recipe_tags=[RecipeTag(tag_id=tag.id) for tag in tags],
    )
