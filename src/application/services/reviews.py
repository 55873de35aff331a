"""Review service.

A user holds at most one live review per recipe.  Only the author may edit
or delete a review; for anyone else update/delete answer False, the same
as for a missing review.
"""

from __future__ import annotations

import logging
from uuid import UUID

from src.domain.exceptions import DuplicateEntityError, EntityNotFoundError
from src.domain.models.pagination import PaginationRequest, PaginationResult
from src.domain.repositories.unit_of_work import UnitOfWork
from src.infrastructure.persistence.models import Review

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


def _check_rating(rating: int) -> None:
    if not MIN_RATING <= rating <= MAX_RATING:
        raise ValueError(f"rating must be between {MIN_RATING} and {MAX_RATING}, got {rating}")


class ReviewService:
    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    async def get_reviews_by_recipe(
        self, recipe_id: UUID, page_number: int = 1, page_size: int = 10
    ) -> PaginationResult[Review]:
        return await self._uow.reviews.page(
            PaginationRequest.of(page_number, page_size),
            Review.recipe_id == recipe_id,
            ("user",),
        )

    async def get_reviews_by_user(
        self, user_id: UUID, page_number: int = 1, page_size: int = 10
    ) -> PaginationResult[Review]:
        return await self._uow.reviews.page(
            PaginationRequest.of(page_number, page_size),
            Review.user_id == user_id,
            ("user", "recipe"),
        )

    async def get_review_by_id(self, review_id: UUID) -> Review | None:
        return await self._uow.reviews.get_by_id(review_id, ("user",))

    async def get_user_review_for_recipe(self, user_id: UUID, recipe_id: UUID) -> Review | None:
        return await self._uow.reviews.first(
            (Review.user_id == user_id) & (Review.recipe_id == recipe_id), ("user",)
        )

    async def create_review(
        self, user_id: UUID, recipe_id: UUID, rating: int, comment: str | None = None
    ) -> Review:
        _check_rating(rating)
        if not await self._uow.recipes.exists_id(recipe_id):
            raise EntityNotFoundError("Recipe", recipe_id)
        if await self._uow.reviews.exists(
            (Review.user_id == user_id) & (Review.recipe_id == recipe_id)
        ):
            raise DuplicateEntityError("Review", "recipe_id", recipe_id)
        review = await self._uow.reviews.add(
            Review(user_id=user_id, recipe_id=recipe_id, rating=rating, comment=comment)
        )
        await self._uow.save_changes()
        logger.info("user %s reviewed recipe %s", user_id, recipe_id)
        return review

    async def update_review(
        self, review_id: UUID, user_id: UUID, rating: int, comment: str | None = None
    ) -> bool:
        _check_rating(rating)
        review = await self._uow.reviews.get_by_id(review_id)
        if review is None or review.user_id != user_id:
            return False
        review.rating = rating
        review.comment = comment
        await self._uow.reviews.update(review)
        await self._uow.save_changes()
        return True

    async def delete_review(self, review_id: UUID, user_id: UUID) -> bool:
        review = await self._uow.reviews.get_by_id(review_id)
        if review is None or review.user_id != user_id:
            return False
        await self._uow.reviews.soft_delete(review)
        await self._uow.save_changes()
        return True

    async def average_rating(self, recipe_id: UUID) -> float:
        """Mean rating of the recipe's live reviews; 0.0 when it has none."""
        reviews = await self._uow.reviews.find(Review.recipe_id == recipe_id)
        if not reviews:
            return 0.0
        return sum(review.rating for review in reviews) / len(reviews)

    async def count_reviews(self, recipe_id: UUID) -> int:
        return await self._uow.reviews.count(Review.recipe_id == recipe_id)
