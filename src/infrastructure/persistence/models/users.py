"""Community layer ORM models: users, favorites, reviews."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Text,
    Uuid,
    false,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database import Base
from src.infrastructure.persistence.models.entity import LifecycleMixin, utcnow


class User(LifecycleMixin, Base):
    """Recipe author / reviewer.

    role: 'user' | 'admin'.  Credentials live with the authentication layer
    and are not mapped here.
    """

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(Text, nullable=False)
    full_name: Mapped[str] = mapped_column(Text, nullable=False)
    role: Mapped[str] = mapped_column(Text, nullable=False, default="user")

    recipes: Mapped[list["Recipe"]] = relationship(back_populates="user")
    favorites: Mapped[list["Favorite"]] = relationship(back_populates="user")
    reviews: Mapped[list["Review"]] = relationship(back_populates="user")


# username is unique among live users, ignoring case
Index(
    "uq_users_username_active",
    func.lower(User.username),
    unique=True,
    postgresql_where=User.is_deleted == false(),
    sqlite_where=User.is_deleted == false(),
)


class Favorite(Base):
    """Association: a user bookmarked a recipe.

    No lifecycle columns; un-favoriting deletes the row.
    Composite PK: (user_id, recipe_id).
    """

    __tablename__ = "favorites"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    recipe_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("recipes.id", ondelete="CASCADE"), primary_key=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    user: Mapped["User"] = relationship(back_populates="favorites")
    recipe: Mapped["Recipe"] = relationship(back_populates="favorites")


class Review(LifecycleMixin, Base):
    """A user's rating (1..5) and optional comment on a recipe.

    At most one live review per (user, recipe); enforced by ReviewService.
    """

    __tablename__ = "reviews"
    __table_args__ = (CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating"),)

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True
    )
    recipe_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("recipes.id"), nullable=False, index=True
    )
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    user: Mapped["User"] = relationship(back_populates="reviews")
    recipe: Mapped["Recipe"] = relationship(back_populates="reviews")
