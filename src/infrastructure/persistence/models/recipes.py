"""Recipe catalogue ORM models: categories, tags, recipes, recipe_tags,
ingredients, instructions."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    Text,
    Uuid,
    false,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database import Base
from src.infrastructure.persistence.models.entity import LifecycleMixin, utcnow


class Category(LifecycleMixin, Base):
    """Top-level grouping for recipes (e.g. "Sobremesas", "Massas")."""

    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    icon: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    recipes: Mapped[list["Recipe"]] = relationship(back_populates="category")


class Tag(LifecycleMixin, Base):
    """Free-form label attached to recipes by name.  Created on demand."""

    __tablename__ = "tags"

    name: Mapped[str] = mapped_column(Text, nullable=False)

    recipe_tags: Mapped[list["RecipeTag"]] = relationship(back_populates="tag")


class Recipe(LifecycleMixin, Base):
    """A published or draft recipe.

    slug is unique among non-deleted recipes only (partial index), so the
    slug of a soft-deleted recipe can be handed out again.
    prep_time is in minutes.
    """

    __tablename__ = "recipes"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True
    )
    category_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("categories.id"), nullable=True, index=True
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    slug: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    prep_time: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    servings: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    difficulty: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    user: Mapped["User"] = relationship(back_populates="recipes")
    category: Mapped[Optional["Category"]] = relationship(back_populates="recipes")
    ingredients: Mapped[list["Ingredient"]] = relationship(
        back_populates="recipe", cascade="all", order_by="Ingredient.created_at"
    )
    instructions: Mapped[list["Instruction"]] = relationship(
        back_populates="recipe", cascade="all", order_by="Instruction.step_number"
    )
    recipe_tags: Mapped[list["RecipeTag"]] = relationship(
        back_populates="recipe", cascade="all, delete-orphan"
    )
    favorites: Mapped[list["Favorite"]] = relationship(back_populates="recipe")
    reviews: Mapped[list["Review"]] = relationship(back_populates="recipe")


Index(
    "uq_recipes_slug_active",
    Recipe.slug,
    unique=True,
    postgresql_where=Recipe.is_deleted == false(),
    sqlite_where=Recipe.is_deleted == false(),
)


class RecipeTag(Base):
    """Association: which tags label which recipes.

    Plain link row without the lifecycle columns; removing a tag from a
    recipe deletes the row.  Composite PK: (recipe_id, tag_id).
    """

    __tablename__ = "recipe_tags"

    recipe_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("recipes.id", ondelete="CASCADE"), primary_key=True
    )
    tag_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    recipe: Mapped["Recipe"] = relationship(back_populates="recipe_tags")
    tag: Mapped["Tag"] = relationship(back_populates="recipe_tags")


class Ingredient(LifecycleMixin, Base):
    """One ingredient line of a recipe (amount + unit + name)."""

    __tablename__ = "ingredients"

    recipe_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("recipes.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    unit: Mapped[str] = mapped_column(Text, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 3), nullable=False)

    recipe: Mapped["Recipe"] = relationship(back_populates="ingredients")


class Instruction(LifecycleMixin, Base):
    """One numbered preparation step of a recipe."""

    __tablename__ = "instructions"

    recipe_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("recipes.id"), nullable=False, index=True
    )
    step_number: Mapped[int] = mapped_column(Integer, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)

    recipe: Mapped["Recipe"] = relationship(back_populates="instructions")
