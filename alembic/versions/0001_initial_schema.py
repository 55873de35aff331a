"""Initial schema: users, catalogue, recipes and their children.

Every table except the two association tables (favorites, recipe_tags)
carries the lifecycle columns id / created_at / updated_at / is_deleted /
deleted_at.

Revision ID: 0001
Revises:
Create Date: 2026-10-17
"""

from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _lifecycle_columns() -> list[sa.Column]:
    return [
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_deleted", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    ]


def _lifecycle_index(table: str) -> None:
    op.create_index(f"ix_{table}_is_deleted", table, ["is_deleted"])


def upgrade() -> None:
    # ------------------------------------------------------------------ #
    # 1. COMMUNITY                                                         #
    # ------------------------------------------------------------------ #

    op.create_table(
        "users",
        *_lifecycle_columns(),
        sa.Column("username", sa.Text, nullable=False),
        sa.Column("full_name", sa.Text, nullable=False),
        sa.Column("role", sa.Text, nullable=False),
    )
    _lifecycle_index("users")
    # username is only unique among live users, ignoring case
    op.create_index(
        "uq_users_username_active",
        "users",
        [sa.text("lower(username)")],
        unique=True,
        postgresql_where=sa.text("is_deleted = false"),
        sqlite_where=sa.text("is_deleted = 0"),
    )

    # ------------------------------------------------------------------ #
    # 2. CATALOGUE                                                         #
    # ------------------------------------------------------------------ #

    op.create_table(
        "categories",
        *_lifecycle_columns(),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("icon", sa.Text, nullable=True),
    )
    _lifecycle_index("categories")

    op.create_table(
        "tags",
        *_lifecycle_columns(),
        sa.Column("name", sa.Text, nullable=False),
    )
    _lifecycle_index("tags")

    # ------------------------------------------------------------------ #
    # 3. RECIPES                                                           #
    # ------------------------------------------------------------------ #

    op.create_table(
        "recipes",
        *_lifecycle_columns(),
        sa.Column("user_id", sa.Uuid(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column(
            "category_id", sa.Uuid(as_uuid=True), sa.ForeignKey("categories.id"), nullable=True
        ),
        sa.Column("title", sa.Text, nullable=False),
        sa.Column("slug", sa.Text, nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("prep_time", sa.Integer, nullable=True),
        sa.Column("servings", sa.Integer, nullable=True),
        sa.Column("difficulty", sa.Text, nullable=True),
        sa.Column("is_published", sa.Boolean, nullable=False),
    )
    _lifecycle_index("recipes")
    op.create_index("ix_recipes_user_id", "recipes", ["user_id"])
    op.create_index("ix_recipes_category_id", "recipes", ["category_id"])
    # slug is only unique among live recipes
    op.create_index(
        "uq_recipes_slug_active",
        "recipes",
        ["slug"],
        unique=True,
        postgresql_where=sa.text("is_deleted = false"),
        sqlite_where=sa.text("is_deleted = 0"),
    )

    op.create_table(
        "recipe_tags",
        sa.Column(
            "recipe_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("recipes.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "tag_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("tags.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "ingredients",
        *_lifecycle_columns(),
        sa.Column("recipe_id", sa.Uuid(as_uuid=True), sa.ForeignKey("recipes.id"), nullable=False),
        sa.Column("name", sa.Text, nullable=False),
        sa.Column("unit", sa.Text, nullable=False),
        sa.Column("amount", sa.Numeric(12, 3), nullable=False),
    )
    _lifecycle_index("ingredients")
    op.create_index("ix_ingredients_recipe_id", "ingredients", ["recipe_id"])

    op.create_table(
        "instructions",
        *_lifecycle_columns(),
        sa.Column("recipe_id", sa.Uuid(as_uuid=True), sa.ForeignKey("recipes.id"), nullable=False),
        sa.Column("step_number", sa.Integer, nullable=False),
        sa.Column("content", sa.Text, nullable=False),
    )
    _lifecycle_index("instructions")
    op.create_index("ix_instructions_recipe_id", "instructions", ["recipe_id"])

    # ------------------------------------------------------------------ #
    # 4. ENGAGEMENT                                                        #
    # ------------------------------------------------------------------ #

    op.create_table(
        "favorites",
        sa.Column(
            "user_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "recipe_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("recipes.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "reviews",
        *_lifecycle_columns(),
        sa.Column("user_id", sa.Uuid(as_uuid=True), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("recipe_id", sa.Uuid(as_uuid=True), sa.ForeignKey("recipes.id"), nullable=False),
        sa.Column("rating", sa.Integer, nullable=False),
        sa.Column("comment", sa.Text, nullable=True),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating"),
    )
    _lifecycle_index("reviews")
    op.create_index("ix_reviews_user_id", "reviews", ["user_id"])
    op.create_index("ix_reviews_recipe_id", "reviews", ["recipe_id"])


def downgrade() -> None:
    op.drop_table("reviews")
    op.drop_table("favorites")
    op.drop_table("instructions")
    op.drop_table("ingredients")
    op.drop_table("recipe_tags")
    op.drop_index("uq_recipes_slug_active", table_name="recipes")
    op.drop_table("recipes")
    op.drop_table("tags")
    op.drop_table("categories")
    op.drop_index("uq_users_username_active", table_name="users")
    op.drop_table("users")
