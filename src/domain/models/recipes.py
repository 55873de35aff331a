"""Recipe write models.

RecipeDraft carries everything a create or update needs; the service turns
it into ORM rows.  Pure Pydantic, no persistence concerns.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class IngredientDraft(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    unit: str
    amount: Decimal = Field(ge=0)


class InstructionDraft(BaseModel):
    model_config = ConfigDict(frozen=True)

    step_number: int = Field(ge=1)
    content: str = Field(min_length=1)


class RecipeDraft(BaseModel):
    """Author-supplied recipe content.

    tag_names are matched case-insensitively against existing tags; unknown
    names create new tags.  Blank and duplicate names are dropped.
    """

    model_config = ConfigDict(frozen=True)

    title: str = Field(min_length=1)
    description: str | None = None
    category_id: UUID | None = None
    prep_time: int | None = Field(default=None, ge=0)
    servings: int | None = Field(default=None, ge=1)
    difficulty: str | None = None
    is_published: bool = False
    ingredients: list[IngredientDraft] = Field(default_factory=list)
    instructions: list[InstructionDraft] = Field(default_factory=list)
    tag_names: list[str] = Field(default_factory=list)

    @field_validator("tag_names")
    @classmethod
    def _dedupe_tags(cls, names: list[str]) -> list[str]:
        seen: set[str] = set()
        result: list[str] = []
        for name in names:
            cleaned = name.strip()
            if cleaned and cleaned.lower() not in seen:
                seen.add(cleaned.lower())
                result.append(cleaned)
        return result
