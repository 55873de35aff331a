"""Domain services package."""

from .slugs import SlugResolver, candidates, slugify

__all__ = ["SlugResolver", "candidates", "slugify"]
