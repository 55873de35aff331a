"""Slug generation and uniqueness resolution.

slugify is a pure ASCII filter: it lowercases, then *drops* every character
outside [a-z0-9 whitespace -].  Accented letters are removed, not
transliterated, so "Pão de Açúcar!!" becomes "po-de-acar".

SlugResolver probes candidates against the live set:

    base, base-2, base-3, ...

Suffixes are always appended to the normalized base, never to the previous
candidate.  The probe and the later insert are not atomic: two concurrent
writers can both see the same candidate as free.  The storage layer backs
this with a unique index on live slugs, and callers retry through
resolve(..., taken=...) when that index rejects a write.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Awaitable, Callable, Collection

logger = logging.getLogger(__name__)

_INVALID_CHARS = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE_RUN = re.compile(r"\s+")
_HYPHEN_RUN = re.compile(r"-{2,}")

SlugProbe = Callable[[str], Awaitable[bool]]


def slugify(text: str | None) -> str:
    """Return the URL-safe slug for text.  Empty or blank input gives ""."""
    if not text or not text.strip():
        return ""
    slug = text.lower()
    slug = _INVALID_CHARS.sub("", slug)
    slug = _WHITESPACE_RUN.sub(" ", slug).strip()
    slug = slug.replace(" ", "-")
    slug = _HYPHEN_RUN.sub("-", slug)
    return slug.strip("-")


def candidates(base_slug: str):
    """Yield base_slug, base_slug-2, base_slug-3, ... without end."""
    yield base_slug
    suffix = 2
    while True:
        yield f"{base_slug}-{suffix}"
        suffix += 1


class SlugResolver:
    """Finds the first free slug for a title.

    exists is an async probe answering "is this slug used by another live
    entity?"; the resolver holds no state between calls.
    """

    async def resolve(
        self,
        title: str,
        exists: SlugProbe,
        taken: Collection[str] = (),
    ) -> str:
        """Return the first candidate that is neither in taken nor reported by exists.

        taken lists candidates already known to conflict (e.g. rejected by
        the storage unique index on a previous attempt) and is skipped
        without probing.
        """
        base = slugify(title)
        untried = (c for c in candidates(base) if c not in taken)
        candidate = next(untried)
        while await exists(candidate):
            candidate = next(untried)
        if candidate != base:
            logger.info("slug %r taken, using %r", base, candidate)
        return candidate
