"""Entity lifecycle capability.

Any type handled by the generic repository must expose these fields.  The
persistence layer satisfies the protocol with LifecycleMixin; the domain
layer only depends on the shape.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, runtime_checkable
from uuid import UUID


@runtime_checkable
class Lifecycle(Protocol):
    """Identity plus soft-delete lifecycle.

    Invariants:
      - deleted_at is not None  <=>  is_deleted is True
      - updated_at, once set, never decreases
    """

    id: UUID
    created_at: datetime
    updated_at: datetime | None
    is_deleted: bool
    deleted_at: datetime | None
