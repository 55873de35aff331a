"""Lifecycle columns shared by every persisted entity.

Every table mapped with LifecycleMixin carries the same four lifecycle
columns plus a UUID identity:

    id          opaque identity, generated client-side at construction
    created_at  set once at construction, never rewritten
    updated_at  null until the first save that modifies the row
    is_deleted  logical-delete flag (rows are never physically removed)
    deleted_at  non-null exactly when is_deleted is true

The columns are written by SqlRepository.soft_delete and by the lifecycle
pass in SqlUnitOfWork; nothing else should assign them.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, DateTime, Uuid, false
from sqlalchemy.orm import Mapped, mapped_column


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LifecycleMixin:
    """Identity and soft-delete lifecycle columns."""

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    is_deleted: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false(), index=True
    )
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    def __init__(self, **kwargs) -> None:
        # Column defaults only fire at flush; the lifecycle fields must be
        # readable (and the id usable for relationships) before that.
        kwargs.setdefault("id", uuid.uuid4())
        kwargs.setdefault("created_at", utcnow())
        kwargs.setdefault("is_deleted", False)
        super().__init__(**kwargs)

    def mark_deleted(self, at: datetime | None = None) -> bool:
        """Flag the entity as deleted.  Returns False if it already was.

        deleted_at is only written on the false -> true transition so a
        repeated delete does not move the timestamp.
        """
        if self.is_deleted:
            return False
        self.is_deleted = True
        self.deleted_at = at or utcnow()
        return True

    def touch(self, at: datetime | None = None) -> None:
        """Stamp updated_at, never moving it backwards."""
        at = at or utcnow()
        previous = self.updated_at
        if previous is not None:
            if previous.tzinfo is None:
                previous = previous.replace(tzinfo=timezone.utc)
            if previous >= at:
                return
        self.updated_at = at
