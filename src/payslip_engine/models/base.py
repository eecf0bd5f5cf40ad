"""Base model class and shared mixins for SQLAlchemy ORM."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Protocol, runtime_checkable

from sqlalchemy import DateTime, Integer, Numeric, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    type_annotation_map = {
        datetime: DateTime(timezone=True),
        Decimal: Numeric(12, 2),
    }


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (SQLite round-trips) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class TimestampMixin:
    """Mixin for models with created_at/updated_at timestamps.

    Python-side defaults keep the values loaded after flush, so async
    sessions never lazy-load them.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
        nullable=True,
    )


@runtime_checkable
class Auditable(Protocol):
    """Entities whose writes are attributed to an acting user."""

    def set_created_by(self, actor_id: int | None) -> None: ...

    def set_updated_by(self, actor_id: int | None) -> None: ...

    def set_deleted_by(self, actor_id: int | None) -> None: ...


class AuditMixin:
    """Audit stamp columns plus soft-delete marker.

    Only AuditedMutator should call the setters.
    """

    created_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
    updated_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
    deleted_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True, index=True
    )

    def set_created_by(self, actor_id: int | None) -> None:
        self.created_by = actor_id

    def set_updated_by(self, actor_id: int | None) -> None:
        self.updated_by = actor_id

    def set_deleted_by(self, actor_id: int | None) -> None:
        self.deleted_by = actor_id

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None
