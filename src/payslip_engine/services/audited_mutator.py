"""Audit-stamping wrapper around session writes.

Every create/update/delete issued through an AuditedMutator records the acting
user in the entity's created_by/updated_by/deleted_by columns. Entities that do
not implement the Auditable protocol are written without stamping.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypeVar

from sqlalchemy import ColumnElement, delete, update
from sqlalchemy.ext.asyncio import AsyncSession

from payslip_engine.models.base import Auditable, utcnow

T = TypeVar("T")


def _has_column(model: type, name: str) -> bool:
    table = getattr(model, "__table__", None)
    return table is not None and name in table.columns


class AuditedMutator:
    """Session writes attributed to ``actor_id``.

    actor_id of 0 or None is recorded as None (system/unauthenticated).
    Persistence errors from the session propagate unchanged.
    """

    def __init__(self, session: AsyncSession, actor_id: int | None = None):
        self.session = session
        self.actor_id = actor_id or None

    async def create(self, entity: T) -> T:
        """Stamp created_by and insert."""
        if isinstance(entity, Auditable):
            entity.set_created_by(self.actor_id)
        self.session.add(entity)
        await self.session.flush()
        return entity

    async def save(self, entity: T) -> T:
        """Stamp updated_by and persist the full record."""
        if isinstance(entity, Auditable):
            entity.set_updated_by(self.actor_id)
        self.session.add(entity)
        await self.session.flush()
        return entity

    async def update(
        self,
        model: type,
        values: Mapping[str, Any],
        *conditions: ColumnElement[bool],
    ) -> int:
        """Partial update of matching rows; returns the affected row count.

        updated_by is injected into a copy of ``values``.
        """
        values = dict(values)
        if _has_column(model, "updated_by"):
            values["updated_by"] = self.actor_id
        result = await self.session.execute(
            update(model).where(*conditions).values(**values)
        )
        return result.rowcount or 0

    async def delete(self, target: Any, *conditions: ColumnElement[bool]) -> int:
        """Soft delete an entity instance, or every row of a model matching
        ``conditions``.

        deleted_by is written first, then the deleted_at marker. Models
        without deleted_at are hard-deleted.
        """
        if isinstance(target, type):
            return await self._delete_where(target, *conditions)

        if isinstance(target, Auditable):
            target.set_deleted_by(self.actor_id)
        if _has_column(type(target), "deleted_at"):
            target.deleted_at = utcnow()
            self.session.add(target)
        else:
            await self.session.delete(target)
        await self.session.flush()
        return 1

    async def _delete_where(self, model: Any, *conditions: ColumnElement[bool]) -> int:
        if not _has_column(model, "deleted_at"):
            result = await self.session.execute(delete(model).where(*conditions))
            return result.rowcount or 0

        live = (*conditions, model.deleted_at.is_(None))
        if _has_column(model, "deleted_by"):
            await self.session.execute(
                update(model).where(*live).values(deleted_by=self.actor_id)
            )
        result = await self.session.execute(
            update(model).where(*live).values(deleted_at=utcnow())
        )
        return result.rowcount or 0
