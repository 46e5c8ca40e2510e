"""Owner-scoped row statements for every entity kind.

No lifecycle policy lives here. Each method is one statement; the guards
the transitioners depend on (``deleted_at IS NULL`` / ``IS NOT NULL``) are
part of the WHERE clause, so the store evaluates and applies them in a
single round trip.

An ``EntityStore`` is bound to one owner at construction; there is no
method that takes an owner argument, so a statement cannot be built
without the owner filter.

Connection-level failures surface as ``StoreUnavailableError``.
"""

import logging
from datetime import datetime

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from snipvault.kinds import KindSpec
from snipvault.middleware.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)

STORE_ERRORS = (OperationalError, InterfaceError)


class EntityStore:
    def __init__(self, session: AsyncSession, owner_id: str):
        if not owner_id:
            raise ValueError("EntityStore requires an owner_id")
        self.session = session
        self.owner_id = owner_id

    async def _execute(self, stmt, spec: KindSpec):
        try:
            return await self.session.execute(stmt)
        except STORE_ERRORS as exc:
            logger.error(
                "Store call failed for %s (owner %s)", spec.kind.value, self.owner_id,
                exc_info=True,
            )
            raise StoreUnavailableError(
                f"Store unavailable while accessing {spec.label.lower()}s"
            ) from exc

    def _owned(self, spec: KindSpec, entity_id: str):
        model = spec.model
        return model.id == entity_id, model.owner_id == self.owner_id

    # ── Transitions (one conditional statement each) ─────────

    async def mark_deleted(self, spec: KindSpec, entity_id: str, now: datetime) -> bool:
        """active → deleted. False when no owned, active row matched."""
        model = spec.model
        stmt = (
            update(model)
            .where(*self._owned(spec, entity_id), model.deleted_at.is_(None))
            .values(deleted_at=now, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await self._execute(stmt, spec)
        return result.rowcount == 1

    async def clear_deleted(self, spec: KindSpec, entity_id: str, now: datetime) -> bool:
        """deleted → active. False when no owned, deleted row matched."""
        model = spec.model
        stmt = (
            update(model)
            .where(*self._owned(spec, entity_id), model.deleted_at.is_not(None))
            .values(deleted_at=None, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await self._execute(stmt, spec)
        return result.rowcount == 1

    async def remove_deleted(
        self,
        spec: KindSpec,
        entity_id: str,
        *,
        deleted_before: datetime | None = None,
    ) -> bool:
        """deleted → purged. Active rows, and rows deleted after ``deleted_before``, never match."""
        model = spec.model
        conditions = [*self._owned(spec, entity_id), model.deleted_at.is_not(None)]
        if deleted_before is not None:
            conditions.append(model.deleted_at <= deleted_before)
        stmt = (
            delete(model)
            .where(*conditions)
            .execution_options(synchronize_session=False)
        )
        result = await self._execute(stmt, spec)
        return result.rowcount == 1

    async def detach_children(self, spec: KindSpec, entity_id: str) -> int:
        """Null the container FK on the owner's child rows. Children stay active."""
        detached = 0
        for link in spec.children:
            stmt = (
                update(link.model)
                .where(link.column == entity_id, link.model.owner_id == self.owner_id)
                .values({link.fk_column: None})
                .execution_options(synchronize_session=False)
            )
            result = await self._execute(stmt, spec)
            detached += result.rowcount
        return detached

    # ── Reads ────────────────────────────────────────────────

    async def get(self, spec: KindSpec, entity_id: str):
        result = await self._execute(
            select(spec.model).where(*self._owned(spec, entity_id)), spec
        )
        return result.scalar_one_or_none()

    def _live_child_count(self, spec: KindSpec):
        """Correlated count of active children still pointing at each container."""
        total = None
        for link in spec.children:
            count = (
                select(func.count())
                .select_from(link.model)
                .where(
                    link.column == spec.model.id,
                    link.model.owner_id == self.owner_id,
                    link.model.deleted_at.is_(None),
                )
                .correlate(spec.model)
                .scalar_subquery()
            )
            total = count if total is None else total + count
        return total

    async def list_deleted(
        self,
        spec: KindSpec,
        *,
        deleted_before: datetime | None = None,
        limit: int | None = None,
    ) -> list[tuple]:
        """Deleted rows, newest deletion first, as ``(entity, item_count)``.

        ``item_count`` is None for kinds that hold no children.
        """
        model = spec.model
        count = self._live_child_count(spec) if spec.is_container else None
        columns = [model] if count is None else [model, count.label("item_count")]

        stmt = select(*columns).where(
            model.owner_id == self.owner_id,
            model.deleted_at.is_not(None),
        )
        if deleted_before is not None:
            stmt = stmt.where(model.deleted_at <= deleted_before)
        stmt = stmt.order_by(model.deleted_at.desc(), model.id)
        if limit is not None:
            stmt = stmt.limit(limit)

        result = await self._execute(stmt, spec)
        if count is None:
            return [(entity, None) for entity in result.scalars().all()]
        return [(row[0], row[1]) for row in result.all()]

    async def list_active(self, spec: KindSpec, *, limit: int = 100, offset: int = 0):
        model = spec.model
        stmt = (
            select(model)
            .where(model.owner_id == self.owner_id, model.deleted_at.is_(None))
            .order_by(model.created_at.desc(), model.id)
            .limit(limit)
            .offset(offset)
        )
        result = await self._execute(stmt, spec)
        return result.scalars().all()


async def owners_with_items_deleted_before(
    session: AsyncSession, spec: KindSpec, cutoff: datetime
) -> set[str]:
    """Operator-side discovery for the expiry reaper.

    Only returns owner IDs; every purge that follows goes through an
    owner-bound ``EntityStore``.
    """
    model = spec.model
    stmt = (
        select(model.owner_id)
        .where(model.deleted_at.is_not(None), model.deleted_at <= cutoff)
        .distinct()
    )
    try:
        result = await session.execute(stmt)
    except STORE_ERRORS as exc:
        raise StoreUnavailableError() from exc
    return set(result.scalars().all())
