"""Restore or purge a selection of entities, item by item.

There is no atomicity across a batch. Every item is its own conditional
row operation, committed on its own, so an item that fails is recorded
and the rest still go through.

Also hosts the two operations built on top of a permanent-delete batch:

  clear_recycle_bin   re-lists the owner's deleted entities at call time and
                      purges them. Each purge is still guarded by
                      ``deleted_at IS NOT NULL`` and by the cutoff, so an
                      item restored (or restored and deleted again) by
                      another session mid-run is reported as failed and
                      survives.
  purge_expired       operator reaper: clear_recycle_bin for every owner
                      with entities past the grace period.
"""

import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from snipvault.config import settings
from snipvault.kinds import EntityKind, get_kind_spec
from snipvault.middleware.exceptions import InvalidRequestError
from snipvault.services import lifecycle
from snipvault.services.lifecycle import TransitionError, TransitionOutcome
from snipvault.services.recycle_bin import list_recycle_bin
from snipvault.services.store import STORE_ERRORS, owners_with_items_deleted_before

logger = logging.getLogger(__name__)


class BatchAction(str, enum.Enum):
    RESTORE = "restore"
    PERMANENT_DELETE = "permanent-delete"

    @property
    def verb(self) -> str:
        return "Restored" if self is BatchAction.RESTORE else "Permanently deleted"


@dataclass(frozen=True)
class BatchItem:
    kind: str
    entity_id: str


@dataclass(frozen=True)
class BatchFailure:
    kind: str
    entity_id: str
    reason: TransitionError
    message: str


@dataclass
class BatchResult:
    action: BatchAction
    succeeded_items: list[BatchItem] = field(default_factory=list)
    failed: list[BatchFailure] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return len(self.succeeded_items)

    @property
    def requested(self) -> int:
        return self.succeeded + len(self.failed)

    @property
    def summary(self) -> str:
        text = f"{self.action.verb} {self.succeeded} of {self.requested} item(s)"
        if self.failed:
            text += f"; {len(self.failed)} failed"
        return text


def _dedupe(items: list[BatchItem]) -> list[BatchItem]:
    return list(dict.fromkeys(items))


async def _apply(
    db: AsyncSession,
    action: BatchAction,
    item: BatchItem,
    owner_id: str,
    now: datetime,
    deleted_before: datetime | None,
) -> TransitionOutcome:
    if action is BatchAction.RESTORE:
        return await lifecycle.restore(db, item.kind, item.entity_id, owner_id, now=now)
    return await lifecycle.permanent_delete(
        db, item.kind, item.entity_id, owner_id, deleted_before=deleted_before
    )


async def run_batch(
    db: AsyncSession,
    action: BatchAction,
    items: list[BatchItem],
    owner_id: str,
    *,
    now: datetime | None = None,
    deleted_before: datetime | None = None,
) -> BatchResult:
    """Apply ``action`` to every item in order; never aborts on a failed item.

    ``deleted_before`` only applies to purges: an item deleted after it is
    refused even if it was listed earlier.
    """
    unique = _dedupe(items)
    if len(unique) > settings.batch_max_items:
        raise InvalidRequestError(
            f"Too many items in one batch ({len(unique)}); the limit is {settings.batch_max_items}"
        )

    action = BatchAction(action)
    now = now or datetime.utcnow()
    result = BatchResult(action=action)

    for item in unique:
        outcome = await _apply(db, action, item, owner_id, now, deleted_before)
        if outcome.ok:
            try:
                await db.commit()
            except STORE_ERRORS:
                logger.error(
                    "Commit failed for %s %s %s", action.value, item.kind, item.entity_id,
                    exc_info=True,
                )
                await db.rollback()
                outcome = TransitionOutcome(
                    kind=item.kind, entity_id=item.entity_id,
                    error=TransitionError.STORE_UNAVAILABLE,
                    message="Store unavailable while committing",
                )
        else:
            await db.rollback()

        if outcome.ok:
            result.succeeded_items.append(item)
        else:
            result.failed.append(
                BatchFailure(
                    kind=item.kind, entity_id=item.entity_id,
                    reason=outcome.error, message=outcome.message,
                )
            )

    log = logger.warning if result.failed else logger.info
    log("Batch %s for owner %s: %s", action.value, owner_id, result.summary)
    return result


async def clear_recycle_bin(
    db: AsyncSession,
    session_factory: async_sessionmaker[AsyncSession],
    owner_id: str,
    *,
    deleted_before: datetime | None = None,
) -> BatchResult:
    """Permanently delete everything currently in the owner's recycle bin.

    Leaf kinds are purged before containers; a container's detach then only
    touches children that are still active.
    """
    view = await list_recycle_bin(session_factory, owner_id, deleted_before=deleted_before)
    refs = sorted(view.refs(), key=lambda ref: get_kind_spec(ref[0]).is_container)
    items = [BatchItem(kind=kind.value, entity_id=entity_id) for kind, entity_id in refs]
    if not items:
        return BatchResult(action=BatchAction.PERMANENT_DELETE)

    result = BatchResult(action=BatchAction.PERMANENT_DELETE)
    # Chunked so a large bin never trips the per-request batch cap
    step = settings.batch_max_items
    for start in range(0, len(items), step):
        chunk = await run_batch(
            db, BatchAction.PERMANENT_DELETE, items[start:start + step], owner_id,
            deleted_before=deleted_before,
        )
        result.succeeded_items.extend(chunk.succeeded_items)
        result.failed.extend(chunk.failed)
    return result


async def find_expired_owners(
    session_factory: async_sessionmaker[AsyncSession],
    cutoff: datetime,
) -> set[str]:
    owners: set[str] = set()
    async with session_factory() as session:
        for kind in EntityKind:
            owners |= await owners_with_items_deleted_before(session, get_kind_spec(kind), cutoff)
    return owners


async def purge_expired(
    session_factory: async_sessionmaker[AsyncSession],
    *,
    retention_days: int | None = None,
    now: datetime | None = None,
) -> dict[str, BatchResult]:
    """Purge every entity deleted longer ago than the grace period, owner by owner."""
    days = settings.recycle_bin_retention_days if retention_days is None else retention_days
    cutoff = (now or datetime.utcnow()) - timedelta(days=days)

    results: dict[str, BatchResult] = {}
    for owner_id in sorted(await find_expired_owners(session_factory, cutoff)):
        async with session_factory() as db:
            results[owner_id] = await clear_recycle_bin(
                db, session_factory, owner_id, deleted_before=cutoff
            )
        logger.info("Expired purge for owner %s: %s", owner_id, results[owner_id].summary)
    return results
