"""Recycle bin routes.

Endpoints:
    GET   /api/recycle-bin                   Deleted items of every kind
    GET   /api/recycle-bin/snippets          Deleted snippets only
    POST  /api/recycle-bin/restore           Restore one item
    POST  /api/recycle-bin/permanent-delete  Permanently delete one item
    POST  /api/recycle-bin/batch             Restore / purge a selection
    POST  /api/recycle-bin/clear             Purge everything in the bin
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from snipvault.auth.deps import get_current_owner_id
from snipvault.database import get_db, get_session_factory
from snipvault.kinds import EntityKind
from snipvault.schemas.recycle_bin import (
    BatchFailureOut,
    BatchRequest,
    BatchResponse,
    ClearRequest,
    DeletedCategory,
    DeletedFolder,
    DeletedMediaCategory,
    DeletedMediaFile,
    DeletedMediaFolder,
    DeletedSnippet,
    ItemRef,
    RecycleBinResponse,
    TransitionResult,
)
from snipvault.services import lifecycle
from snipvault.services.batch import BatchItem, BatchResult, clear_recycle_bin, run_batch
from snipvault.services.recycle_bin import DeletedEntry, list_recycle_bin

router = APIRouter()


# ── Helpers: build response rows ─────────────────────────────

def _row(schema, entry: DeletedEntry, **counts):
    data = {
        column.key: getattr(entry.entity, column.key)
        for column in entry.entity.__table__.columns
        if column.key in schema.model_fields
    }
    return schema(**data, expires_at=entry.expires_at, **counts)


def _batch_response(result: BatchResult) -> BatchResponse:
    return BatchResponse(
        action=result.action,
        requested=result.requested,
        succeeded=result.succeeded,
        succeeded_items=[
            ItemRef(type=item.kind, id=item.entity_id) for item in result.succeeded_items
        ],
        failed=[
            BatchFailureOut(type=f.kind, id=f.entity_id, reason=f.reason, message=f.message)
            for f in result.failed
        ],
        summary=result.summary,
    )


def _as_naive_utc(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


# ══════════════════════════════════════════════════════════════
# LISTING
# ══════════════════════════════════════════════════════════════

@router.get("", response_model=RecycleBinResponse)
async def get_recycle_bin(
    kinds: list[EntityKind] | None = Query(None),
    owner_id: str = Depends(get_current_owner_id),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    """Everything in the caller's recycle bin, newest deletion first per kind."""
    view = await list_recycle_bin(session_factory, owner_id, kinds)
    return RecycleBinResponse(
        snippets=[_row(DeletedSnippet, e) for e in view.of(EntityKind.SNIPPET)],
        folders=[
            _row(DeletedFolder, e, snippet_count=e.item_count or 0)
            for e in view.of(EntityKind.FOLDER)
        ],
        categories=[
            _row(DeletedCategory, e, snippet_count=e.item_count or 0)
            for e in view.of(EntityKind.CATEGORY)
        ],
        media_files=[_row(DeletedMediaFile, e) for e in view.of(EntityKind.MEDIA_FILE)],
        media_folders=[
            _row(DeletedMediaFolder, e, media_count=e.item_count or 0)
            for e in view.of(EntityKind.MEDIA_FOLDER)
        ],
        media_categories=[
            _row(DeletedMediaCategory, e, media_count=e.item_count or 0)
            for e in view.of(EntityKind.MEDIA_CATEGORY)
        ],
        total_count=view.total_count,
        retention_days=view.retention_days,
    )


@router.get("/snippets", response_model=list[DeletedSnippet])
async def get_deleted_snippets(
    owner_id: str = Depends(get_current_owner_id),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    view = await list_recycle_bin(session_factory, owner_id, [EntityKind.SNIPPET])
    return [_row(DeletedSnippet, e) for e in view.of(EntityKind.SNIPPET)]


# ══════════════════════════════════════════════════════════════
# SINGLE ITEM
# ══════════════════════════════════════════════════════════════

@router.post("/restore", response_model=TransitionResult)
async def restore_item(
    body: ItemRef,
    owner_id: str = Depends(get_current_owner_id),
    db: AsyncSession = Depends(get_db),
):
    """Restore one item. Restoring an item that is already active succeeds."""
    outcome = lifecycle.raise_for_outcome(
        await lifecycle.restore(db, body.type, body.id, owner_id)
    )
    return TransitionResult(id=outcome.entity_id, type=body.type, message=outcome.message)


@router.post("/permanent-delete", response_model=TransitionResult)
async def permanent_delete_item(
    body: ItemRef,
    owner_id: str = Depends(get_current_owner_id),
    db: AsyncSession = Depends(get_db),
):
    """Permanently delete one item from the recycle bin. Cannot be undone."""
    outcome = lifecycle.raise_for_outcome(
        await lifecycle.permanent_delete(db, body.type, body.id, owner_id)
    )
    return TransitionResult(
        id=outcome.entity_id,
        type=body.type,
        message=outcome.message,
        detached_children=outcome.detached_children,
    )


# ══════════════════════════════════════════════════════════════
# BATCH
# ══════════════════════════════════════════════════════════════

@router.post("/batch", response_model=BatchResponse)
async def batch_items(
    body: BatchRequest,
    owner_id: str = Depends(get_current_owner_id),
    db: AsyncSession = Depends(get_db),
):
    """Restore or purge a selection. Partial success is reported, not rolled back."""
    items = [BatchItem(kind=ref.type.value, entity_id=ref.id) for ref in body.items]
    result = await run_batch(db, body.action, items, owner_id)
    return _batch_response(result)


@router.post("/clear", response_model=BatchResponse)
async def clear_bin(
    body: ClearRequest | None = None,
    owner_id: str = Depends(get_current_owner_id),
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    """Permanently delete everything currently in the caller's recycle bin."""
    result = await clear_recycle_bin(
        db, session_factory, owner_id,
        deleted_before=_as_naive_utc(body.deleted_before) if body else None,
    )
    return _batch_response(result)
