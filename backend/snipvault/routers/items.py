"""Owner-scoped entity routes: active listing and soft delete.

Endpoints:
    GET   /api/items/{kind}                        List active items of a kind
    POST  /api/items/{kind}/{item_id}/soft-delete  Move an item to the recycle bin
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from snipvault.auth.deps import get_current_owner_id
from snipvault.database import get_db
from snipvault.kinds import EntityKind, KindSpec, get_kind_spec
from snipvault.schemas.common import PaginatedResponse
from snipvault.schemas.recycle_bin import ActiveItem, TransitionResult
from snipvault.services import lifecycle
from snipvault.services.store import EntityStore

router = APIRouter()


def _label(spec: KindSpec, entity) -> str:
    if spec.kind is EntityKind.SNIPPET:
        return entity.title
    if spec.kind is EntityKind.MEDIA_FILE:
        return entity.title or entity.file_name
    return entity.name


@router.get("/{kind}", response_model=PaginatedResponse[ActiveItem])
async def list_active_items(
    kind: EntityKind,
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    owner_id: str = Depends(get_current_owner_id),
    db: AsyncSession = Depends(get_db),
):
    spec = get_kind_spec(kind)
    items = await EntityStore(db, owner_id).list_active(spec, limit=limit, offset=offset)
    return PaginatedResponse(
        items=[
            ActiveItem(
                id=item.id,
                type=spec.kind,
                label=_label(spec, item),
                created_at=item.created_at,
                updated_at=item.updated_at,
            )
            for item in items
        ],
        limit=limit,
        offset=offset,
    )


@router.post("/{kind}/{item_id}/soft-delete", response_model=TransitionResult)
async def soft_delete_item(
    kind: EntityKind,
    item_id: str,
    owner_id: str = Depends(get_current_owner_id),
    db: AsyncSession = Depends(get_db),
):
    """Move an item to the recycle bin. Fails with 409 if it is already there."""
    outcome = lifecycle.raise_for_outcome(
        await lifecycle.soft_delete(db, kind, item_id, owner_id)
    )
    return TransitionResult(
        id=outcome.entity_id,
        type=kind,
        message=outcome.message,
        deleted_at=outcome.deleted_at,
    )
