"""Lifecycle transitioners: soft delete, restore, permanent delete.

Each transitioner moves one entity one step along

    active ──soft_delete──▶ deleted ──permanent_delete──▶ (row gone)
       ▲                       │
       └────────restore────────┘

and returns a ``TransitionOutcome`` instead of raising, so single-entity
endpoints can map it onto an HTTP error and the batch orchestrator can
record it and move on.

Transitioners never commit; the caller owns the transaction.
"""

import enum
import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from snipvault.kinds import EntityKind, KindSpec, get_kind_spec
from snipvault.middleware.exceptions import (
    InvalidRequestError,
    PreconditionFailedError,
    ResourceNotFoundError,
    SnipVaultException,
    StoreUnavailableError,
)
from snipvault.services.store import EntityStore
from snipvault.utils.activity import log_activity

logger = logging.getLogger(__name__)


class TransitionError(str, enum.Enum):
    INVALID_REQUEST = "invalid_request"
    NOT_FOUND = "not_found"
    PRECONDITION_FAILED = "precondition_failed"
    STORE_UNAVAILABLE = "store_unavailable"


@dataclass(frozen=True)
class TransitionOutcome:
    kind: str
    entity_id: str
    error: TransitionError | None = None
    message: str = ""
    deleted_at: datetime | None = None
    detached_children: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def retryable(self) -> bool:
        return self.error is TransitionError.STORE_UNAVAILABLE


def _resolve(kind: str | EntityKind, entity_id: str) -> KindSpec | TransitionOutcome:
    try:
        spec = get_kind_spec(kind)
    except (KeyError, ValueError):
        return TransitionOutcome(
            kind=str(kind), entity_id=entity_id or "",
            error=TransitionError.INVALID_REQUEST,
            message=f"Invalid type '{kind}'. Must be one of: {', '.join(k.value for k in EntityKind)}",
        )
    if not entity_id or not entity_id.strip():
        return TransitionOutcome(
            kind=spec.kind.value, entity_id="",
            error=TransitionError.INVALID_REQUEST,
            message="Type and ID are required",
        )
    return spec


def _store_failure(spec: KindSpec, entity_id: str, exc: StoreUnavailableError) -> TransitionOutcome:
    return TransitionOutcome(
        kind=spec.kind.value, entity_id=entity_id,
        error=TransitionError.STORE_UNAVAILABLE, message=exc.message,
    )


async def soft_delete(
    db: AsyncSession,
    kind: str | EntityKind,
    entity_id: str,
    owner_id: str,
    *,
    now: datetime | None = None,
) -> TransitionOutcome:
    """Move an active entity into the recycle bin. Children are left untouched."""
    resolved = _resolve(kind, entity_id)
    if isinstance(resolved, TransitionOutcome):
        return resolved
    spec = resolved
    now = now or datetime.utcnow()

    try:
        moved = await EntityStore(db, owner_id).mark_deleted(spec, entity_id, now)
    except StoreUnavailableError as exc:
        return _store_failure(spec, entity_id, exc)

    if not moved:
        logger.warning(
            "Soft delete refused: %s %s (owner %s) not found or already deleted",
            spec.kind.value, entity_id, owner_id,
        )
        return TransitionOutcome(
            kind=spec.kind.value, entity_id=entity_id,
            error=TransitionError.PRECONDITION_FAILED,
            message=f"{spec.label} not found or already deleted",
        )

    await log_activity(
        db, owner_id, action="deleted", entity_type=spec.kind.value,
        entity_id=entity_id, summary=f"Moved {spec.label.lower()} to recycle bin",
    )
    logger.info("Soft deleted %s %s (owner %s)", spec.kind.value, entity_id, owner_id)
    return TransitionOutcome(
        kind=spec.kind.value, entity_id=entity_id,
        message=f"{spec.label} moved to recycle bin", deleted_at=now,
    )


async def restore(
    db: AsyncSession,
    kind: str | EntityKind,
    entity_id: str,
    owner_id: str,
    *,
    now: datetime | None = None,
) -> TransitionOutcome:
    """Bring an entity back from the recycle bin. Restoring an active entity succeeds."""
    resolved = _resolve(kind, entity_id)
    if isinstance(resolved, TransitionOutcome):
        return resolved
    spec = resolved
    now = now or datetime.utcnow()

    store = EntityStore(db, owner_id)
    existing = None
    try:
        moved = await store.clear_deleted(spec, entity_id, now)
        if not moved:
            existing = await store.get(spec, entity_id)
    except StoreUnavailableError as exc:
        return _store_failure(spec, entity_id, exc)

    if not moved and existing is not None:
        # Active when the guarded update ran; nothing to restore or audit
        return TransitionOutcome(
            kind=spec.kind.value, entity_id=entity_id,
            message=f"{spec.label} is already active",
        )

    if not moved:
        logger.warning(
            "Restore refused: %s %s (owner %s) not found",
            spec.kind.value, entity_id, owner_id,
        )
        return TransitionOutcome(
            kind=spec.kind.value, entity_id=entity_id,
            error=TransitionError.NOT_FOUND,
            message=f"{spec.label} not found",
        )

    await log_activity(
        db, owner_id, action="restored", entity_type=spec.kind.value,
        entity_id=entity_id, summary=f"Restored {spec.label.lower()}",
    )
    logger.info("Restored %s %s (owner %s)", spec.kind.value, entity_id, owner_id)
    return TransitionOutcome(
        kind=spec.kind.value, entity_id=entity_id,
        message=f"{spec.label} restored successfully",
    )


async def permanent_delete(
    db: AsyncSession,
    kind: str | EntityKind,
    entity_id: str,
    owner_id: str,
    *,
    deleted_before: datetime | None = None,
) -> TransitionOutcome:
    """Erase a deleted entity. Active entities are refused, never purged.

    With ``deleted_before`` only an entity deleted at or before that instant
    is erased; one deleted again since is refused like an active one.

    Containers have their children detached afterwards; the children
    themselves stay active.
    """
    resolved = _resolve(kind, entity_id)
    if isinstance(resolved, TransitionOutcome):
        return resolved
    spec = resolved
    store = EntityStore(db, owner_id)
    still_there = None
    detached = 0

    try:
        removed = await store.remove_deleted(spec, entity_id, deleted_before=deleted_before)
        if not removed:
            still_there = await store.get(spec, entity_id)
        else:
            detached = await store.detach_children(spec, entity_id)
    except StoreUnavailableError as exc:
        return _store_failure(spec, entity_id, exc)

    if not removed:
        if still_there is not None:
            if still_there.deleted_at is None:
                reason = "is still active"
                message = f"{spec.label} is not in the recycle bin; move it there first"
            else:
                reason = f"was deleted after {deleted_before}"
                message = f"{spec.label} was deleted again and is still within its grace period"
            logger.warning(
                "Permanent delete refused: %s %s (owner %s) %s",
                spec.kind.value, entity_id, owner_id, reason,
            )
            return TransitionOutcome(
                kind=spec.kind.value, entity_id=entity_id,
                error=TransitionError.PRECONDITION_FAILED,
                message=message,
            )
        return TransitionOutcome(
            kind=spec.kind.value, entity_id=entity_id,
            error=TransitionError.NOT_FOUND,
            message=f"{spec.label} not found",
        )

    summary = f"Permanently deleted {spec.label.lower()}"
    if detached:
        summary += f" and unlinked {detached} item(s)"
    await log_activity(
        db, owner_id, action="purged", entity_type=spec.kind.value,
        entity_id=entity_id, summary=summary,
    )
    logger.info(
        "Purged %s %s (owner %s), detached %d child row(s)",
        spec.kind.value, entity_id, owner_id, detached,
    )
    return TransitionOutcome(
        kind=spec.kind.value, entity_id=entity_id,
        message=summary, detached_children=detached,
    )


def raise_for_outcome(outcome: TransitionOutcome) -> TransitionOutcome:
    """Turn a failed outcome into the matching application exception."""
    if outcome.ok:
        return outcome

    exc: SnipVaultException
    if outcome.error is TransitionError.INVALID_REQUEST:
        exc = InvalidRequestError(outcome.message)
    elif outcome.error is TransitionError.NOT_FOUND:
        exc = ResourceNotFoundError(get_kind_spec(outcome.kind).label, outcome.entity_id)
    elif outcome.error is TransitionError.PRECONDITION_FAILED:
        exc = PreconditionFailedError(outcome.message)
    else:
        exc = StoreUnavailableError(outcome.message)
    raise exc
