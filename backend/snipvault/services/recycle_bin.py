"""One owner's deleted entities across every kind.

Each kind is read in its own session so the queries can run concurrently.
A failing kind does not hide the others' errors: every failed kind is
collected and reported together, so a retry can target just those kinds.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from snipvault.config import settings
from snipvault.kinds import EntityKind, KindSpec, get_kind_spec
from snipvault.middleware.exceptions import RecycleBinFetchError, StoreUnavailableError
from snipvault.services.store import EntityStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeletedEntry:
    entity: object
    deleted_at: datetime
    expires_at: datetime
    item_count: int | None = None


@dataclass
class RecycleBinView:
    entries: dict[EntityKind, list[DeletedEntry]] = field(default_factory=dict)
    retention_days: int = 30

    def of(self, kind: EntityKind) -> list[DeletedEntry]:
        return self.entries.get(kind, [])

    @property
    def total_count(self) -> int:
        return sum(len(items) for items in self.entries.values())

    def refs(self) -> list[tuple[EntityKind, str]]:
        """Every listed ``(kind, id)``, newest deletion first within each kind."""
        return [
            (kind, entry.entity.id)
            for kind, items in self.entries.items()
            for entry in items
        ]


async def _fetch_kind(
    session_factory: async_sessionmaker[AsyncSession],
    spec: KindSpec,
    owner_id: str,
    retention: timedelta,
    deleted_before: datetime | None,
) -> list[DeletedEntry]:
    async with session_factory() as session:
        rows = await EntityStore(session, owner_id).list_deleted(
            spec, deleted_before=deleted_before
        )
    return [
        DeletedEntry(
            entity=entity,
            deleted_at=entity.deleted_at,
            expires_at=entity.deleted_at + retention,
            item_count=count,
        )
        for entity, count in rows
    ]


async def list_recycle_bin(
    session_factory: async_sessionmaker[AsyncSession],
    owner_id: str,
    kinds: list[EntityKind] | None = None,
    *,
    deleted_before: datetime | None = None,
) -> RecycleBinView:
    """Collect the owner's deleted entities, newest deletion first per kind.

    Raises RecycleBinFetchError naming every kind whose read failed.
    """
    selected = list(dict.fromkeys(kinds)) if kinds else list(EntityKind)
    retention_days = settings.recycle_bin_retention_days
    retention = timedelta(days=retention_days)

    results = await asyncio.gather(
        *(
            _fetch_kind(session_factory, get_kind_spec(kind), owner_id, retention, deleted_before)
            for kind in selected
        ),
        return_exceptions=True,
    )

    view = RecycleBinView(retention_days=retention_days)
    failed: list[str] = []
    for kind, result in zip(selected, results):
        if isinstance(result, (StoreUnavailableError, SQLAlchemyError)):
            logger.error(
                "Failed to fetch deleted %s for owner %s: %s", kind.value, owner_id, result,
            )
            failed.append(kind.value)
        elif isinstance(result, BaseException):
            raise result
        else:
            view.entries[kind] = result

    if failed:
        raise RecycleBinFetchError(failed)
    return view
