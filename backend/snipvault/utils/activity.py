"""Lightweight helper for recording activity log entries.

Usage:
    await log_activity(
        db, owner_id, action="restored", entity_type="snippet",
        entity_id=snippet_id, summary="Restored snippet",
    )

The row is added to the current session and committed with the
enclosing transaction; no extra flush is performed.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from snipvault.models.activity_log import ActivityLog


async def log_activity(
    db: AsyncSession,
    owner_id: str,
    *,
    action: str,
    entity_type: str,
    entity_id: str | None = None,
    summary: str | None = None,
    details: dict | None = None,
) -> None:
    """Append an activity log entry to the current DB session."""
    entry = ActivityLog(
        owner_id=owner_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        summary=summary,
        details=details,
    )
    db.add(entry)
