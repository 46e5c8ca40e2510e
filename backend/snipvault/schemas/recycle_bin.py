"""Pydantic schemas for the recycle bin API."""

from datetime import datetime

from pydantic import BaseModel, Field

from snipvault.kinds import EntityKind
from snipvault.services.batch import BatchAction
from snipvault.services.lifecycle import TransitionError


# ── Deleted entities ─────────────────────────────────────────

class DeletedItemBase(BaseModel):
    id: str
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime
    expires_at: datetime  # end of the grace period

    model_config = {"from_attributes": True}


class DeletedSnippet(DeletedItemBase):
    title: str
    description: str | None = None
    code: str
    language: str
    tags: list[str] | None = None
    is_public: bool = False
    is_favorite: bool = False
    folder_id: str | None = None
    category_id: str | None = None


class DeletedFolder(DeletedItemBase):
    name: str
    description: str | None = None
    color: str
    icon: str
    snippet_count: int = 0


class DeletedCategory(DeletedItemBase):
    name: str
    description: str | None = None
    color: str
    background: str | None = None
    icon: str
    is_default: bool = False
    sort_order: int = 0
    snippet_count: int = 0


class DeletedMediaFile(DeletedItemBase):
    file_name: str
    title: str | None = None
    file_type: str
    file_url: str
    file_size: int
    media_folder_id: str | None = None
    category_id: str | None = None


class DeletedMediaFolder(DeletedItemBase):
    name: str
    color: str
    media_count: int = 0


class DeletedMediaCategory(DeletedItemBase):
    name: str
    color: str
    media_count: int = 0


class RecycleBinResponse(BaseModel):
    snippets: list[DeletedSnippet] = []
    folders: list[DeletedFolder] = []
    categories: list[DeletedCategory] = []
    media_files: list[DeletedMediaFile] = []
    media_folders: list[DeletedMediaFolder] = []
    media_categories: list[DeletedMediaCategory] = []
    total_count: int
    retention_days: int


# ── Active entities ──────────────────────────────────────────

class ActiveItem(BaseModel):
    """Lightweight row for the active listing of any kind."""

    id: str
    type: EntityKind
    label: str
    created_at: datetime
    updated_at: datetime


# ── Single-entity transitions ────────────────────────────────

class ItemRef(BaseModel):
    type: EntityKind
    id: str = Field(..., min_length=1, max_length=64)


class TransitionResult(BaseModel):
    id: str
    type: EntityKind
    message: str
    deleted_at: datetime | None = None
    detached_children: int = 0


# ── Batch ────────────────────────────────────────────────────

class BatchRequest(BaseModel):
    action: BatchAction
    items: list[ItemRef] = Field(..., min_length=1)


class BatchFailureOut(BaseModel):
    type: str
    id: str
    reason: TransitionError
    message: str


class BatchResponse(BaseModel):
    action: BatchAction
    requested: int
    succeeded: int
    succeeded_items: list[ItemRef]
    failed: list[BatchFailureOut]
    summary: str


class ClearRequest(BaseModel):
    # Only purge items deleted at or before this instant
    deleted_before: datetime | None = None
