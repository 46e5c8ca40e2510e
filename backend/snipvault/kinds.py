"""Entity kinds the recycle bin manages, and how each maps onto the store.

Every ``EntityKind`` is bound to exactly one ``KindSpec``. Adding a kind
means adding an enum member and a registry entry; ``get_kind_spec`` refuses
any kind without one, and the module fails to import if the two drift apart.
"""

import enum
from dataclasses import dataclass, field

from snipvault.database import Base
from snipvault.models.category import Category
from snipvault.models.folder import Folder
from snipvault.models.media import MediaCategory, MediaFile, MediaFolder
from snipvault.models.snippet import Snippet


class EntityKind(str, enum.Enum):
    SNIPPET = "snippet"
    FOLDER = "folder"
    CATEGORY = "category"
    MEDIA_FILE = "media-file"
    MEDIA_FOLDER = "media-folder"
    MEDIA_CATEGORY = "media-category"


@dataclass(frozen=True)
class ChildLink:
    """Child rows that point at a container through ``fk_column``."""

    model: type[Base]
    fk_column: str

    @property
    def column(self):
        return getattr(self.model, self.fk_column)


@dataclass(frozen=True)
class KindSpec:
    kind: EntityKind
    model: type[Base]
    label: str
    children: tuple[ChildLink, ...] = field(default_factory=tuple)

    @property
    def is_container(self) -> bool:
        return bool(self.children)


KIND_REGISTRY: dict[EntityKind, KindSpec] = {
    EntityKind.SNIPPET: KindSpec(EntityKind.SNIPPET, Snippet, "Snippet"),
    EntityKind.FOLDER: KindSpec(
        EntityKind.FOLDER, Folder, "Folder",
        children=(ChildLink(Snippet, "folder_id"),),
    ),
    EntityKind.CATEGORY: KindSpec(
        EntityKind.CATEGORY, Category, "Category",
        children=(ChildLink(Snippet, "category_id"),),
    ),
    EntityKind.MEDIA_FILE: KindSpec(EntityKind.MEDIA_FILE, MediaFile, "Media file"),
    EntityKind.MEDIA_FOLDER: KindSpec(
        EntityKind.MEDIA_FOLDER, MediaFolder, "Media folder",
        children=(ChildLink(MediaFile, "media_folder_id"),),
    ),
    EntityKind.MEDIA_CATEGORY: KindSpec(
        EntityKind.MEDIA_CATEGORY, MediaCategory, "Media category",
        children=(ChildLink(MediaFile, "category_id"),),
    ),
}

_unregistered = set(EntityKind) - set(KIND_REGISTRY)
if _unregistered:
    raise RuntimeError(
        f"Entity kinds without a KindSpec: {', '.join(sorted(k.value for k in _unregistered))}"
    )


def get_kind_spec(kind: EntityKind) -> KindSpec:
    return KIND_REGISTRY[EntityKind(kind)]
