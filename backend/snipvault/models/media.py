"""Media library — uploaded files, plus the folders and categories that
organize them. Parallel to Snippet / Folder / Category.
"""

from sqlalchemy import BigInteger, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from snipvault.database import Base
from snipvault.models.mixins import OwnedEntityMixin


class MediaFolder(OwnedEntityMixin, Base):
    __tablename__ = "media_folders"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    color: Mapped[str] = mapped_column(String(20), default="#3b82f6")


class MediaCategory(OwnedEntityMixin, Base):
    __tablename__ = "media_categories"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    color: Mapped[str] = mapped_column(String(20), default="#3b82f6")


class MediaFile(OwnedEntityMixin, Base):
    __tablename__ = "media_files"

    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    title: Mapped[str | None] = mapped_column(String(255))
    file_type: Mapped[str] = mapped_column(String(100), nullable=False)
    # Storage location; the bytes themselves are not managed here
    file_url: Mapped[str] = mapped_column(String(1000), nullable=False)
    file_size: Mapped[int] = mapped_column(BigInteger, default=0)

    # ── Containers ───────────────────────────────────────────
    media_folder_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("media_folders.id", ondelete="SET NULL"), index=True
    )
    category_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("media_categories.id", ondelete="SET NULL"), index=True
    )
