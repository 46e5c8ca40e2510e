"""Snippet — a titled piece of code owned by one user.

May sit in one Folder and one Category. Soft-deleting either container
leaves the snippet active; purging the container detaches it.
"""

from sqlalchemy import Boolean, ForeignKey, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from snipvault.database import Base
from snipvault.models.mixins import OwnedEntityMixin


class Snippet(OwnedEntityMixin, Base):
    __tablename__ = "snippets"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    code: Mapped[str] = mapped_column(Text, nullable=False, default="")
    language: Mapped[str] = mapped_column(String(50), default="plaintext")
    tags: Mapped[list | None] = mapped_column(JSON, default=None)
    is_public: Mapped[bool] = mapped_column(Boolean, default=False)
    is_favorite: Mapped[bool] = mapped_column(Boolean, default=False)

    # ── Containers ───────────────────────────────────────────
    folder_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("folders.id", ondelete="SET NULL"), index=True
    )
    category_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("categories.id", ondelete="SET NULL"), index=True
    )
