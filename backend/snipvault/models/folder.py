from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from snipvault.database import Base
from snipvault.models.mixins import OwnedEntityMixin


class Folder(OwnedEntityMixin, Base):
    __tablename__ = "folders"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    color: Mapped[str] = mapped_column(String(20), default="#3b82f6")
    icon: Mapped[str] = mapped_column(String(50), default="folder")
