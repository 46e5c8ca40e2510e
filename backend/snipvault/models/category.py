from sqlalchemy import Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from snipvault.database import Base
from snipvault.models.mixins import OwnedEntityMixin


class Category(OwnedEntityMixin, Base):
    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    color: Mapped[str] = mapped_column(String(20), default="#3b82f6")
    background: Mapped[str | None] = mapped_column(String(50))
    icon: Mapped[str] = mapped_column(String(50), default="tag")
    is_default: Mapped[bool] = mapped_column(Boolean, default=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0)
