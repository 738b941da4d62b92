"""Stored media content items."""

from typing import Any

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, StoredOrderMixin, TimestampMixin


class ContentRecord(Base, StoredOrderMixin, TimestampMixin):
    """An image or video content item."""

    __tablename__ = "content_items"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)

    type: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        index=True,
        comment="Content kind: image or video",
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)

    data: Mapped[dict[str, Any]] = mapped_column(comment="Serialized ImageContent / VideoContent")

    def __repr__(self) -> str:
        return f"<ContentRecord(id={self.id}, type={self.type}, name='{self.name}')>"
