"""Stored GM notes."""

from typing import Any

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, StoredOrderMixin, TimestampMixin


class NoteRecord(Base, StoredOrderMixin, TimestampMixin):
    """A GM note."""

    __tablename__ = "gm_notes"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)

    title: Mapped[str] = mapped_column(String(200), nullable=False)

    category: Mapped[str | None] = mapped_column(
        String(20),
        nullable=True,
        index=True,
        comment="Note category value, if any",
    )

    # GMNote.model_dump(mode="json"), keeps the note's own timestamps
    data: Mapped[dict[str, Any]] = mapped_column()

    def __repr__(self) -> str:
        return f"<NoteRecord(id={self.id}, title='{self.title}')>"
