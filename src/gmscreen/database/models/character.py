"""Stored derived character sheets."""

from typing import Any

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, StoredOrderMixin, TimestampMixin


class CharacterRecord(Base, StoredOrderMixin, TimestampMixin):
    """A derived character sheet, stored whole as JSON.

    The sheet is re-derived rather than edited, so only the columns used for
    listing are broken out.
    """

    __tablename__ = "characters"

    id: Mapped[str] = mapped_column(
        String(200),
        primary_key=True,
        comment="Derived character identifier",
    )

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True,
        comment="Character name (duplicates are filtered at import time)",
    )

    class_name: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="Character class",
    )

    level: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Character level",
    )

    # Full DerivedCharacter.model_dump(mode="json")
    sheet: Mapped[dict[str, Any]] = mapped_column(comment="Derived character sheet")

    def __repr__(self) -> str:
        """String representation of CharacterRecord."""
        return f"<CharacterRecord(id={self.id}, name='{self.name}', level={self.level})>"
