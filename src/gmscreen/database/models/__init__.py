"""SQLAlchemy models for gmscreen."""

from gmscreen.database.models.base import Base, StoredOrderMixin, TimestampMixin
from gmscreen.database.models.character import CharacterRecord
from gmscreen.database.models.content import ContentRecord
from gmscreen.database.models.note import NoteRecord

__all__ = [
    "Base",
    "StoredOrderMixin",
    "TimestampMixin",
    "CharacterRecord",
    "ContentRecord",
    "NoteRecord",
]
