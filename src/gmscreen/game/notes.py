"""Game master notes."""

import uuid
from collections.abc import Iterable
from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class NoteCategory(Enum):
    """Categories a GM note can be filed under."""

    SESSION = "session"
    CAMPAIGN = "campaign"
    NPC = "npc"
    LOCATION = "location"
    PLOT = "plot"
    OTHER = "other"


def _now() -> datetime:
    return datetime.now(UTC)


class GMNote(BaseModel):
    """
    A free-form note.

    Attributes:
        id: Unique note identifier (``note-<hex>``)
        title: Note title
        content: Note body (rich text from the editor, stored verbatim)
        category: Optional category
        tags: Free-form tags
        created_at: Creation time
        updated_at: Last modification time
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: f"note-{uuid.uuid4().hex}")
    title: str
    content: str = ""
    category: NoteCategory | None = None
    tags: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)

    def matches(self, query: str) -> bool:
        """Case-insensitive search over title, content and tags."""
        term = query.strip().lower()
        return (
            term in self.title.lower()
            or term in self.content.lower()
            or any(term in tag.lower() for tag in self.tags)
        )

    def revise(self, **changes: object) -> "GMNote":
        """Return a copy with ``changes`` applied and ``updated_at`` bumped.

        ``id`` and ``created_at`` cannot be changed.
        """
        changes.pop("id", None)
        changes.pop("created_at", None)
        data = self.model_dump()
        data.update(changes)
        data["updated_at"] = _now()
        return GMNote.model_validate(data)


def new_note(
    title: str,
    content: str = "",
    category: NoteCategory | str | None = None,
    tags: Iterable[str] = (),
) -> GMNote:
    """Create a new note with a fresh id and timestamps."""
    now = _now()
    return GMNote(
        title=title,
        content=content,
        category=NoteCategory(category) if category is not None else None,
        tags=list(tags),
        created_at=now,
        updated_at=now,
    )


def search_notes(notes: Iterable[GMNote], query: str) -> list[GMNote]:
    """Filter notes matching ``query``."""
    return [note for note in notes if note.matches(query)]


def notes_in_category(notes: Iterable[GMNote], category: NoteCategory | str) -> list[GMNote]:
    """Filter notes filed under ``category``."""
    category = NoteCategory(category)
    return [note for note in notes if note.category is category]
