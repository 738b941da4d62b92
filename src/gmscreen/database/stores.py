"""
Repositories for characters, content and notes.

The derivation engine never touches storage; callers inject one of these
stores wherever persistence is needed. Each store comes in two flavours:
an in-memory store (tests, scratch sessions) and a SQLAlchemy store bound to
an AsyncSession. Both list items in the order they were first added;
re-adding an existing id replaces the item in place.
"""

from collections.abc import Iterable
from typing import Any, Generic, Protocol, TypeVar

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from gmscreen.game.character.sheet import DerivedCharacter
from gmscreen.game.content import ImageContent, VideoContent, content_adapter
from gmscreen.game.notes import GMNote, NoteCategory, notes_in_category, search_notes

from .models import CharacterRecord, ContentRecord, NoteRecord

logger = structlog.get_logger(__name__)

Content = ImageContent | VideoContent

T = TypeVar("T")


class CharacterStore(Protocol):
    """Persistence interface for derived characters."""

    async def get_all(self) -> list[DerivedCharacter]: ...

    async def add(self, character: DerivedCharacter) -> None: ...

    async def remove(self, character_id: str) -> bool: ...

    async def find_by_id(self, character_id: str) -> DerivedCharacter | None: ...

    async def clear(self) -> None: ...


class ContentStore(Protocol):
    """Persistence interface for content items."""

    async def get_all(self) -> list[Content]: ...

    async def add(self, item: Content) -> None: ...

    async def remove(self, item_id: str) -> bool: ...

    async def find_by_id(self, item_id: str) -> Content | None: ...

    async def clear(self) -> None: ...


class NoteStore(Protocol):
    """Persistence interface for GM notes."""

    async def get_all(self) -> list[GMNote]: ...

    async def add(self, note: GMNote) -> None: ...

    async def remove(self, note_id: str) -> bool: ...

    async def find_by_id(self, note_id: str) -> GMNote | None: ...

    async def update(self, note_id: str, **changes: Any) -> GMNote | None: ...

    async def by_category(self, category: NoteCategory | str) -> list[GMNote]: ...

    async def search(self, query: str) -> list[GMNote]: ...

    async def clear(self) -> None: ...


class _InMemoryStore(Generic[T]):
    """Dict-backed store keyed by each item's ``id``."""

    def __init__(self, items: Iterable[T] = ()) -> None:
        self._items: dict[str, T] = {}
        for item in items:
            self._items[item.id] = item  # type: ignore[attr-defined]

    async def get_all(self) -> list[T]:
        return list(self._items.values())

    async def add(self, item: T) -> None:
        self._items[item.id] = item  # type: ignore[attr-defined]

    async def remove(self, item_id: str) -> bool:
        return self._items.pop(item_id, None) is not None

    async def find_by_id(self, item_id: str) -> T | None:
        return self._items.get(item_id)

    async def clear(self) -> None:
        self._items.clear()


class InMemoryCharacterStore(_InMemoryStore[DerivedCharacter]):
    """Characters held in memory."""


class InMemoryContentStore(_InMemoryStore[Content]):
    """Content items held in memory."""


class InMemoryNoteStore(_InMemoryStore[GMNote]):
    """Notes held in memory."""

    async def update(self, note_id: str, **changes: Any) -> GMNote | None:
        note = self._items.get(note_id)
        if note is None:
            return None
        revised = note.revise(**changes)
        self._items[note_id] = revised
        return revised

    async def by_category(self, category: NoteCategory | str) -> list[GMNote]:
        return notes_in_category(self._items.values(), category)

    async def search(self, query: str) -> list[GMNote]:
        return search_notes(self._items.values(), query)


async def _next_seq(session: AsyncSession, model: type[Any]) -> int:
    result = await session.execute(select(func.coalesce(func.max(model.seq), 0)))
    return result.scalar_one() + 1


async def _store_row(
    session: AsyncSession, model: type[Any], row_id: str, **values: Any
) -> None:
    """Insert a row at the end of its store, or rewrite it in place."""
    record = await session.get(model, row_id)
    if record is None:
        record = model(id=row_id, seq=await _next_seq(session, model), **values)
        session.add(record)
    else:
        for key, value in values.items():
            setattr(record, key, value)
    await session.flush()


async def _delete_row(session: AsyncSession, model: type[Any], row_id: str) -> bool:
    record = await session.get(model, row_id)
    if record is None:
        return False
    await session.delete(record)
    await session.flush()
    return True


class SqlCharacterStore:
    """
    Characters stored in the ``characters`` table.

    Args:
        session: Session to work in; the caller owns commit/rollback
            (see ``get_session``)
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_all(self) -> list[DerivedCharacter]:
        result = await self.session.execute(select(CharacterRecord).order_by(CharacterRecord.seq))
        return [DerivedCharacter.model_validate(row.sheet) for row in result.scalars()]

    async def add(self, character: DerivedCharacter) -> None:
        await _store_row(
            self.session,
            CharacterRecord,
            character.id,
            name=character.name,
            class_name=character.class_name,
            level=character.level,
            sheet=character.model_dump(mode="json"),
        )
        logger.debug("character_stored", character_id=character.id, name=character.name)

    async def remove(self, character_id: str) -> bool:
        return await _delete_row(self.session, CharacterRecord, character_id)

    async def find_by_id(self, character_id: str) -> DerivedCharacter | None:
        record = await self.session.get(CharacterRecord, character_id)
        return DerivedCharacter.model_validate(record.sheet) if record else None

    async def clear(self) -> None:
        await self.session.execute(delete(CharacterRecord))
        await self.session.flush()


class SqlContentStore:
    """Content items stored in the ``content_items`` table."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_all(self) -> list[Content]:
        result = await self.session.execute(select(ContentRecord).order_by(ContentRecord.seq))
        return [content_adapter.validate_python(row.data) for row in result.scalars()]

    async def add(self, item: Content) -> None:
        await _store_row(
            self.session,
            ContentRecord,
            item.id,
            type=item.type,
            name=item.name,
            data=item.model_dump(mode="json"),
        )

    async def remove(self, item_id: str) -> bool:
        return await _delete_row(self.session, ContentRecord, item_id)

    async def find_by_id(self, item_id: str) -> Content | None:
        record = await self.session.get(ContentRecord, item_id)
        return content_adapter.validate_python(record.data) if record else None

    async def clear(self) -> None:
        await self.session.execute(delete(ContentRecord))
        await self.session.flush()


class SqlNoteStore:
    """GM notes stored in the ``gm_notes`` table."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_all(self) -> list[GMNote]:
        result = await self.session.execute(select(NoteRecord).order_by(NoteRecord.seq))
        return [GMNote.model_validate(row.data) for row in result.scalars()]

    async def add(self, note: GMNote) -> None:
        await _store_row(
            self.session,
            NoteRecord,
            note.id,
            title=note.title,
            category=note.category.value if note.category else None,
            data=note.model_dump(mode="json"),
        )

    async def remove(self, note_id: str) -> bool:
        return await _delete_row(self.session, NoteRecord, note_id)

    async def find_by_id(self, note_id: str) -> GMNote | None:
        record = await self.session.get(NoteRecord, note_id)
        return GMNote.model_validate(record.data) if record else None

    async def update(self, note_id: str, **changes: Any) -> GMNote | None:
        note = await self.find_by_id(note_id)
        if note is None:
            return None
        revised = note.revise(**changes)
        await self.add(revised)
        return revised

    async def by_category(self, category: NoteCategory | str) -> list[GMNote]:
        """Notes filed under one category."""
        category = NoteCategory(category)
        result = await self.session.execute(
            select(NoteRecord)
            .where(NoteRecord.category == category.value)
            .order_by(NoteRecord.seq)
        )
        return [GMNote.model_validate(row.data) for row in result.scalars()]

    async def clear(self) -> None:
        await self.session.execute(delete(NoteRecord))
        await self.session.flush()

    async def search(self, query: str) -> list[GMNote]:
        """Notes whose title, content or tags contain ``query``."""
        return search_notes(await self.get_all(), query)
