"""Persistence for gmscreen: async SQLAlchemy engine, ORM rows and stores."""

from gmscreen.database.engine import close_db, get_engine, get_session, init_db
from gmscreen.database.stores import (
    CharacterStore,
    ContentStore,
    InMemoryCharacterStore,
    InMemoryContentStore,
    InMemoryNoteStore,
    NoteStore,
    SqlCharacterStore,
    SqlContentStore,
    SqlNoteStore,
)

__all__ = [
    "CharacterStore",
    "ContentStore",
    "InMemoryCharacterStore",
    "InMemoryContentStore",
    "InMemoryNoteStore",
    "NoteStore",
    "SqlCharacterStore",
    "SqlContentStore",
    "SqlNoteStore",
    "close_db",
    "get_engine",
    "get_session",
    "init_db",
]
