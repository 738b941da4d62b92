"""Backup export and restore.

A backup is a JSON envelope holding a verbatim snapshot of the character,
content and note stores, stamped with a format version and an ISO-8601
timestamp.
"""

from collections.abc import Iterable
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from gmscreen.config import get_settings
from gmscreen.exceptions import InvalidBackupFormat

from .character.sheet import DerivedCharacter
from .content import ContentItem, ImageContent, VideoContent
from .notes import GMNote

if TYPE_CHECKING:
    from gmscreen.database.stores import CharacterStore, ContentStore, NoteStore

logger = structlog.get_logger(__name__)


class BackupEnvelope(BaseModel):
    """The exported backup document."""

    model_config = ConfigDict(populate_by_name=True)

    version: str = Field(..., min_length=1)
    timestamp: str = Field(..., description="ISO-8601 time the backup was taken")
    characters: list[DerivedCharacter]
    content: list[ContentItem]
    gm_notes: list[GMNote] = Field(..., alias="gmNotes")

    def backup_filename(self) -> str:
        """Suggested file name, e.g. ``pf2e-data-export-2024-05-01.json``."""
        return f"pf2e-data-export-{self.timestamp[:10]}.json"


def export_backup(
    characters: Iterable[DerivedCharacter],
    content: Iterable[ImageContent | VideoContent],
    notes: Iterable[GMNote],
) -> BackupEnvelope:
    """Snapshot the given collections into a new envelope."""
    return BackupEnvelope(
        version=get_settings().backup_version,
        timestamp=datetime.now(UTC).isoformat(),
        characters=list(characters),
        content=list(content),
        gm_notes=list(notes),
    )


async def export_stores(
    characters: "CharacterStore", content: "ContentStore", notes: "NoteStore"
) -> BackupEnvelope:
    """Snapshot the current contents of three stores."""
    return export_backup(
        await characters.get_all(), await content.get_all(), await notes.get_all()
    )


def dump_backup(envelope: BackupEnvelope) -> str:
    """Serialize an envelope to pretty-printed JSON."""
    return envelope.model_dump_json(by_alias=True, indent=2)


def load_backup(text: str) -> BackupEnvelope:
    """
    Parse a backup document.

    Raises:
        InvalidBackupFormat: If the text is not JSON or lacks the version,
            characters, content or gmNotes sections
    """
    try:
        return BackupEnvelope.model_validate_json(text)
    except ValidationError as e:
        raise InvalidBackupFormat(f"Invalid export format: {e}") from e


async def restore_backup(
    envelope: BackupEnvelope,
    characters: "CharacterStore",
    content: "ContentStore",
    notes: "NoteStore",
    replace: bool = True,
) -> None:
    """
    Load an envelope's collections into the stores.

    Args:
        envelope: Backup to restore
        characters: Character store to fill
        content: Content store to fill
        notes: Note store to fill
        replace: Clear the stores first. When False, entries are merged by id.
    """
    if replace:
        await characters.clear()
        await content.clear()
        await notes.clear()

    for character in envelope.characters:
        await characters.add(character)
    for item in envelope.content:
        await content.add(item)
    for note in envelope.gm_notes:
        await notes.add(note)

    logger.info(
        "backup_restored",
        version=envelope.version,
        timestamp=envelope.timestamp,
        characters=len(envelope.characters),
        content=len(envelope.content),
        notes=len(envelope.gm_notes),
        replace=replace,
    )
