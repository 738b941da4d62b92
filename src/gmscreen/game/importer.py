"""Character import workflow.

Pasted text may hold one Pathbuilder export or several, one JSON object per
line. Every record is derived independently: a bad record is reported and
skipped, never aborting the rest of the batch. Characters whose name is
already taken are skipped as duplicates.
"""

import json
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import structlog

from gmscreen.exceptions import InvalidImportFormat

from .character.derivation import derive_character
from .character.sheet import DerivedCharacter

if TYPE_CHECKING:
    from gmscreen.database.stores import CharacterStore

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ImportFailure:
    """A record that could not be imported.

    Attributes:
        index: 1-based position of the record in the input
        name: Character name from the record, if one could be read
        message: Why the record was rejected
    """

    index: int
    name: str | None
    message: str

    def __str__(self) -> str:
        label = f"record {self.index}"
        if self.name:
            label += f" ('{self.name}')"
        return f"{label}: {self.message}"


@dataclass
class ImportReport:
    """Outcome of importing a batch of records."""

    imported: list[DerivedCharacter] = field(default_factory=list)
    skipped_duplicates: list[str] = field(default_factory=list)
    failures: list[ImportFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def raise_for_failures(self) -> None:
        """Raise one InvalidImportFormat naming every failed record, if any failed."""
        if not self.failures:
            return
        details = "; ".join(str(failure) for failure in self.failures)
        raise InvalidImportFormat(
            f"Failed to import {len(self.failures)} record(s): {details}",
            record=self.failures[0].index,
            failures=list(self.failures),
        )

    def summary(self) -> str:
        """Human-readable one-line summary."""
        parts = []
        if self.imported:
            names = ", ".join(character.name for character in self.imported)
            parts.append(f"Imported {len(self.imported)} character(s): {names}")
        if self.skipped_duplicates:
            parts.append(f"skipped {len(self.skipped_duplicates)} duplicate(s)")
        if self.failures:
            parts.append(f"{len(self.failures)} record(s) failed")
        return "; ".join(parts) or "No new characters found"


def split_records(text: str) -> list[str]:
    """
    Split pasted import text into individual JSON records.

    Text that parses as a single JSON object (e.g. pretty-printed) is one
    record. Otherwise every line starting with ``{`` is a record; if there
    are none, the whole trimmed text is passed on as one record so the
    parse error is reported against it.

    Raises:
        InvalidImportFormat: If the text is empty
    """
    stripped = text.strip()
    if not stripped:
        raise InvalidImportFormat("No character data supplied")

    if _is_single_document(stripped):
        return [stripped]

    records = [line.strip() for line in text.splitlines() if line.strip().startswith("{")]
    return records or [stripped]


def _is_single_document(text: str) -> bool:
    try:
        return isinstance(json.loads(text), dict)
    except json.JSONDecodeError:
        return False


def _name_hint(data: Any) -> str | None:
    if isinstance(data, dict) and isinstance(data.get("build"), dict):
        name = data["build"].get("name")
        return name if isinstance(name, str) else None
    return None


def import_characters(text: str, existing_names: Iterable[str] = ()) -> ImportReport:
    """
    Parse and derive every character record in ``text``.

    Args:
        text: One or more Pathbuilder exports, one JSON object per line
        existing_names: Names already in the collection; matching records
            (and repeats within the batch) are skipped as duplicates

    Returns:
        ImportReport with imported characters, skipped names and failures

    Raises:
        InvalidImportFormat: If the text is empty
    """
    report = ImportReport()
    seen = set(existing_names)

    for index, record in enumerate(split_records(text), start=1):
        data: Any = None
        try:
            data = json.loads(record)
            character = derive_character(data)
        except json.JSONDecodeError as e:
            report.failures.append(ImportFailure(index, None, f"Invalid JSON: {e}"))
            logger.warning("character_import_failed", record=index, error=str(e))
            continue
        except InvalidImportFormat as e:
            report.failures.append(ImportFailure(index, _name_hint(data), str(e)))
            logger.warning("character_import_failed", record=index, error=str(e))
            continue

        if character.name in seen:
            report.skipped_duplicates.append(character.name)
            logger.info("character_import_duplicate", record=index, name=character.name)
            continue

        seen.add(character.name)
        report.imported.append(character)

    logger.info(
        "character_import_finished",
        imported=len(report.imported),
        duplicates=len(report.skipped_duplicates),
        failures=len(report.failures),
    )
    return report


async def import_into_store(store: "CharacterStore", text: str) -> ImportReport:
    """Import characters and add the new ones to ``store``."""
    existing = [character.name for character in await store.get_all()]
    report = import_characters(text, existing_names=existing)
    for character in report.imported:
        await store.add(character)
    return report
