"""Error kinds raised by gmscreen.

Lookups never raise: a missing character or stat is reported as ``None``.
"""

from typing import Any


class GMScreenError(Exception):
    """Base class for all gmscreen errors."""

    pass


class InvalidImportFormat(GMScreenError):
    """Raised when a character-builder export is malformed or incomplete.

    Attributes:
        record: 1-based index of the offending record, if known
        failures: Per-record failures when several records are reported at once
    """

    def __init__(
        self,
        message: str,
        record: int | None = None,
        failures: list[Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.record = record
        self.failures = failures or []


class InvalidProficiencyRank(GMScreenError, ValueError):
    """Raised when a proficiency rank is outside {0, 2, 4, 6, 8}."""

    def __init__(self, rank: Any) -> None:
        super().__init__(f"Invalid proficiency rank: {rank!r} (expected 0, 2, 4, 6 or 8)")
        self.rank = rank


class InvalidDiceSpec(GMScreenError, ValueError):
    """Raised when a roll asks for fewer than one die or fewer than two faces."""

    pass


class InvalidContent(GMScreenError, ValueError):
    """Raised when a content item cannot be built (e.g. unrecognised video URL)."""

    pass


class InvalidBackupFormat(GMScreenError):
    """Raised when a backup document cannot be parsed or is missing sections."""

    pass
