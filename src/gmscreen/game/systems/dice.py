"""Dice rolling for manual rolls and character-stat rolls.

Provides:
- roll(): N dice of one size plus a flat modifier
- RollHistory: bounded, most-recent-first record of rolls
- classify_d20(): natural 20 / natural 1 detection for single d20 rolls
"""

import random
from collections import deque
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

import structlog

from gmscreen.config import get_settings
from gmscreen.exceptions import InvalidDiceSpec

logger = structlog.get_logger(__name__)

# Die sizes offered by the manual roller
DICE_TYPES = (4, 6, 8, 10, 12, 20)


class D20Outcome(Enum):
    """Natural result of a single d20."""

    CRITICAL_SUCCESS = "critical_success"
    CRITICAL_FAILURE = "critical_failure"
    NORMAL = "normal"


@dataclass(frozen=True)
class DiceRollRecord:
    """Result of one roll.

    Attributes:
        dice_count: Number of dice rolled
        die_faces: Faces per die
        modifier: Flat modifier added to the sum
        results: Individual die results in the order they were rolled
        total: sum(results) + modifier
        timestamp: When the roll was made
    """

    dice_count: int
    die_faces: int
    modifier: int
    results: tuple[int, ...]
    total: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    @property
    def notation(self) -> str:
        """Dice notation for display, e.g. ``3d6+2``."""
        base = f"{self.dice_count}d{self.die_faces}"
        if self.modifier > 0:
            return f"{base}+{self.modifier}"
        if self.modifier < 0:
            return f"{base}{self.modifier}"
        return base

    @property
    def natural(self) -> int:
        """Sum of the dice before the modifier."""
        return sum(self.results)


def roll(
    dice_count: int,
    die_faces: int,
    modifier: int = 0,
    rng: random.Random | None = None,
) -> DiceRollRecord:
    """
    Roll ``dice_count`` dice with ``die_faces`` faces and add ``modifier``.

    Args:
        dice_count: Number of dice (1 or more)
        die_faces: Faces per die (2 or more)
        modifier: Flat modifier added to the sum
        rng: Random source; defaults to the ``random`` module

    Returns:
        DiceRollRecord with each die's result in draw order

    Raises:
        InvalidDiceSpec: If dice_count < 1 or die_faces < 2
    """
    if dice_count < 1:
        raise InvalidDiceSpec(f"Must roll at least one die (got {dice_count})")
    if die_faces < 2:
        raise InvalidDiceSpec(f"Dice need at least two faces (got {die_faces})")

    source = rng or random
    results = tuple(source.randint(1, die_faces) for _ in range(dice_count))
    record = DiceRollRecord(
        dice_count=dice_count,
        die_faces=die_faces,
        modifier=modifier,
        results=results,
        total=sum(results) + modifier,
    )

    logger.debug("dice_rolled", notation=record.notation, results=results, total=record.total)
    return record


def roll_d20(modifier: int = 0, rng: random.Random | None = None) -> DiceRollRecord:
    """Roll a single d20 with a modifier."""
    return roll(1, 20, modifier, rng=rng)


def classify_d20(record: DiceRollRecord) -> D20Outcome:
    """Classify a single-d20 roll by its natural result.

    Rolls of anything other than exactly one d20 are always NORMAL.
    """
    if record.dice_count != 1 or record.die_faces != 20:
        return D20Outcome.NORMAL
    natural = record.results[0]
    if natural == 20:
        return D20Outcome.CRITICAL_SUCCESS
    if natural == 1:
        return D20Outcome.CRITICAL_FAILURE
    return D20Outcome.NORMAL


class RollHistory:
    """Bounded roll history, newest first."""

    def __init__(self, max_size: int | None = None) -> None:
        if max_size is None:
            max_size = get_settings().roll_history_size
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self._rolls: deque[DiceRollRecord] = deque(maxlen=max_size)

    @property
    def max_size(self) -> int:
        return self._rolls.maxlen or 0

    def add(self, record: DiceRollRecord) -> None:
        """Record a roll, dropping the oldest if the history is full."""
        self._rolls.appendleft(record)

    def clear(self) -> None:
        self._rolls.clear()

    def latest(self) -> DiceRollRecord | None:
        return self._rolls[0] if self._rolls else None

    def __iter__(self) -> Iterator[DiceRollRecord]:
        return iter(self._rolls)

    def __len__(self) -> int:
        return len(self._rolls)
