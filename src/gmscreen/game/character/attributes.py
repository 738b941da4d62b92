"""Ability scores, proficiency ranks and the fixed rules tables.

This module provides the two arithmetic rules every derived stat is built from
(ability modifiers and proficiency bonuses) together with the closed tables
that map skills and saving throws to their governing ability.
"""

from enum import IntEnum, StrEnum
from types import MappingProxyType
from typing import Mapping

from gmscreen.exceptions import InvalidProficiencyRank


class AbilityName(StrEnum):
    """The six ability scores, keyed the way the character builder exports them."""

    STRENGTH = "str"
    DEXTERITY = "dex"
    CONSTITUTION = "con"
    INTELLIGENCE = "int"
    WISDOM = "wis"
    CHARISMA = "cha"

    @property
    def abbreviation(self) -> str:
        """Upper-case display form (e.g. ``STR``)."""
        return self.value.upper()


# Constant ability keys for easy import
ABILITY_NAMES = [ability.value for ability in AbilityName]


class ProficiencyRank(IntEnum):
    """Proficiency ranks as encoded in character-builder exports."""

    UNTRAINED = 0
    TRAINED = 2
    EXPERT = 4
    MASTER = 6
    LEGENDARY = 8


RANK_NAMES: Mapping[int, str] = MappingProxyType(
    {rank.value: rank.name.title() for rank in ProficiencyRank}
)

VALID_RANKS = frozenset(RANK_NAMES)

SKILL_ABILITIES: Mapping[str, AbilityName] = MappingProxyType(
    {
        "acrobatics": AbilityName.DEXTERITY,
        "arcana": AbilityName.INTELLIGENCE,
        "athletics": AbilityName.STRENGTH,
        "crafting": AbilityName.INTELLIGENCE,
        "deception": AbilityName.CHARISMA,
        "diplomacy": AbilityName.CHARISMA,
        "intimidation": AbilityName.CHARISMA,
        "medicine": AbilityName.WISDOM,
        "nature": AbilityName.WISDOM,
        "occultism": AbilityName.INTELLIGENCE,
        "performance": AbilityName.CHARISMA,
        "religion": AbilityName.WISDOM,
        "society": AbilityName.INTELLIGENCE,
        "stealth": AbilityName.DEXTERITY,
        "survival": AbilityName.WISDOM,
        "thievery": AbilityName.DEXTERITY,
    }
)

SAVE_ABILITIES: Mapping[str, AbilityName] = MappingProxyType(
    {
        "fortitude": AbilityName.CONSTITUTION,
        "reflex": AbilityName.DEXTERITY,
        "will": AbilityName.WISDOM,
    }
)

# Weapon proficiency key -> display name. Every category uses Strength;
# finesse and ranged weapons are not modelled.
WEAPON_CATEGORIES: Mapping[str, str] = MappingProxyType(
    {
        "simple": "Simple Weapons",
        "martial": "Martial Weapons",
        "advanced": "Advanced Weapons",
        "unarmed": "Unarmed",
    }
)

WEAPON_ABILITY = AbilityName.STRENGTH
PERCEPTION_ABILITY = AbilityName.WISDOM
LORE_ABILITY = AbilityName.INTELLIGENCE


def get_modifier(score: int) -> int:
    """Calculate the ability modifier for a raw ability score.

    Args:
        score: The ability score (typically 1-30)

    Returns:
        The modifier: (score - 10) // 2, rounded toward negative infinity

    Examples:
        >>> get_modifier(10)
        0
        >>> get_modifier(18)
        4
        >>> get_modifier(9)
        -1
    """
    return (score - 10) // 2


def validate_rank(rank: int) -> int:
    """Return ``rank`` unchanged if it is a valid proficiency rank.

    Raises:
        InvalidProficiencyRank: If the rank is not one of 0, 2, 4, 6 or 8
    """
    # bool is an int subclass but never a meaningful rank
    if isinstance(rank, bool) or not isinstance(rank, int) or rank not in VALID_RANKS:
        raise InvalidProficiencyRank(rank)
    return rank


def proficiency_bonus(rank: int, level: int) -> int:
    """Calculate the proficiency bonus for a rank at a character level.

    Untrained characters never add their level; every other rank adds
    ``rank + level``.

    Args:
        rank: Proficiency rank (0, 2, 4, 6 or 8)
        level: Character level (1 or higher)

    Returns:
        The proficiency bonus

    Raises:
        InvalidProficiencyRank: If the rank is outside the closed set

    Examples:
        >>> proficiency_bonus(0, 5)
        0
        >>> proficiency_bonus(2, 5)
        7
    """
    validate_rank(rank)
    if rank == ProficiencyRank.UNTRAINED:
        return 0
    return rank + level


def get_rank_name(rank: int) -> str:
    """Get the display name for a proficiency rank (e.g. "Expert")."""
    return RANK_NAMES[validate_rank(rank)]
