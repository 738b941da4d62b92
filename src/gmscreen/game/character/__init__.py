"""Character stat rules, derivation and lookups."""

from .attributes import (
    ABILITY_NAMES,
    SAVE_ABILITIES,
    SKILL_ABILITIES,
    AbilityName,
    ProficiencyRank,
    get_modifier,
    get_rank_name,
    proficiency_bonus,
)
from .derivation import derive_character
from .lookup import ModifierLookup, StatKind, load_class_key_abilities
from .pathbuilder import PathbuilderBuild, PathbuilderExport, parse_export
from .sheet import DerivedCharacter, SpellcastingLine, StatLine

__all__ = [
    "ABILITY_NAMES",
    "SAVE_ABILITIES",
    "SKILL_ABILITIES",
    "AbilityName",
    "DerivedCharacter",
    "ModifierLookup",
    "PathbuilderBuild",
    "PathbuilderExport",
    "ProficiencyRank",
    "SpellcastingLine",
    "StatKind",
    "StatLine",
    "derive_character",
    "get_modifier",
    "get_rank_name",
    "load_class_key_abilities",
    "parse_export",
    "proficiency_bonus",
]
