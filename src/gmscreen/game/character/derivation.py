"""Stat derivation engine.

Turns a Pathbuilder export into a DerivedCharacter: ability modifiers, skills,
saving throws, weapon attacks, perception, lore skills, spellcasting DCs and
hit points. The engine only reads its input and allocates its output.
"""

import re
import uuid
from collections.abc import Mapping
from typing import Any

import structlog

from .attributes import (
    ABILITY_NAMES,
    LORE_ABILITY,
    PERCEPTION_ABILITY,
    SAVE_ABILITIES,
    SKILL_ABILITIES,
    WEAPON_ABILITY,
    WEAPON_CATEGORIES,
    AbilityName,
    get_modifier,
    proficiency_bonus,
)
from .pathbuilder import PathbuilderBuild, PathbuilderExport, parse_export
from .sheet import DerivedCharacter, SpellcastingLine, StatLine

logger = structlog.get_logger(__name__)


def calculate_modifiers(build: PathbuilderBuild) -> dict[AbilityName, int]:
    """Calculate the modifier for each of the six ability scores."""
    return {ability: get_modifier(build.abilities.score(ability)) for ability in AbilityName}


def make_stat_line(
    name: str, ability: AbilityName, rank: int, modifiers: Mapping[AbilityName, int], level: int
) -> StatLine:
    """
    Build a StatLine from its governing ability and proficiency rank.

    Args:
        name: Display name of the stat
        ability: Governing ability
        rank: Proficiency rank
        modifiers: Ability modifiers of the character
        level: Character level

    Returns:
        StatLine with the split-out ability modifier and proficiency bonus
    """
    ability_mod = modifiers[ability]
    prof_bonus = proficiency_bonus(rank, level)
    return StatLine(
        name=name,
        ability=ability.abbreviation,
        proficiency=rank,
        ability_modifier=ability_mod,
        proficiency_bonus=prof_bonus,
        total=ability_mod + prof_bonus,
    )


def calculate_hit_points(build: PathbuilderBuild, con_modifier: int) -> int:
    """Calculate maximum hit points.

    The Constitution modifier and per-level bonus apply uniformly at every
    level, including the first:

        ancestryhp + (classhp + CON mod + bonushpPerLevel) * level + bonushp
    """
    attrs = build.attributes
    per_level = attrs.classhp + con_modifier + attrs.bonushp_per_level
    return attrs.ancestryhp + per_level * build.level + attrs.bonushp


def generate_character_id(name: str) -> str:
    """Generate a unique id such as ``valeros-1f0c...``."""
    slug = re.sub(r"\s+", "-", name.strip()).lower()
    return f"{slug}-{uuid.uuid4().hex}"


def _lore_name(lore: str) -> str:
    lore = lore.strip()
    return lore if lore.lower().endswith("lore") else f"{lore} Lore"


def _key_ability(build: PathbuilderBuild) -> str | None:
    key = (build.keyability or "").strip().lower()
    return key if key in ABILITY_NAMES else None


def derive_character(export: PathbuilderExport | Mapping[str, Any] | str) -> DerivedCharacter:
    """
    Derive a full character sheet from a Pathbuilder export.

    Args:
        export: The export document (validated model, parsed JSON or JSON text)

    Returns:
        A new DerivedCharacter

    Raises:
        InvalidImportFormat: If the export is unsuccessful or malformed
    """
    build = parse_export(export).build
    level = build.level
    ranks = build.proficiencies.as_export_dict()
    mods = calculate_modifiers(build)

    skills = [
        make_stat_line(skill.title(), ability, ranks[skill], mods, level)
        for skill, ability in SKILL_ABILITIES.items()
    ]

    saves = [
        make_stat_line(save.title(), ability, ranks[save], mods, level)
        for save, ability in SAVE_ABILITIES.items()
    ]

    # Untrained weapon categories are not usable attacks
    attacks = [
        make_stat_line(display_name, WEAPON_ABILITY, ranks[key], mods, level)
        for key, display_name in WEAPON_CATEGORIES.items()
        if ranks[key] > 0
    ]

    perception = make_stat_line(
        "Perception", PERCEPTION_ABILITY, ranks["perception"], mods, level
    )

    lore_skills = [
        make_stat_line(_lore_name(lore), LORE_ABILITY, rank, mods, level)
        for lore, rank in build.lores
    ]

    spellcasting = []
    for caster in build.spell_casters:
        ability_mod = mods[caster.ability]
        prof_bonus = proficiency_bonus(caster.proficiency, level)
        spellcasting.append(
            SpellcastingLine(
                name=caster.name,
                tradition=caster.magic_tradition,
                ability=caster.ability.abbreviation,
                proficiency=caster.proficiency,
                ability_modifier=ability_mod,
                proficiency_bonus=prof_bonus,
                dc=10 + ability_mod + prof_bonus,
                attack_bonus=ability_mod + prof_bonus,
            )
        )

    character = DerivedCharacter(
        id=generate_character_id(build.name),
        name=build.name,
        class_name=build.class_name,
        level=level,
        ancestry=build.ancestry,
        key_ability=_key_ability(build),
        abilities=build.abilities.as_export_dict(),
        proficiencies=ranks,
        skills=skills,
        saves=saves,
        attacks=attacks,
        perception=perception,
        lore_skills=lore_skills,
        spellcasting=spellcasting,
        hp=calculate_hit_points(build, mods[AbilityName.CONSTITUTION]),
        ac=build.ac_total.ac_total,
    )

    logger.debug(
        "character_derived",
        character_id=character.id,
        name=character.name,
        level=level,
        hp=character.hp,
        attacks=len(attacks),
        spellcasting=len(spellcasting),
    )

    return character
