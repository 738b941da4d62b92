"""Modifier and DC lookups over a collection of derived characters.

Every lookup returns ``None`` when the character or the stat does not exist;
a character without spellcasting, for example, simply has no spell DC.
"""

import pathlib
from collections.abc import Iterable, Mapping
from enum import StrEnum
from typing import Any

import structlog
import yaml

from gmscreen.config import get_settings

from .attributes import ABILITY_NAMES, AbilityName, get_modifier, proficiency_bonus
from .sheet import DerivedCharacter, StatLine

logger = structlog.get_logger(__name__)

DEFAULT_CLASS_KEY_ABILITIES_PATH = (
    pathlib.Path(__file__).parent.parent.parent / "data" / "class_key_abilities.yaml"
)


class StatKind(StrEnum):
    """Kinds of stat a roll can be made against."""

    SKILL = "skill"
    SAVE = "save"
    ATTACK = "attack"
    CLASS_DC = "class"
    SPELL_DC = "spell"


def load_class_key_abilities(path: pathlib.Path | None = None) -> dict[str, AbilityName]:
    """Load the class name -> key ability table from YAML.

    Args:
        path: YAML file to read. Defaults to ``Settings.class_key_abilities_file``
            and then to the packaged table.

    Returns:
        Mapping of lower-cased class name to key ability. Entries naming an
        unknown ability are skipped.
    """
    if path is None:
        path = get_settings().class_key_abilities_file or DEFAULT_CLASS_KEY_ABILITIES_PATH

    if not path.exists():
        logger.warning("class_key_abilities_missing", path=str(path))
        return {}

    with open(path, encoding="utf-8") as f:
        data: Any = yaml.safe_load(f) or {}

    table: dict[str, AbilityName] = {}
    for class_name, ability in (data.get("classes") or {}).items():
        key = str(ability).strip().lower()
        if key not in ABILITY_NAMES:
            logger.warning("class_key_ability_invalid", class_name=class_name, ability=ability)
            continue
        table[str(class_name).strip().lower()] = AbilityName(key)

    return table


def _find_exact(lines: Iterable[StatLine], name: str) -> StatLine | None:
    wanted = name.strip().lower()
    return next((line for line in lines if line.name.lower() == wanted), None)


class ModifierLookup:
    """
    Looks up roll modifiers and DCs for characters by id.

    Args:
        characters: The derived characters to search
        class_key_abilities: Class name -> key ability used for class DCs
            when a character has no exported key ability and the caller does
            not pass one explicitly
    """

    def __init__(
        self,
        characters: Iterable[DerivedCharacter],
        class_key_abilities: Mapping[str, AbilityName | str] | None = None,
    ) -> None:
        self._characters = {character.id: character for character in characters}
        self._class_key_abilities = {
            name.lower(): AbilityName(str(ability).lower())
            for name, ability in (class_key_abilities or {}).items()
        }

    def get_character(self, character_id: str) -> DerivedCharacter | None:
        """Get a character by id."""
        return self._characters.get(character_id)

    def skill(self, character_id: str, skill_name: str) -> int | None:
        """Get a skill modifier (case-insensitive; includes Perception and lores)."""
        character = self.get_character(character_id)
        if character is None:
            return None

        lines = list(character.skills)
        if character.perception is not None:
            lines.append(character.perception)
        lines.extend(character.lore_skills)

        line = _find_exact(lines, skill_name)
        return line.total if line else None

    def save(self, character_id: str, save_name: str) -> int | None:
        """Get a saving throw modifier (case-insensitive)."""
        character = self.get_character(character_id)
        if character is None:
            return None

        line = _find_exact(character.saves, save_name)
        return line.total if line else None

    def attack(self, character_id: str, attack_name: str) -> int | None:
        """Get an attack modifier.

        Matches the first attack whose name contains ``attack_name``,
        ignoring case, so "martial" finds "Martial Weapons".
        """
        character = self.get_character(character_id)
        if character is None:
            return None

        wanted = attack_name.strip().lower()
        for line in character.attacks:
            if wanted in line.name.lower():
                return line.total
        return None

    def key_ability(self, character_id: str) -> AbilityName | None:
        """Resolve the key ability used for a character's class DC."""
        character = self.get_character(character_id)
        if character is None:
            return None
        if character.key_ability:
            return AbilityName(character.key_ability)
        return self._class_key_abilities.get(character.class_name.lower())

    def class_dc(
        self, character_id: str, key_ability: AbilityName | str | None = None
    ) -> int | None:
        """
        Get a character's class DC.

        Args:
            character_id: Character to look up
            key_ability: Governing ability. When omitted, the character's
                exported key ability is used, then the per-class table.

        Returns:
            10 + key ability modifier + class DC proficiency bonus, or None
            if the character or its key ability is unknown
        """
        character = self.get_character(character_id)
        if character is None:
            return None

        ability = (
            AbilityName(str(key_ability).lower())
            if key_ability is not None
            else self.key_ability(character_id)
        )
        if ability is None:
            logger.debug(
                "class_dc_key_ability_unknown",
                character_id=character_id,
                class_name=character.class_name,
            )
            return None

        rank = character.proficiencies.get("classDC", 0)
        return 10 + get_modifier(character.abilities[ability.value]) + proficiency_bonus(
            rank, character.level
        )

    def spell_dc(self, character_id: str) -> int | None:
        """Get the DC of the first spellcasting entry the character is trained in."""
        character = self.get_character(character_id)
        if character is None:
            return None

        caster = next((line for line in character.spellcasting if line.proficiency > 0), None)
        return caster.dc if caster else None

    def skill_dc(self, character_id: str, skill_name: str) -> int | None:
        """Get the DC others must beat against a skill: 10 + skill modifier."""
        modifier = self.skill(character_id, skill_name)
        return None if modifier is None else 10 + modifier

    def stat(self, character_id: str, kind: StatKind | str, name: str = "") -> int | None:
        """Look up any stat kind for a roll-presentation layer."""
        kind = StatKind(kind)
        if kind is StatKind.SKILL:
            return self.skill(character_id, name)
        if kind is StatKind.SAVE:
            return self.save(character_id, name)
        if kind is StatKind.ATTACK:
            return self.attack(character_id, name)
        if kind is StatKind.CLASS_DC:
            return self.class_dc(character_id)
        return self.spell_dc(character_id)
