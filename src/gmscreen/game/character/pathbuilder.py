"""
Pathbuilder 2e export format.

Defines the pydantic models for the JSON document produced by the Pathbuilder
character builder's "Export JSON" option. Only the fields the stat derivation
needs are modelled; everything else in the export is ignored.
"""

import json
from collections.abc import Mapping
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, StrictInt, ValidationError

from gmscreen.exceptions import InvalidImportFormat

from .attributes import VALID_RANKS, AbilityName


def _check_rank(value: int) -> int:
    if value not in VALID_RANKS:
        raise ValueError(f"proficiency rank must be one of 0, 2, 4, 6, 8 (got {value})")
    return value


# Strict: JSON booleans and numeric strings are not ranks
Rank = Annotated[StrictInt, AfterValidator(_check_rank)]


class _ExportModel(BaseModel):
    """Base for export models: ignore unknown keys, accept aliases or field names."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


class Abilities(_ExportModel):
    """Raw ability scores."""

    strength: int = Field(..., ge=1, alias="str")
    dexterity: int = Field(..., ge=1, alias="dex")
    constitution: int = Field(..., ge=1, alias="con")
    intelligence: int = Field(..., ge=1, alias="int")
    wisdom: int = Field(..., ge=1, alias="wis")
    charisma: int = Field(..., ge=1, alias="cha")

    def score(self, ability: AbilityName) -> int:
        """Get the raw score for an ability."""
        return getattr(self, ability.name.lower())

    def as_export_dict(self) -> dict[str, int]:
        """Get the scores keyed by their export names (``str``, ``dex``...)."""
        return self.model_dump(by_alias=True)


class HitPointAttributes(_ExportModel):
    """The ``attributes`` block feeding the hit point total."""

    ancestryhp: int
    classhp: int
    bonushp: int = 0
    bonushp_per_level: int = Field(default=0, alias="bonushpPerLevel")
    speed: int | None = None


class Proficiencies(_ExportModel):
    """Flat proficiency rank table (one rank per skill, save, weapon and tradition)."""

    class_dc: Rank = Field(..., alias="classDC")
    perception: Rank

    # Saving throws
    fortitude: Rank
    reflex: Rank
    will: Rank

    # Armor
    heavy: Rank = 0
    medium: Rank = 0
    light: Rank = 0
    unarmored: Rank = 0

    # Weapons
    advanced: Rank
    martial: Rank
    simple: Rank
    unarmed: Rank

    # Spellcasting traditions
    casting_arcane: Rank = Field(default=0, alias="castingArcane")
    casting_divine: Rank = Field(default=0, alias="castingDivine")
    casting_occult: Rank = Field(default=0, alias="castingOccult")
    casting_primal: Rank = Field(default=0, alias="castingPrimal")

    # Skills
    acrobatics: Rank
    arcana: Rank
    athletics: Rank
    crafting: Rank
    deception: Rank
    diplomacy: Rank
    intimidation: Rank
    medicine: Rank
    nature: Rank
    occultism: Rank
    performance: Rank
    religion: Rank
    society: Rank
    stealth: Rank
    survival: Rank
    thievery: Rank

    def as_export_dict(self) -> dict[str, int]:
        """Get the ranks keyed the way the export names them (e.g. ``classDC``)."""
        return self.model_dump(by_alias=True)


class SpellCaster(_ExportModel):
    """A spellcasting entry (class casting, innate spells, focus spells...)."""

    name: str
    magic_tradition: str = Field(..., alias="magicTradition")
    ability: AbilityName
    proficiency: Rank
    spellcasting_type: str | None = Field(default=None, alias="spellcastingType")
    innate: bool = False


class ArmorClass(_ExportModel):
    """The ``acTotal`` block; only the precomputed total is used."""

    ac_total: int = Field(..., alias="acTotal")
    ac_prof_bonus: int | None = Field(default=None, alias="acProfBonus")
    ac_ability_bonus: int | None = Field(default=None, alias="acAbilityBonus")
    ac_item_bonus: int | None = Field(default=None, alias="acItemBonus")
    shield_bonus: int | None = Field(default=None, alias="shieldBonus")


class PathbuilderBuild(_ExportModel):
    """The ``build`` object of a Pathbuilder export."""

    name: str = Field(..., min_length=1)
    class_name: str = Field(..., alias="class")
    level: int = Field(..., ge=1)
    ancestry: str
    heritage: str | None = None
    background: str | None = None
    keyability: str | None = Field(default=None, description="Exported key ability (e.g. \"str\")")
    abilities: Abilities
    attributes: HitPointAttributes
    proficiencies: Proficiencies
    spell_casters: list[SpellCaster] = Field(default_factory=list, alias="spellCasters")
    lores: list[tuple[str, Rank]] = Field(default_factory=list)
    ac_total: ArmorClass = Field(..., alias="acTotal")


class PathbuilderExport(_ExportModel):
    """Top-level export document: a success flag and the build."""

    success: bool
    build: PathbuilderBuild


def parse_export(data: "PathbuilderExport | Mapping[str, Any] | str") -> PathbuilderExport:
    """
    Validate a Pathbuilder export.

    Args:
        data: An already-validated export, a parsed JSON mapping, or JSON text

    Returns:
        The validated PathbuilderExport

    Raises:
        InvalidImportFormat: If the document is not valid JSON, reports
            ``success: false``, lacks a ``build`` object, or the build is
            missing required fields
    """
    if isinstance(data, PathbuilderExport):
        if not data.success:
            raise InvalidImportFormat("Invalid Pathbuilder export format: export was not successful")
        return data

    if isinstance(data, str):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as e:
            raise InvalidImportFormat(f"Invalid JSON: {e}") from e

    if not isinstance(data, Mapping):
        raise InvalidImportFormat("Invalid Pathbuilder export format: expected a JSON object")

    if data.get("success") is not True:
        raise InvalidImportFormat("Invalid Pathbuilder export format: export was not successful")

    if not isinstance(data.get("build"), Mapping):
        raise InvalidImportFormat("Invalid Pathbuilder export format: missing 'build' object")

    try:
        return PathbuilderExport.model_validate(data)
    except ValidationError as e:
        name = data["build"].get("name", "unknown")
        raise InvalidImportFormat(f"Invalid build for '{name}': {e}") from e
