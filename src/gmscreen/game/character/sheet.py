"""
Derived character sheet models.

A DerivedCharacter is produced once by the stat derivation engine and never
mutated afterwards; an update means deriving the sheet again from the build.
"""

from collections.abc import Mapping
from datetime import UTC, datetime
from types import MappingProxyType
from typing import Annotated, Self

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    model_validator,
)

from .attributes import AbilityName, get_modifier


class _SheetModel(BaseModel):
    model_config = ConfigDict(frozen=True)


def _read_only(scores: Mapping[str, int]) -> Mapping[str, int]:
    return MappingProxyType(dict(scores))


def _plain_dict(scores: Mapping[str, int]) -> dict[str, int]:
    return dict(scores)


# Read-only view over a copied mapping; dumps back to a plain dict
FrozenScores = Annotated[
    Mapping[str, int],
    AfterValidator(_read_only),
    PlainSerializer(_plain_dict, return_type=dict[str, int]),
]


class StatLine(_SheetModel):
    """
    A derived skill, saving throw or attack modifier.

    Attributes:
        name: Display name (e.g. "Acrobatics", "Martial Weapons")
        ability: Governing ability abbreviation (e.g. "DEX")
        proficiency: Proficiency rank (0, 2, 4, 6 or 8)
        ability_modifier: Modifier contributed by the governing ability
        proficiency_bonus: Bonus contributed by proficiency
        total: ability_modifier + proficiency_bonus
    """

    name: str
    ability: str
    proficiency: int
    ability_modifier: int
    proficiency_bonus: int
    total: int

    @model_validator(mode="after")
    def _check_total(self) -> Self:
        if self.total != self.ability_modifier + self.proficiency_bonus:
            raise ValueError(
                f"total for {self.name} must equal ability_modifier + proficiency_bonus"
            )
        return self


class SpellcastingLine(_SheetModel):
    """A derived spellcasting entry with its spell DC and spell attack bonus."""

    name: str
    tradition: str
    ability: str
    proficiency: int
    ability_modifier: int
    proficiency_bonus: int
    dc: int
    attack_bonus: int

    @model_validator(mode="after")
    def _check_totals(self) -> Self:
        attack = self.ability_modifier + self.proficiency_bonus
        if self.attack_bonus != attack or self.dc != 10 + attack:
            raise ValueError(f"dc/attack_bonus for {self.name} do not match their components")
        return self


class DerivedCharacter(_SheetModel):
    """A fully derived character sheet."""

    id: str = Field(..., description="Generated unique identifier")
    name: str
    class_name: str
    level: int = Field(..., ge=1)
    ancestry: str
    key_ability: str | None = Field(default=None, description="Class key ability, if exported")
    abilities: FrozenScores = Field(..., description="Raw scores keyed str/dex/con/int/wis/cha")
    proficiencies: FrozenScores = Field(..., description="Proficiency ranks keyed as exported")
    skills: tuple[StatLine, ...] = ()
    saves: tuple[StatLine, ...] = ()
    attacks: tuple[StatLine, ...] = ()
    perception: StatLine | None = None
    lore_skills: tuple[StatLine, ...] = ()
    spellcasting: tuple[SpellcastingLine, ...] = ()
    hp: int
    ac: int
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def ability_modifier(self, ability: AbilityName | str) -> int:
        """Get the modifier for one of the character's ability scores."""
        return get_modifier(self.abilities[AbilityName(str(ability).lower()).value])
