"""Tests for the stat derivation engine."""

import json

import pytest
from pydantic import ValidationError

from gmscreen.exceptions import InvalidImportFormat
from gmscreen.game.character.derivation import (
    calculate_hit_points,
    derive_character,
    generate_character_id,
)
from gmscreen.game.character.pathbuilder import parse_export
from gmscreen.game.character.sheet import StatLine


def _by_name(lines):
    return {line.name: line for line in lines}


class TestSkillsAndSaves:
    """Tests for skill and saving throw lines."""

    def test_all_sixteen_skills_present(self, pathbuilder_export):
        """Test every skill is derived with a title-cased name."""
        character = derive_character(pathbuilder_export)
        names = [skill.name for skill in character.skills]
        assert len(names) == 16
        assert "Acrobatics" in names
        assert "Thievery" in names

    def test_trained_skill(self, pathbuilder_export):
        """Test a trained Dexterity skill: DEX 14 (+2), trained at level 5 (+7)."""
        skills = _by_name(derive_character(pathbuilder_export).skills)
        acrobatics = skills["Acrobatics"]
        assert acrobatics.ability == "DEX"
        assert acrobatics.proficiency == 2
        assert acrobatics.ability_modifier == 2
        assert acrobatics.proficiency_bonus == 7
        assert acrobatics.total == 9

    def test_untrained_skill_has_no_level_bonus(self, pathbuilder_export):
        """Test untrained skills only get the ability modifier."""
        skills = _by_name(derive_character(pathbuilder_export).skills)
        deception = skills["Deception"]
        assert deception.proficiency == 0
        assert deception.proficiency_bonus == 0
        assert deception.total == deception.ability_modifier == -1

    def test_saves(self, pathbuilder_export):
        """Test the three saves use CON, DEX and WIS."""
        saves = _by_name(derive_character(pathbuilder_export).saves)
        assert list(saves) == ["Fortitude", "Reflex", "Will"]
        assert saves["Fortitude"].ability == "CON"
        assert saves["Fortitude"].total == 2 + 9
        assert saves["Reflex"].total == 2 + 9
        assert saves["Will"].ability == "WIS"
        assert saves["Will"].total == 1 + 7

    def test_total_is_always_sum_of_components(self, pathbuilder_export, wizard_export):
        """Test the StatLine invariant across every derived line."""
        for export in (pathbuilder_export, wizard_export):
            character = derive_character(export)
            lines = [*character.skills, *character.saves, *character.attacks]
            lines.extend(character.lore_skills)
            lines.append(character.perception)
            for line in lines:
                assert line.total == line.ability_modifier + line.proficiency_bonus

    def test_stat_line_rejects_inconsistent_total(self):
        """Test a StatLine cannot be built with a wrong total."""
        with pytest.raises(ValidationError):
            StatLine(
                name="Stealth",
                ability="DEX",
                proficiency=2,
                ability_modifier=2,
                proficiency_bonus=7,
                total=10,
            )


class TestAttacks:
    """Tests for weapon proficiency attack lines."""

    def test_martial_attack(self, pathbuilder_export):
        """Test STR 18 (+4), expert at level 5 gives +13."""
        attacks = _by_name(derive_character(pathbuilder_export).attacks)
        martial = attacks["Martial Weapons"]
        assert martial.ability == "STR"
        assert martial.ability_modifier == 4
        assert martial.proficiency_bonus == 9
        assert martial.total == 13

    def test_untrained_category_filtered(self, pathbuilder_export):
        """Test untrained weapon categories are not reported."""
        names = [attack.name for attack in derive_character(pathbuilder_export).attacks]
        assert "Simple Weapons" not in names
        assert names == ["Martial Weapons", "Advanced Weapons", "Unarmed"]

    def test_attacks_always_use_strength(self, pathbuilder_export):
        """Test attacks use STR even for a high-DEX character."""
        pathbuilder_export["build"]["abilities"]["dex"] = 20
        for attack in derive_character(pathbuilder_export).attacks:
            assert attack.ability == "STR"
            assert attack.ability_modifier == 4


class TestPerceptionAndLores:
    """Tests for perception and lore skills."""

    def test_perception(self, pathbuilder_export):
        """Test perception uses WIS: +1 plus expert at level 5."""
        perception = derive_character(pathbuilder_export).perception
        assert perception.name == "Perception"
        assert perception.ability == "WIS"
        assert perception.total == 10

    def test_lore_skills(self, pathbuilder_export):
        """Test lores become Intelligence skills named '<X> Lore'."""
        lores = derive_character(pathbuilder_export).lore_skills
        assert len(lores) == 1
        assert lores[0].name == "Farming Lore"
        assert lores[0].ability == "INT"
        assert lores[0].total == 0 + 7

    def test_lore_already_suffixed(self, export_factory):
        """Test a lore name ending in 'Lore' is kept as is."""
        character = derive_character(export_factory(lores=[["Warfare Lore", 4]]))
        assert character.lore_skills[0].name == "Warfare Lore"

    def test_no_lores(self, export_factory):
        """Test builds without lores derive no lore skills."""
        export = export_factory()
        del export["build"]["lores"]
        assert derive_character(export).lore_skills == ()


class TestSpellcasting:
    """Tests for spellcasting lines."""

    def test_spellcasting_dc_and_attack(self, wizard_export):
        """Test INT 18 (+4), trained at level 3: attack +9, DC 19."""
        casters = _by_name(derive_character(wizard_export).spellcasting)
        wizard = casters["Wizard"]
        assert wizard.tradition == "arcane"
        assert wizard.ability == "INT"
        assert wizard.attack_bonus == 9
        assert wizard.dc == 19

    def test_untrained_spellcasting(self, wizard_export):
        """Test an untrained entry gets only the ability modifier."""
        focus = _by_name(derive_character(wizard_export).spellcasting)["Focus Spells"]
        assert focus.attack_bonus == 4
        assert focus.dc == 14

    def test_no_spellcasting(self, pathbuilder_export):
        """Test martial characters have no spellcasting lines."""
        assert derive_character(pathbuilder_export).spellcasting == ()


class TestHitPointsAndArmor:
    """Tests for hit points and armor class."""

    def test_hit_points(self, pathbuilder_export):
        """Test 8 + (10 + 2 + 0) * 5 + 0 = 68."""
        assert derive_character(pathbuilder_export).hp == 68

    def test_hit_points_with_bonuses(self, export_factory):
        """Test per-level bonus is multiplied by level, flat bonus is not."""
        export = export_factory(
            attributes={"ancestryhp": 8, "classhp": 10, "bonushp": 3, "bonushpPerLevel": 1}
        )
        assert derive_character(export).hp == 8 + (10 + 2 + 1) * 5 + 3

    def test_hit_points_negative_con(self, export_factory):
        """Test a negative CON modifier applies at every level."""
        export = export_factory(
            level=2,
            abilities={"str": 10, "dex": 10, "con": 8, "int": 10, "wis": 10, "cha": 10},
        )
        assert derive_character(export).hp == 8 + (10 - 1) * 2

    def test_calculate_hit_points_directly(self, pathbuilder_export):
        """Test the helper with an explicit CON modifier."""
        build = parse_export(pathbuilder_export).build
        assert calculate_hit_points(build, 0) == 8 + 10 * 5

    def test_armor_class_passthrough(self, pathbuilder_export):
        """Test AC is taken from the export's precomputed total."""
        assert derive_character(pathbuilder_export).ac == 24


class TestIdentityAndDeterminism:
    """Tests for ids and repeated derivation."""

    def test_identifying_fields(self, pathbuilder_export):
        """Test name, class, level, ancestry and key ability are copied."""
        character = derive_character(pathbuilder_export)
        assert character.name == "Valeros"
        assert character.class_name == "Fighter"
        assert character.level == 5
        assert character.ancestry == "Human"
        assert character.key_ability == "str"
        assert character.abilities["str"] == 18
        assert character.proficiencies["classDC"] == 2
        assert character.proficiencies["castingArcane"] == 0

    def test_id_format(self, export_factory):
        """Test ids start with the slugified name."""
        character = derive_character(export_factory(name="Seelah the Bold"))
        assert character.id.startswith("seelah-the-bold-")

    def test_ids_are_unique(self, pathbuilder_export):
        """Test rapid repeated derivations never collide."""
        ids = {derive_character(pathbuilder_export).id for _ in range(200)}
        assert len(ids) == 200

    def test_generate_character_id(self):
        """Test id generation directly."""
        assert generate_character_id("Kyra") != generate_character_id("Kyra")

    def test_deterministic_totals(self, pathbuilder_export):
        """Test deriving twice gives identical stats apart from the id."""
        first = derive_character(pathbuilder_export)
        second = derive_character(pathbuilder_export)
        assert first.id != second.id
        exclude = {"id", "created_at"}
        assert first.model_dump(exclude=exclude) == second.model_dump(exclude=exclude)

    def test_does_not_mutate_input(self, pathbuilder_export):
        """Test the export is left untouched."""
        before = json.dumps(pathbuilder_export, sort_keys=True)
        derive_character(pathbuilder_export)
        assert json.dumps(pathbuilder_export, sort_keys=True) == before

    def test_accepts_json_text(self, pathbuilder_export):
        """Test the engine accepts raw JSON text."""
        assert derive_character(json.dumps(pathbuilder_export)).name == "Valeros"

    def test_accepts_parsed_model(self, pathbuilder_export):
        """Test the engine accepts an already-validated export."""
        assert derive_character(parse_export(pathbuilder_export)).hp == 68

    def test_derived_character_is_frozen(self, pathbuilder_export):
        """Test derived sheets cannot be modified in place."""
        character = derive_character(pathbuilder_export)
        with pytest.raises(ValidationError):
            character.hp = 1

    def test_derived_collections_are_read_only(self, pathbuilder_export):
        """Test the score maps and stat lists cannot be changed in place."""
        character = derive_character(pathbuilder_export)
        with pytest.raises(TypeError):
            character.abilities["str"] = 3  # type: ignore[index]
        with pytest.raises(TypeError):
            character.proficiencies["martial"] = 8  # type: ignore[index]
        with pytest.raises(AttributeError):
            character.attacks.clear()  # type: ignore[attr-defined]
        with pytest.raises(AttributeError):
            character.skills.append(character.skills[0])  # type: ignore[attr-defined]
        assert character.abilities["str"] == 18
        assert len(character.attacks) == 3

    def test_sheet_dumps_plain_maps(self, pathbuilder_export):
        """Test a sheet dumps its score maps as dicts and reloads equal."""
        character = derive_character(pathbuilder_export)
        reloaded = type(character).model_validate(character.model_dump())
        assert reloaded == character
        assert isinstance(character.model_dump()["abilities"], dict)


class TestInvalidImports:
    """Tests for rejected exports."""

    def test_unsuccessful_export(self, pathbuilder_export):
        """Test success: false is rejected."""
        pathbuilder_export["success"] = False
        with pytest.raises(InvalidImportFormat, match="not successful"):
            derive_character(pathbuilder_export)

    def test_missing_success(self, pathbuilder_export):
        """Test a missing success flag is rejected."""
        del pathbuilder_export["success"]
        with pytest.raises(InvalidImportFormat):
            derive_character(pathbuilder_export)

    def test_missing_build(self):
        """Test an export without a build is rejected."""
        with pytest.raises(InvalidImportFormat, match="build"):
            derive_character({"success": True})

    def test_build_not_an_object(self):
        """Test a non-object build is rejected."""
        with pytest.raises(InvalidImportFormat):
            derive_character({"success": True, "build": [1, 2, 3]})

    def test_not_an_object(self):
        """Test a JSON array is rejected."""
        with pytest.raises(InvalidImportFormat):
            derive_character("[]")

    def test_invalid_json(self):
        """Test text that is not JSON is rejected."""
        with pytest.raises(InvalidImportFormat, match="Invalid JSON"):
            derive_character("{not json")

    @pytest.mark.parametrize(
        "path",
        [
            ("level",),
            ("abilities", "con"),
            ("attributes", "classhp"),
            ("proficiencies", "martial"),
            ("proficiencies", "stealth"),
            ("acTotal", "acTotal"),
        ],
    )
    def test_missing_required_field(self, pathbuilder_export, path):
        """Test missing numeric fields are rejected with the character named."""
        target = pathbuilder_export["build"]
        for key in path[:-1]:
            target = target[key]
        del target[path[-1]]
        with pytest.raises(InvalidImportFormat, match="Valeros"):
            derive_character(pathbuilder_export)

    def test_non_numeric_field(self, pathbuilder_export):
        """Test a non-numeric ability score is rejected."""
        pathbuilder_export["build"]["abilities"]["str"] = "strong"
        with pytest.raises(InvalidImportFormat):
            derive_character(pathbuilder_export)

    def test_out_of_domain_rank(self, pathbuilder_export):
        """Test a proficiency rank outside the closed set is rejected."""
        pathbuilder_export["build"]["proficiencies"]["athletics"] = 3
        with pytest.raises(InvalidImportFormat):
            derive_character(pathbuilder_export)

    @pytest.mark.parametrize("rank", [False, True, "4", 4.0])
    def test_non_integer_rank(self, pathbuilder_export, rank):
        """Test booleans, numeric strings and floats are not accepted as ranks."""
        pathbuilder_export["build"]["proficiencies"]["athletics"] = rank
        with pytest.raises(InvalidImportFormat):
            derive_character(pathbuilder_export)

    def test_non_integer_spellcasting_rank(self, wizard_export):
        """Test a spellcasting entry with a boolean rank is rejected."""
        wizard_export["build"]["spellCasters"][1]["proficiency"] = False
        with pytest.raises(InvalidImportFormat):
            derive_character(wizard_export)

    def test_zero_level(self, pathbuilder_export):
        """Test level must be positive."""
        pathbuilder_export["build"]["level"] = 0
        with pytest.raises(InvalidImportFormat):
            derive_character(pathbuilder_export)

    def test_unknown_spellcasting_ability(self, wizard_export):
        """Test a spellcasting entry with an unknown ability is rejected."""
        wizard_export["build"]["spellCasters"][1]["ability"] = "luck"
        with pytest.raises(InvalidImportFormat):
            derive_character(wizard_export)
