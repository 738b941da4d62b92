"""Shared fixtures for all tests."""

import copy
import json
from typing import Any

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from gmscreen.database.models import Base

SKILLS = [
    "acrobatics",
    "arcana",
    "athletics",
    "crafting",
    "deception",
    "diplomacy",
    "intimidation",
    "medicine",
    "nature",
    "occultism",
    "performance",
    "religion",
    "society",
    "stealth",
    "survival",
    "thievery",
]

# Trimmed-down Pathbuilder export for a level 5 fighter
SAMPLE_EXPORT: dict[str, Any] = {
    "success": True,
    "build": {
        "name": "Valeros",
        "class": "Fighter",
        "dualClass": None,
        "level": 5,
        "xp": 0,
        "ancestry": "Human",
        "heritage": "Versatile Human",
        "background": "Farmhand",
        "keyability": "str",
        "abilities": {
            "str": 18,
            "dex": 14,
            "con": 14,
            "int": 10,
            "wis": 12,
            "cha": 9,
            "breakdown": {"ancestryFree": ["str"], "classBoosts": ["str"]},
        },
        "attributes": {
            "ancestryhp": 8,
            "classhp": 10,
            "bonushp": 0,
            "bonushpPerLevel": 0,
            "speed": 25,
            "speedBonus": 0,
        },
        "proficiencies": {
            "classDC": 2,
            "perception": 4,
            "fortitude": 4,
            "reflex": 4,
            "will": 2,
            "heavy": 2,
            "medium": 2,
            "light": 2,
            "unarmored": 2,
            "advanced": 2,
            "martial": 4,
            "simple": 0,
            "unarmed": 4,
            "castingArcane": 0,
            "castingDivine": 0,
            "castingOccult": 0,
            "castingPrimal": 0,
            **{skill: 0 for skill in SKILLS},
            "acrobatics": 2,
            "athletics": 4,
            "intimidation": 2,
            "survival": 2,
        },
        "spellCasters": [],
        "lores": [["Farming", 2]],
        "feats": [["Power Attack", None, "Class Feat", 1]],
        "acTotal": {
            "acProfBonus": 7,
            "acAbilityBonus": 1,
            "acItemBonus": 6,
            "acTotal": 24,
            "shieldBonus": None,
        },
    },
}


def make_export(**build_overrides: Any) -> dict[str, Any]:
    """Copy of the sample export with top-level build keys replaced."""
    export = copy.deepcopy(SAMPLE_EXPORT)
    export["build"].update(build_overrides)
    return export


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path_factory, monkeypatch):
    """Point settings at a throwaway database and reset cached settings/engine."""
    db_path = tmp_path_factory.mktemp("gmscreen_test") / "test_gmscreen.db"
    monkeypatch.setenv("GMSCREEN_DATABASE_URL", f"sqlite+aiosqlite:///{db_path}")

    from gmscreen.config import get_settings

    get_settings.cache_clear()

    import gmscreen.database.engine as engine_module

    engine_module._engine = None
    engine_module._async_session_factory = None

    yield

    get_settings.cache_clear()
    engine_module._engine = None
    engine_module._async_session_factory = None


@pytest.fixture
def pathbuilder_export() -> dict[str, Any]:
    """A valid Pathbuilder export (fresh copy per test)."""
    return make_export()


@pytest.fixture
def wizard_export() -> dict[str, Any]:
    """A level 3 elf wizard with arcane spellcasting."""
    return make_export(
        name="Ezren",
        **{"class": "Wizard"},
        level=3,
        ancestry="Elf",
        keyability="int",
        abilities={"str": 10, "dex": 14, "con": 12, "int": 18, "wis": 12, "cha": 10},
        attributes={"ancestryhp": 6, "classhp": 6, "bonushp": 0, "bonushpPerLevel": 0},
        spellCasters=[
            {
                "name": "Focus Spells",
                "magicTradition": "arcane",
                "spellcastingType": "spontaneous",
                "ability": "int",
                "proficiency": 0,
                "focusPoints": 1,
                "innate": False,
                "perDay": [],
                "spells": [],
            },
            {
                "name": "Wizard",
                "magicTradition": "arcane",
                "spellcastingType": "prepared",
                "ability": "int",
                "proficiency": 2,
                "focusPoints": 0,
                "innate": False,
                "perDay": [5, 3, 2],
                "spells": [],
            },
        ],
    )


@pytest.fixture
def export_line():
    """Serialize an export to a single JSON line."""

    def _line(export: dict[str, Any]) -> str:
        return json.dumps(export)

    return _line


@pytest.fixture
async def db_session():
    """Create a test database session with in-memory SQLite."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with async_session() as session:
        yield session
        await session.rollback()

    await engine.dispose()


@pytest.fixture
def export_factory():
    """Build Pathbuilder exports with selected build keys overridden."""
    return make_export
