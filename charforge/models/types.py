from __future__ import annotations

from enum import Enum
from typing import Dict, Tuple


class Ability(str, Enum):
    STR = "str"
    DEX = "dex"
    CON = "con"
    INT = "int"
    WIS = "wis"
    CHA = "cha"

    @classmethod
    def _missing_(cls, value):
        # Short form or full name, any case: "Str", "STR", "Strength".
        if isinstance(value, str):
            key = value.strip().lower()
            for member in cls:
                if key in (member.value, _FULL_NAMES[member].lower()):
                    return member
        return None

    @property
    def full_name(self) -> str:
        return _FULL_NAMES[self]


_FULL_NAMES = {
    Ability.STR: "Strength",
    Ability.DEX: "Dexterity",
    Ability.CON: "Constitution",
    Ability.INT: "Intelligence",
    Ability.WIS: "Wisdom",
    Ability.CHA: "Charisma",
}

ABILITY_ORDER: Tuple[Ability, ...] = tuple(Ability)


class _LooseEnum(str, Enum):
    """String enum that parses its values case-insensitively."""

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            key = value.strip().lower().replace(" ", "_")
            for member in cls:
                if member.value == key:
                    return member
        return None


class Size(_LooseEnum):
    TINY = "tiny"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    HUGE = "huge"
    GARGANTUAN = "gargantuan"


class Die(int, Enum):
    D4 = 4
    D6 = 6
    D8 = 8
    D10 = 10
    D12 = 12
    D20 = 20

    @classmethod
    def _missing_(cls, value):
        # "d8" / "D8" as well as 8
        if isinstance(value, str) and value.lower().startswith("d") and value[1:].isdigit():
            return cls(int(value[1:]))
        return None

    def __str__(self) -> str:
        return f"d{self.value}"


class SkillLevel(_LooseEnum):
    NONE = "none"
    PROFICIENT = "proficient"
    EXPERT = "expert"


class WeaponCategory(_LooseEnum):
    SIMPLE = "simple"
    MARTIAL = "martial"


class WeaponKind(_LooseEnum):
    MELEE = "melee"
    RANGED = "ranged"


class ArmorCategory(_LooseEnum):
    LIGHT = "light"
    MEDIUM = "medium"
    HEAVY = "heavy"
    SHIELD = "shield"


class SpellcastingTier(_LooseEnum):
    NONE = "none"
    THIRD = "third"
    HALF = "half"
    FULL = "full"


class SpellLevel(int, Enum):
    CANTRIP = 0
    FIRST = 1
    SECOND = 2
    THIRD = 3
    FOURTH = 4
    FIFTH = 5
    SIXTH = 6
    SEVENTH = 7
    EIGHTH = 8
    NINTH = 9


class SpellSchool(_LooseEnum):
    ABJURATION = "abjuration"
    CONJURATION = "conjuration"
    DIVINATION = "divination"
    ENCHANTMENT = "enchantment"
    EVOCATION = "evocation"
    ILLUSION = "illusion"
    NECROMANCY = "necromancy"
    TRANSMUTATION = "transmutation"


class Alignment(_LooseEnum):
    LAWFUL_GOOD = "lawful_good"
    NEUTRAL_GOOD = "neutral_good"
    CHAOTIC_GOOD = "chaotic_good"
    LAWFUL_NEUTRAL = "lawful_neutral"
    TRUE_NEUTRAL = "true_neutral"
    CHAOTIC_NEUTRAL = "chaotic_neutral"
    LAWFUL_EVIL = "lawful_evil"
    NEUTRAL_EVIL = "neutral_evil"
    CHAOTIC_EVIL = "chaotic_evil"
    UNALIGNED = "unaligned"


# Standard skills and the ability each one keys off.
SKILL_ABILITY: Dict[str, Ability] = {
    "athletics": Ability.STR,
    "acrobatics": Ability.DEX,
    "sleight_of_hand": Ability.DEX,
    "stealth": Ability.DEX,
    "arcana": Ability.INT,
    "history": Ability.INT,
    "investigation": Ability.INT,
    "nature": Ability.INT,
    "religion": Ability.INT,
    "animal_handling": Ability.WIS,
    "insight": Ability.WIS,
    "medicine": Ability.WIS,
    "perception": Ability.WIS,
    "survival": Ability.WIS,
    "deception": Ability.CHA,
    "intimidation": Ability.CHA,
    "performance": Ability.CHA,
    "persuasion": Ability.CHA,
}

SKILLS: Tuple[str, ...] = tuple(sorted(SKILL_ABILITY))

# Tool proficiencies behave like skills without a fixed ability.
# Parameterised tools are written "gaming_set:dice", "musical_instrument:lute",
# "vehicle:water".
TOOL_SKILLS: Tuple[str, ...] = (
    "alchemist_tools",
    "brewer_tools",
    "calligrapher_tools",
    "carpenter_tools",
    "cartographer_tools",
    "cobbler_tools",
    "cook_tools",
    "glassblower_tools",
    "jeweler_tools",
    "leatherworker_tools",
    "mason_tools",
    "painter_tools",
    "potter_tools",
    "smith_tools",
    "tinker_tools",
    "weaver_tools",
    "woodcarver_tools",
    "disguise_kit",
    "forgery_kit",
    "herbalism_kit",
    "navigator_tools",
    "poisoner_kit",
    "thieves_tools",
)

PARAMETERISED_TOOLS: Tuple[str, ...] = ("gaming_set", "musical_instrument", "vehicle")


def normalize_skill(name: str) -> str:
    """Canonical skill key: lower case, underscores, parameter kept verbatim."""
    base, sep, param = name.strip().partition(":")
    key = base.strip().lower().replace(" ", "_").replace("'", "")
    return f"{key}:{param.strip()}" if sep else key


__all__ = [
    "Ability",
    "ABILITY_ORDER",
    "Size",
    "Die",
    "SkillLevel",
    "WeaponCategory",
    "WeaponKind",
    "ArmorCategory",
    "SpellcastingTier",
    "SpellLevel",
    "SpellSchool",
    "Alignment",
    "SKILL_ABILITY",
    "SKILLS",
    "TOOL_SKILLS",
    "PARAMETERISED_TOOLS",
    "normalize_skill",
]
