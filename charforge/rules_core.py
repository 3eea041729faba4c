from __future__ import annotations

from typing import Dict, Tuple

from charforge.errors import InvalidLevel
from charforge.models.abilities import mod
from charforge.models.character import SpellSlots
from charforge.models.types import Ability, Die, SpellcastingTier

MIN_LEVEL = 1
MAX_LEVEL = 20

# Defaults used when nothing is selected
DEFAULT_HIT_DIE = Die.D20
DEFAULT_SPEED = 30

# Fallback casting ability when a class record does not name one (SRD baseline)
CASTING_ABILITY: Dict[str, Ability] = {
    "Wizard": Ability.INT,
    "Cleric": Ability.WIS,
    "Druid": Ability.WIS,
    "Bard": Ability.CHA,
    "Sorcerer": Ability.CHA,
    "Warlock": Ability.CHA,
    "Paladin": Ability.CHA,
    "Ranger": Ability.WIS,
    "Artificer": Ability.INT,
}

_NO_SLOTS = (0, 0, 0, 0, 0, 0, 0, 0, 0)

# Full caster slots per character level (l1..l9)
FULL_CASTER_SLOTS = {
    1: (2, 0, 0, 0, 0, 0, 0, 0, 0),
    2: (3, 0, 0, 0, 0, 0, 0, 0, 0),
    3: (4, 2, 0, 0, 0, 0, 0, 0, 0),
    4: (4, 3, 0, 0, 0, 0, 0, 0, 0),
    5: (4, 3, 2, 0, 0, 0, 0, 0, 0),
    6: (4, 3, 3, 0, 0, 0, 0, 0, 0),
    7: (4, 3, 3, 1, 0, 0, 0, 0, 0),
    8: (4, 3, 3, 2, 0, 0, 0, 0, 0),
    9: (4, 3, 3, 3, 1, 0, 0, 0, 0),
    10: (4, 3, 3, 3, 2, 0, 0, 0, 0),
    11: (4, 3, 3, 3, 2, 1, 0, 0, 0),
    12: (4, 3, 3, 3, 2, 1, 0, 0, 0),
    13: (4, 3, 3, 3, 2, 1, 1, 0, 0),
    14: (4, 3, 3, 3, 2, 1, 1, 0, 0),
    15: (4, 3, 3, 3, 2, 1, 1, 1, 0),
    16: (4, 3, 3, 3, 2, 1, 1, 1, 0),
    17: (4, 3, 3, 3, 2, 1, 1, 1, 1),
    18: (4, 3, 3, 3, 3, 1, 1, 1, 1),
    19: (4, 3, 3, 3, 3, 2, 1, 1, 1),
    20: (4, 3, 3, 3, 3, 2, 2, 1, 1),
}

# Paladin / Ranger progression
HALF_CASTER_SLOTS = {
    1: _NO_SLOTS,
    2: (2, 0, 0, 0, 0, 0, 0, 0, 0),
    3: (3, 0, 0, 0, 0, 0, 0, 0, 0),
    4: (3, 0, 0, 0, 0, 0, 0, 0, 0),
    5: (4, 2, 0, 0, 0, 0, 0, 0, 0),
    6: (4, 2, 0, 0, 0, 0, 0, 0, 0),
    7: (4, 3, 0, 0, 0, 0, 0, 0, 0),
    8: (4, 3, 0, 0, 0, 0, 0, 0, 0),
    9: (4, 3, 2, 0, 0, 0, 0, 0, 0),
    10: (4, 3, 2, 0, 0, 0, 0, 0, 0),
    11: (4, 3, 3, 0, 0, 0, 0, 0, 0),
    12: (4, 3, 3, 0, 0, 0, 0, 0, 0),
    13: (4, 3, 3, 1, 0, 0, 0, 0, 0),
    14: (4, 3, 3, 1, 0, 0, 0, 0, 0),
    15: (4, 3, 3, 2, 0, 0, 0, 0, 0),
    16: (4, 3, 3, 2, 0, 0, 0, 0, 0),
    17: (4, 3, 3, 3, 1, 0, 0, 0, 0),
    18: (4, 3, 3, 3, 1, 0, 0, 0, 0),
    19: (4, 3, 3, 3, 2, 0, 0, 0, 0),
    20: (4, 3, 3, 3, 2, 0, 0, 0, 0),
}

# Eldritch Knight / Arcane Trickster progression
THIRD_CASTER_SLOTS = {
    1: _NO_SLOTS,
    2: _NO_SLOTS,
    3: (2, 0, 0, 0, 0, 0, 0, 0, 0),
    4: (3, 0, 0, 0, 0, 0, 0, 0, 0),
    5: (3, 0, 0, 0, 0, 0, 0, 0, 0),
    6: (3, 0, 0, 0, 0, 0, 0, 0, 0),
    7: (4, 2, 0, 0, 0, 0, 0, 0, 0),
    8: (4, 2, 0, 0, 0, 0, 0, 0, 0),
    9: (4, 2, 0, 0, 0, 0, 0, 0, 0),
    10: (4, 3, 0, 0, 0, 0, 0, 0, 0),
    11: (4, 3, 0, 0, 0, 0, 0, 0, 0),
    12: (4, 3, 0, 0, 0, 0, 0, 0, 0),
    13: (4, 3, 2, 0, 0, 0, 0, 0, 0),
    14: (4, 3, 2, 0, 0, 0, 0, 0, 0),
    15: (4, 3, 2, 0, 0, 0, 0, 0, 0),
    16: (4, 3, 3, 0, 0, 0, 0, 0, 0),
    17: (4, 3, 3, 0, 0, 0, 0, 0, 0),
    18: (4, 3, 3, 0, 0, 0, 0, 0, 0),
    19: (4, 3, 3, 1, 0, 0, 0, 0, 0),
    20: (4, 3, 3, 1, 0, 0, 0, 0, 0),
}

_TABLES: Dict[SpellcastingTier, Dict[int, Tuple[int, ...]]] = {
    SpellcastingTier.FULL: FULL_CASTER_SLOTS,
    SpellcastingTier.HALF: HALF_CASTER_SLOTS,
    SpellcastingTier.THIRD: THIRD_CASTER_SLOTS,
}


def check_level(level: int) -> int:
    if not MIN_LEVEL <= level <= MAX_LEVEL:
        raise InvalidLevel(level)
    return level


def prof_bonus(level: int) -> int:
    """5e proficiency bonus: 1–4:+2, 5–8:+3, 9–12:+4, 13–16:+5, 17–20:+6."""
    return 2 + ((level - 1) // 4)


def spell_slots_for(level: int, tier: SpellcastingTier) -> SpellSlots:
    check_level(level)
    table = _TABLES.get(SpellcastingTier(tier))
    if table is None:
        return SpellSlots()
    return SpellSlots.from_tuple(table[level])


__all__ = [
    "MIN_LEVEL",
    "MAX_LEVEL",
    "DEFAULT_HIT_DIE",
    "DEFAULT_SPEED",
    "CASTING_ABILITY",
    "FULL_CASTER_SLOTS",
    "HALF_CASTER_SLOTS",
    "THIRD_CASTER_SLOTS",
    "check_level",
    "mod",
    "prof_bonus",
    "spell_slots_for",
]
