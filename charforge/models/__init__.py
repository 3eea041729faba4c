from .abilities import Abilities, mod  # noqa: F401
from .character import PlayerCharacter, SpellSlots  # noqa: F401
from .providers import (  # noqa: F401
    ArmorCategoryProficiency,
    CharacterClass,
    Feat,
    Race,
    Subclass,
    Subrace,
    WeaponCategoryProficiency,
    WeaponProficiency,
)
from .types import Ability, SkillLevel, SpellcastingTier  # noqa: F401

__all__ = [
    "Abilities",
    "mod",
    "PlayerCharacter",
    "SpellSlots",
    "ArmorCategoryProficiency",
    "CharacterClass",
    "Feat",
    "Race",
    "Subclass",
    "Subrace",
    "WeaponCategoryProficiency",
    "WeaponProficiency",
    "Ability",
    "SkillLevel",
    "SpellcastingTier",
]
