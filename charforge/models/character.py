from __future__ import annotations

from typing import Dict, Optional, Set

from pydantic import BaseModel, ConfigDict, Field

from .abilities import Abilities
from .providers import CombatProficiency
from .types import Ability, Alignment, SkillLevel, normalize_skill


class SpellSlots(BaseModel):
    # 1..9 levels; 0 means none
    l1: int = 0
    l2: int = 0
    l3: int = 0
    l4: int = 0
    l5: int = 0
    l6: int = 0
    l7: int = 0
    l8: int = 0
    l9: int = 0

    @classmethod
    def from_tuple(cls, counts) -> "SpellSlots":
        return cls(**{f"l{i}": n for i, n in enumerate(counts, start=1)})

    def get(self, spell_level: int) -> int:
        if spell_level == 0:
            return 0
        return getattr(self, f"l{int(spell_level)}")

    def as_tuple(self) -> tuple:
        return tuple(self.get(i) for i in range(1, 10))

    @property
    def total(self) -> int:
        return sum(self.as_tuple())


class PlayerCharacter(BaseModel):
    """The character aggregate.

    Holds base scores, the names of the selected providers and the choices the
    player made directly. Race/class/feat data is referenced by name only and
    resolved against a datastore by the rules engine; nothing in here knows
    about bonuses.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    alignment: Optional[Alignment] = None
    level: int = Field(default=1, ge=1, le=20)
    abilities: Abilities = Field(default_factory=Abilities)

    race: Optional[str] = None
    subrace: Optional[str] = None
    class_: Optional[str] = Field(default=None, alias="class")
    subclass: Optional[str] = None
    feats: Set[str] = set()

    # Player choices (explicit, not granted by any provider)
    languages: Set[str] = set()
    skills: Dict[str, SkillLevel] = {}
    combat_proficiencies: Set[CombatProficiency] = set()
    saving_throws: Set[Ability] = set()
    spells: Dict[str, Ability] = {}

    # --- Plain accessors ---
    def explicit_skill_level(self, skill: str) -> SkillLevel:
        return self.skills.get(normalize_skill(skill), SkillLevel.NONE)

    def learned_feat(self, feat: str) -> bool:
        return feat.lower() in {f.lower() for f in self.feats}


__all__ = ["PlayerCharacter", "SpellSlots"]
