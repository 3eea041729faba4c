"""Trait providers: races, subraces, classes, subclasses and feats.

A provider is an immutable bundle of bonuses and grants. Providers never touch
a character; the rules engine reads them and overlays their effects.
"""
from __future__ import annotations

from typing import Annotated, Dict, FrozenSet, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .types import (
    Ability,
    ArmorCategory,
    Die,
    Size,
    SkillLevel,
    SpellcastingTier,
    WeaponCategory,
    normalize_skill,
)


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


# --- Combat proficiencies -----------------------------------------------------


class WeaponProficiency(_Frozen):
    kind: Literal["weapon"] = "weapon"
    name: str

    @field_validator("name")
    @classmethod
    def _lower(cls, v: str) -> str:
        return v.strip().lower()


class WeaponCategoryProficiency(_Frozen):
    kind: Literal["weapon_category"] = "weapon_category"
    category: WeaponCategory


class ArmorCategoryProficiency(_Frozen):
    kind: Literal["armor_category"] = "armor_category"
    category: ArmorCategory


CombatProficiency = Annotated[
    Union[WeaponProficiency, WeaponCategoryProficiency, ArmorCategoryProficiency],
    Field(discriminator="kind"),
]


# --- Feat effects and prerequisites --------------------------------------------


class AbilityIncrease(_Frozen):
    kind: Literal["ability_increase"] = "ability_increase"
    ability: Ability
    amount: int = 1


class SkillProficiencyGrant(_Frozen):
    kind: Literal["skill_proficiency"] = "skill_proficiency"
    skill: str
    level: SkillLevel = SkillLevel.PROFICIENT

    @field_validator("skill")
    @classmethod
    def _norm(cls, v: str) -> str:
        return normalize_skill(v)


class LanguageGrant(_Frozen):
    kind: Literal["language"] = "language"
    language: str


class CombatProficiencyGrant(_Frozen):
    kind: Literal["combat_proficiency"] = "combat_proficiency"
    proficiency: CombatProficiency


Effect = Annotated[
    Union[AbilityIncrease, SkillProficiencyGrant, LanguageGrant, CombatProficiencyGrant],
    Field(discriminator="kind"),
]


class MinimumAbility(_Frozen):
    kind: Literal["minimum_ability"] = "minimum_ability"
    ability: Ability
    score: int


class MinimumLevel(_Frozen):
    kind: Literal["minimum_level"] = "minimum_level"
    level: int


class RequiresRace(_Frozen):
    kind: Literal["race"] = "race"
    race: str


class RequiresFeat(_Frozen):
    kind: Literal["feat"] = "feat"
    feat: str


Prerequisite = Annotated[
    Union[MinimumAbility, MinimumLevel, RequiresRace, RequiresFeat],
    Field(discriminator="kind"),
]


# --- Providers -------------------------------------------------------------


class TraitProvider(_Frozen):
    """Fields shared by every provider."""

    name: str = Field(min_length=1)
    description: str = ""
    attribute_bonuses: Dict[Ability, int] = {}
    languages: FrozenSet[str] = frozenset()
    skill_proficiencies: FrozenSet[str] = frozenset()
    combat_proficiencies: FrozenSet[CombatProficiency] = frozenset()
    feats: FrozenSet[str] = frozenset()

    @field_validator("skill_proficiencies", mode="before")
    @classmethod
    def _norm_skills(cls, v):
        return frozenset(normalize_skill(s) for s in (v or ()))

    def skill_grants(self) -> Dict[str, SkillLevel]:
        return {s: SkillLevel.PROFICIENT for s in self.skill_proficiencies}


class Subrace(TraitProvider):
    pass


def _by_name(model, entries) -> dict:
    # Validate first so a nameless or malformed entry is a ValidationError.
    validated = [model.model_validate(e) for e in entries]
    return {m.name: m for m in validated}


class Race(TraitProvider):
    size: Size = Size.MEDIUM
    speed: int = 30
    subraces: Dict[str, Subrace] = {}

    @field_validator("subraces", mode="before")
    @classmethod
    def _key_subraces(cls, v):
        # Packs may list subraces; index them by name either way.
        if isinstance(v, (list, tuple)):
            v = _by_name(Subrace, v)
        return v

    def get_subrace(self, name: str) -> Optional[Subrace]:
        wanted = name.lower()
        for key, sub in self.subraces.items():
            if key.lower() == wanted:
                return sub
        return None


class Subclass(TraitProvider):
    # Overrides the parent class when set (Eldritch Knight, Arcane Trickster).
    spellcasting: Optional[SpellcastingTier] = None
    spellcasting_ability: Optional[Ability] = None


class CharacterClass(TraitProvider):
    hit_die: Die = Die.D8
    saving_throws: FrozenSet[Ability] = frozenset()
    spellcasting: SpellcastingTier = SpellcastingTier.NONE
    spellcasting_ability: Optional[Ability] = None
    subclasses: Dict[str, Subclass] = {}

    @field_validator("hit_die", mode="before")
    @classmethod
    def _parse_die(cls, v):
        return Die(v) if isinstance(v, str) else v

    @field_validator("subclasses", mode="before")
    @classmethod
    def _key_subclasses(cls, v):
        if isinstance(v, (list, tuple)):
            v = _by_name(Subclass, v)
        return v

    def get_subclass(self, name: str) -> Optional[Subclass]:
        wanted = name.lower()
        for key, sub in self.subclasses.items():
            if key.lower() == wanted:
                return sub
        return None


class Feat(TraitProvider):
    prerequisites: List[Prerequisite] = []
    effects: List[Effect] = []

    def grants(self) -> TraitProvider:
        """Fold the tagged effects into the plain provider bundle shape."""
        bonuses = dict(self.attribute_bonuses)
        languages = set(self.languages)
        combat = set(self.combat_proficiencies)
        for effect in self.effects:
            if isinstance(effect, AbilityIncrease):
                bonuses[effect.ability] = bonuses.get(effect.ability, 0) + effect.amount
            elif isinstance(effect, LanguageGrant):
                languages.add(effect.language)
            elif isinstance(effect, CombatProficiencyGrant):
                combat.add(effect.proficiency)
        return TraitProvider(
            name=self.name,
            attribute_bonuses=bonuses,
            languages=frozenset(languages),
            skill_proficiencies=self.skill_proficiencies,
            combat_proficiencies=frozenset(combat),
            feats=self.feats,
        )

    def skill_grants(self) -> Dict[str, SkillLevel]:
        out = super().skill_grants()
        for effect in self.effects:
            if isinstance(effect, SkillProficiencyGrant):
                if effect.level == SkillLevel.EXPERT or effect.skill not in out:
                    out[effect.skill] = effect.level
        return out


__all__ = [
    "WeaponProficiency",
    "WeaponCategoryProficiency",
    "ArmorCategoryProficiency",
    "CombatProficiency",
    "AbilityIncrease",
    "SkillProficiencyGrant",
    "LanguageGrant",
    "CombatProficiencyGrant",
    "Effect",
    "MinimumAbility",
    "MinimumLevel",
    "RequiresRace",
    "RequiresFeat",
    "Prerequisite",
    "TraitProvider",
    "Race",
    "Subrace",
    "CharacterClass",
    "Subclass",
    "Feat",
]
