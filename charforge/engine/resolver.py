"""Rules resolution for player characters.

Bonuses are overlaid at read time: a character stores its base scores and the
*names* of its race, subrace, class, subclass and feats, and every derived
value is recomputed from the providers that are active right now. Applying a
provider is recording its name after validation; reversing it is dropping the
name. Undo is therefore exact, and a grant that two providers share survives
the removal of either one.

Every mutation checks everything it needs before it writes, so a raised error
leaves the character untouched.
"""
from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Set, Tuple, Union

from charforge.codex import Armor, Datastore, Spell, Weapon
from charforge.errors import CharacterError, NotFound, PreconditionViolated
from charforge.logging import get_logger
from charforge.models.abilities import Abilities, mod
from charforge.models.character import PlayerCharacter, SpellSlots
from charforge.models.providers import (
    ArmorCategoryProficiency,
    CharacterClass,
    CombatProficiency,
    Feat,
    MinimumAbility,
    MinimumLevel,
    Race,
    RequiresFeat,
    RequiresRace,
    Subclass,
    Subrace,
    TraitProvider,
    WeaponCategoryProficiency,
    WeaponProficiency,
)
from charforge.models.types import (
    ABILITY_ORDER,
    PARAMETERISED_TOOLS,
    SKILL_ABILITY,
    SKILLS,
    TOOL_SKILLS,
    Ability,
    Alignment,
    Die,
    Size,
    SkillLevel,
    SpellcastingTier,
    normalize_skill,
)
from charforge.rules.config import finesse_best_of
from charforge.rules_core import (
    CASTING_ABILITY,
    DEFAULT_HIT_DIE,
    DEFAULT_SPEED,
    check_level,
    prof_bonus,
    spell_slots_for,
)

log = get_logger(__name__)

WeaponRef = Union[Weapon, str]
ArmorRef = Union[Armor, str]


class RulesEngine:
    """Applies provider choices to characters and answers rules queries."""

    def __init__(self, store: Optional[Datastore] = None):
        self.store = store if store is not None else Datastore.default()

    # --- Lookups (NotFound instead of None) ---

    def race(self, name: str) -> Race:
        race = self.store.get_race(name)
        if race is None:
            raise NotFound("race", name)
        return race

    def character_class(self, name: str) -> CharacterClass:
        klass = self.store.get_class(name)
        if klass is None:
            raise NotFound("class", name)
        return klass

    def feat(self, name: str) -> Feat:
        feat = self.store.get_feat(name)
        if feat is None:
            raise NotFound("feat", name)
        return feat

    def weapon(self, weapon: WeaponRef) -> Weapon:
        if isinstance(weapon, Weapon):
            return weapon
        found = self.store.get_weapon(weapon)
        if found is None:
            raise NotFound("weapon", weapon)
        return found

    def armor(self, armor: ArmorRef) -> Armor:
        if isinstance(armor, Armor):
            return armor
        found = self.store.get_armor(armor)
        if found is None:
            raise NotFound("armor", armor)
        return found

    def spell(self, name: str) -> Spell:
        spell = self.store.get_spell(name)
        if spell is None:
            raise NotFound("spell", name)
        return spell

    # --- Active providers ---

    def race_of(self, pc: PlayerCharacter) -> Optional[Race]:
        return self.race(pc.race) if pc.race else None

    def subrace_of(self, pc: PlayerCharacter) -> Optional[Subrace]:
        race = self.race_of(pc)
        if race is None or not pc.subrace:
            return None
        sub = race.get_subrace(pc.subrace)
        if sub is None:
            raise NotFound("subrace", pc.subrace)
        return sub

    def class_of(self, pc: PlayerCharacter) -> Optional[CharacterClass]:
        return self.character_class(pc.class_) if pc.class_ else None

    def subclass_of(self, pc: PlayerCharacter) -> Optional[Subclass]:
        klass = self.class_of(pc)
        if klass is None or not pc.subclass:
            return None
        sub = klass.get_subclass(pc.subclass)
        if sub is None:
            raise NotFound("subclass", pc.subclass)
        return sub

    def _core_providers(self, pc: PlayerCharacter) -> List[TraitProvider]:
        """Race, subrace, class, subclass; in resolution order, skipping unset."""
        found = [self.race_of(pc), self.subrace_of(pc), self.class_of(pc), self.subclass_of(pc)]
        return [p for p in found if p is not None]

    def active_feats(self, pc: PlayerCharacter) -> List[Feat]:
        """Feats granted by the core providers, then learned feats.

        Feats granted by feats follow their granter. Each feat counts once no
        matter how many sources grant it.
        """
        seen: Set[str] = set()
        out: List[Feat] = []

        def visit(name: str) -> None:
            key = name.lower()
            if key in seen:
                return
            seen.add(key)
            feat = self.feat(name)
            out.append(feat)
            for sub in sorted(feat.feats):
                visit(sub)

        for provider in self._core_providers(pc):
            for name in sorted(provider.feats):
                visit(name)
        for name in sorted(pc.feats):
            visit(name)
        return out

    def active_providers(self, pc: PlayerCharacter) -> List[TraitProvider]:
        return self._core_providers(pc) + list(self.active_feats(pc))

    def _bundles(self, pc: PlayerCharacter) -> Iterator[TraitProvider]:
        for provider in self.active_providers(pc):
            yield provider.grants() if isinstance(provider, Feat) else provider

    # --- Creation ---

    def create(
        self,
        name: str = "",
        abilities: Optional[Dict] = None,
        race: Optional[str] = None,
        subrace: Optional[str] = None,
        klass: Optional[str] = None,
        subclass: Optional[str] = None,
        level: int = 1,
        alignment: Optional[Alignment] = None,
    ) -> PlayerCharacter:
        """Build a character in one go. Nothing is returned if any step fails."""
        pc = PlayerCharacter(name=name, alignment=alignment)
        if abilities:
            pc.abilities = Abilities.from_mapping(abilities)
        self.set_level(pc, level)
        if race:
            self.set_race(pc, race)
        if subrace:
            self.set_subrace(pc, subrace)
        if klass:
            self.set_class(pc, klass)
        if subclass:
            self.set_subclass(pc, subclass)
        return pc

    # --- Race / subrace ---

    def set_race(self, pc: PlayerCharacter, name: str) -> None:
        race = self._check(pc, "set_race", lambda: self.race(name))
        pc.race = race.name
        pc.subrace = None
        log.debug("%s: race -> %s", pc.name or "<pc>", race.name)

    def clear_race(self, pc: PlayerCharacter) -> None:
        pc.subrace = None
        pc.race = None
        log.debug("%s: race cleared", pc.name or "<pc>")

    def set_subrace(self, pc: PlayerCharacter, name: str) -> None:
        def lookup() -> Subrace:
            if not pc.race:
                raise PreconditionViolated("Cannot set a subrace before a race")
            sub = self.race(pc.race).get_subrace(name)
            if sub is None:
                raise NotFound("subrace", name)
            return sub

        sub = self._check(pc, "set_subrace", lookup)
        pc.subrace = sub.name
        log.debug("%s: subrace -> %s", pc.name or "<pc>", sub.name)

    def clear_subrace(self, pc: PlayerCharacter) -> None:
        pc.subrace = None

    # --- Class / subclass ---

    def set_class(self, pc: PlayerCharacter, name: str) -> None:
        klass = self._check(pc, "set_class", lambda: self.character_class(name))
        pc.class_ = klass.name
        pc.subclass = None
        log.debug("%s: class -> %s", pc.name or "<pc>", klass.name)

    def clear_class(self, pc: PlayerCharacter) -> None:
        pc.subclass = None
        pc.class_ = None

    def set_subclass(self, pc: PlayerCharacter, name: str) -> None:
        def lookup() -> Subclass:
            if not pc.class_:
                raise PreconditionViolated("Cannot set a subclass before a class")
            sub = self.character_class(pc.class_).get_subclass(name)
            if sub is None:
                raise NotFound("subclass", name)
            return sub

        sub = self._check(pc, "set_subclass", lookup)
        pc.subclass = sub.name
        log.debug("%s: subclass -> %s", pc.name or "<pc>", sub.name)

    def clear_subclass(self, pc: PlayerCharacter) -> None:
        pc.subclass = None

    # --- Feats ---

    def unmet_prerequisites(self, pc: PlayerCharacter, feat: Feat) -> List[str]:
        unmet: List[str] = []
        for req in feat.prerequisites:
            if isinstance(req, MinimumAbility):
                have = self.effective_attribute(pc, req.ability)
                if have < req.score:
                    unmet.append(f"{req.ability.full_name} {req.score} required (have {have})")
            elif isinstance(req, MinimumLevel):
                if pc.level < req.level:
                    unmet.append(f"level {req.level} required (have {pc.level})")
            elif isinstance(req, RequiresRace):
                names = {n.lower() for n in (pc.race, pc.subrace) if n}
                if req.race.lower() not in names:
                    unmet.append(f"race {req.race} required")
            elif isinstance(req, RequiresFeat):
                if not self.has_feat(pc, req.feat):
                    unmet.append(f"feat {req.feat} required")
        return unmet

    def learn_feat(self, pc: PlayerCharacter, name: str) -> None:
        def lookup() -> Feat:
            feat = self.feat(name)
            if pc.learned_feat(feat.name):
                raise PreconditionViolated(f"{feat.name} is already learned")
            unmet = self.unmet_prerequisites(pc, feat)
            if unmet:
                raise PreconditionViolated(f"{feat.name}: " + "; ".join(unmet))
            # Sub-feats must resolve too, or the character would be left dangling.
            self.active_feats(pc.model_copy(update={"feats": pc.feats | {feat.name}}))
            return feat

        feat = self._check(pc, "learn_feat", lookup)
        pc.feats.add(feat.name)
        log.debug("%s: learned feat %s", pc.name or "<pc>", feat.name)

    def unlearn_feat(self, pc: PlayerCharacter, name: str) -> None:
        def lookup() -> str:
            for learned in pc.feats:
                if learned.lower() == name.lower():
                    return learned
            raise PreconditionViolated(f"{name} was never learned")

        learned = self._check(pc, "unlearn_feat", lookup)
        pc.feats.discard(learned)
        log.debug("%s: unlearned feat %s", pc.name or "<pc>", learned)

    def feats(self, pc: PlayerCharacter) -> Set[str]:
        return {f.name for f in self.active_feats(pc)}

    def has_feat(self, pc: PlayerCharacter, name: str) -> bool:
        return name.lower() in {f.lower() for f in self.feats(pc)}

    # --- Level, scores and explicit choices ---

    def set_level(self, pc: PlayerCharacter, level: int) -> None:
        self._check(pc, "set_level", lambda: check_level(level))
        pc.level = level

    def set_attribute(self, pc: PlayerCharacter, ability, score: int) -> None:
        pc.abilities.set(ability, score)

    def set_alignment(self, pc: PlayerCharacter, alignment) -> None:
        pc.alignment = Alignment(alignment)

    def add_language(self, pc: PlayerCharacter, language: str) -> None:
        pc.languages.add(language)

    def remove_language(self, pc: PlayerCharacter, language: str) -> None:
        def lookup() -> str:
            if language not in pc.languages:
                raise PreconditionViolated(f"{language} was not chosen by the player")
            return language

        pc.languages.discard(self._check(pc, "remove_language", lookup))

    def set_skill_level(self, pc: PlayerCharacter, skill: str, level) -> None:
        key = self._check(pc, "set_skill_level", lambda: self.skill_key(skill))
        level = SkillLevel(level)
        if level == SkillLevel.NONE:
            pc.skills.pop(key, None)
        else:
            pc.skills[key] = level

    def add_combat_proficiency(self, pc: PlayerCharacter, prof: CombatProficiency) -> None:
        pc.combat_proficiencies.add(prof)

    def remove_combat_proficiency(self, pc: PlayerCharacter, prof: CombatProficiency) -> None:
        def lookup() -> CombatProficiency:
            if prof not in pc.combat_proficiencies:
                raise PreconditionViolated(f"{prof} was not chosen by the player")
            return prof

        pc.combat_proficiencies.discard(self._check(pc, "remove_combat_proficiency", lookup))

    def add_saving_throw(self, pc: PlayerCharacter, ability) -> None:
        pc.saving_throws.add(Ability(ability))

    # --- Spells ---

    def spellcasting_ability(self, pc: PlayerCharacter) -> Optional[Ability]:
        sub = self.subclass_of(pc)
        if sub is not None and sub.spellcasting_ability is not None:
            return sub.spellcasting_ability
        klass = self.class_of(pc)
        if klass is None:
            return None
        return klass.spellcasting_ability or CASTING_ABILITY.get(klass.name)

    def learn_spell(self, pc: PlayerCharacter, name: str, ability=None) -> None:
        def lookup() -> Tuple[Spell, Ability]:
            spell = self.spell(name)
            chosen = Ability(ability) if ability is not None else self.spellcasting_ability(pc)
            if chosen is None:
                raise PreconditionViolated(f"No spellcasting ability to learn {spell.name} with")
            return spell, chosen

        spell, chosen = self._check(pc, "learn_spell", lookup)
        pc.spells[spell.name] = chosen
        log.debug("%s: learned spell %s (%s)", pc.name or "<pc>", spell.name, chosen.value)

    def forget_spell(self, pc: PlayerCharacter, name: str) -> None:
        key = self._check(pc, "forget_spell", lambda: self._known_spell_key(pc, name))
        del pc.spells[key]

    def _known_spell_key(self, pc: PlayerCharacter, name: str) -> str:
        for known in pc.spells:
            if known.lower() == name.lower():
                return known
        raise PreconditionViolated(f"{name} is not a known spell")

    def spellcasting_tier(self, pc: PlayerCharacter) -> SpellcastingTier:
        sub = self.subclass_of(pc)
        if sub is not None and sub.spellcasting is not None:
            return sub.spellcasting
        klass = self.class_of(pc)
        return klass.spellcasting if klass is not None else SpellcastingTier.NONE

    def spell_slots(self, pc: PlayerCharacter) -> SpellSlots:
        return spell_slots_for(pc.level, self.spellcasting_tier(pc))

    def spell_attack_modifier(self, pc: PlayerCharacter, spell: str) -> int:
        ability = pc.spells[self._known_spell_key(pc, spell)]
        return self.ability_modifier(pc, ability) + self.proficiency_bonus(pc)

    def spell_save_dc(self, pc: PlayerCharacter, spell: str) -> int:
        return 8 + self.spell_attack_modifier(pc, spell)

    # --- Derived values ---

    def effective_attributes(self, pc: PlayerCharacter) -> Abilities:
        total: Dict[Ability, int] = {}
        for bundle in self._bundles(pc):
            for ability, delta in bundle.attribute_bonuses.items():
                total[ability] = total.get(ability, 0) + delta
        return pc.abilities.with_bonuses(total)

    def effective_attribute(self, pc: PlayerCharacter, ability) -> int:
        return self.effective_attributes(pc).get(ability)

    def ability_modifier(self, pc: PlayerCharacter, ability) -> int:
        return mod(self.effective_attribute(pc, ability))

    def proficiency_bonus(self, pc: PlayerCharacter) -> int:
        return prof_bonus(pc.level)

    def skill_level(self, pc: PlayerCharacter, skill: str) -> SkillLevel:
        """Explicit choice, then race, subrace, class, subclass, feats; first set wins."""
        key = normalize_skill(skill)
        explicit = pc.explicit_skill_level(key)
        if explicit != SkillLevel.NONE:
            return explicit
        for provider in self.active_providers(pc):
            level = provider.skill_grants().get(key, SkillLevel.NONE)
            if level != SkillLevel.NONE:
                return level
        return SkillLevel.NONE

    def skill_key(self, skill: str) -> str:
        """Canonical key of a standard skill, tool or custom skill; NotFound otherwise."""
        key = normalize_skill(skill)
        if (
            key in SKILL_ABILITY
            or key in TOOL_SKILLS
            or key.partition(":")[0] in PARAMETERISED_TOOLS
            or self.store.get_skill(key) is not None
        ):
            return key
        raise NotFound("skill", skill)

    def skill_ability(self, skill: str, ability=None) -> Ability:
        key = self.skill_key(skill)
        if ability is not None:
            return Ability(ability)
        custom = self.store.get_skill(key)
        if custom is not None:
            return custom
        if key in SKILL_ABILITY:
            return SKILL_ABILITY[key]
        raise PreconditionViolated(f"{skill} has no fixed ability; pass one")

    def skill_modifier(self, pc: PlayerCharacter, skill: str, ability=None) -> int:
        base = self.ability_modifier(pc, self.skill_ability(skill, ability))
        level = self.skill_level(pc, skill)
        pb = self.proficiency_bonus(pc)
        if level == SkillLevel.EXPERT:
            return base + 2 * pb
        if level == SkillLevel.PROFICIENT:
            return base + pb
        return base

    def saving_throws(self, pc: PlayerCharacter) -> Set[Ability]:
        saves = set(pc.saving_throws)
        klass = self.class_of(pc)
        if klass is not None:
            saves |= klass.saving_throws
        return saves

    def saving_throw_modifier(self, pc: PlayerCharacter, ability) -> int:
        ability = Ability(ability)
        bonus = self.proficiency_bonus(pc) if ability in self.saving_throws(pc) else 0
        return self.ability_modifier(pc, ability) + bonus

    def languages(self, pc: PlayerCharacter) -> Set[str]:
        langs = set(pc.languages)
        for bundle in self._bundles(pc):
            langs |= bundle.languages
        return langs

    def speaks(self, pc: PlayerCharacter, language: str) -> bool:
        return language.lower() in {l.lower() for l in self.languages(pc)}

    def combat_proficiencies(self, pc: PlayerCharacter) -> Set[CombatProficiency]:
        profs = set(pc.combat_proficiencies)
        for bundle in self._bundles(pc):
            profs |= bundle.combat_proficiencies
        return profs

    def is_proficient(self, pc: PlayerCharacter, prof: CombatProficiency) -> bool:
        return prof in self.combat_proficiencies(pc)

    def is_proficient_with_weapon(self, pc: PlayerCharacter, weapon: WeaponRef) -> bool:
        w = self.weapon(weapon)
        profs = self.combat_proficiencies(pc)
        return (
            WeaponProficiency(name=w.name) in profs
            or WeaponCategoryProficiency(category=w.weapon_category) in profs
        )

    def is_proficient_with_armor(self, pc: PlayerCharacter, armor: ArmorRef) -> bool:
        a = self.armor(armor)
        return ArmorCategoryProficiency(category=a.armor_category) in self.combat_proficiencies(pc)

    def attack_ability(self, pc: PlayerCharacter, weapon: WeaponRef) -> Ability:
        w = self.weapon(weapon)
        if w.ranged:
            return Ability.DEX
        if w.has_prop("finesse") and finesse_best_of():
            if self.ability_modifier(pc, Ability.DEX) > self.ability_modifier(pc, Ability.STR):
                return Ability.DEX
        return Ability.STR

    def attack_modifier(self, pc: PlayerCharacter, weapon: WeaponRef) -> int:
        w = self.weapon(weapon)
        bonus = self.proficiency_bonus(pc) if self.is_proficient_with_weapon(pc, w) else 0
        return self.ability_modifier(pc, self.attack_ability(pc, w)) + bonus

    def hit_die(self, pc: PlayerCharacter) -> Die:
        klass = self.class_of(pc)
        return klass.hit_die if klass is not None else DEFAULT_HIT_DIE

    def size(self, pc: PlayerCharacter) -> Size:
        race = self.race_of(pc)
        return race.size if race is not None else Size.MEDIUM

    def speed(self, pc: PlayerCharacter) -> int:
        race = self.race_of(pc)
        return race.speed if race is not None else DEFAULT_SPEED

    def summary(self, pc: PlayerCharacter) -> Dict[str, object]:
        """Every derived value as plain data, for whatever renders a sheet."""
        scores = self.effective_attributes(pc)
        return {
            "name": pc.name,
            "level": pc.level,
            "race": pc.race,
            "subrace": pc.subrace,
            "class": pc.class_,
            "subclass": pc.subclass,
            "alignment": pc.alignment.value if pc.alignment else None,
            "abilities": {a.value: scores.get(a) for a in ABILITY_ORDER},
            "modifiers": {a.value: mod(scores.get(a)) for a in ABILITY_ORDER},
            "proficiency_bonus": self.proficiency_bonus(pc),
            "saves": {a.value: self.saving_throw_modifier(pc, a) for a in ABILITY_ORDER},
            "skills": {s: self.skill_modifier(pc, s) for s in SKILLS},
            "languages": sorted(self.languages(pc)),
            "feats": sorted(self.feats(pc)),
            "hit_die": str(self.hit_die(pc)),
            "size": self.size(pc).value,
            "speed": self.speed(pc),
            "spell_slots": list(self.spell_slots(pc).as_tuple()),
            "spells": {name: ability.value for name, ability in sorted(pc.spells.items())},
        }

    # --- Internals ---

    def _check(self, pc: PlayerCharacter, op: str, fn):
        """Run a validation step; log and re-raise rejections."""
        try:
            return fn()
        except CharacterError as e:
            log.info("%s: %s rejected: %s", pc.name or "<pc>", op, e)
            raise


__all__ = ["RulesEngine"]
