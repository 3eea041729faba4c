import pytest

from charforge.codex import Weapon
from charforge.errors import NotFound, PreconditionViolated
from charforge.models import WeaponCategoryProficiency, WeaponProficiency
from charforge.models.types import WeaponCategory


def _sword():
    return Weapon(
        name="Longsword",
        category="martial",
        kind="melee",
        damage="1d8",
        damage_type="slashing",
        properties=["versatile:1d10"],
    )


def _bow():
    return Weapon(
        name="Longbow",
        category="martial",
        kind="ranged",
        damage="1d8",
        damage_type="piercing",
        properties=["ammunition", "heavy", "two-handed", "range:150/600"],
    )


@pytest.fixture
def armed(toy_store, engine, pc):
    toy_store.add_weapon(_sword())
    toy_store.add_weapon(_bow())
    engine.set_attribute(pc, "str", 16)
    engine.set_attribute(pc, "dex", 12)
    return engine, pc


def test_untrained_attack_uses_ability_only(armed):
    engine, pc = armed
    assert engine.attack_modifier(pc, "Longsword") == 3
    assert engine.attack_modifier(pc, "longbow") == 1


def test_proficiency_from_character(armed):
    engine, pc = armed
    engine.add_combat_proficiency(pc, WeaponProficiency(name="Longsword"))
    assert engine.attack_modifier(pc, "Longsword") == 3 + 2


def test_proficiency_from_subrace(armed):
    engine, pc = armed
    engine.set_race(pc, "Elf")
    engine.set_subrace(pc, "High Elf")
    # Elf Dex +2 moves the bow too
    assert engine.attack_modifier(pc, "Longsword") == 3 + 2
    assert engine.attack_modifier(pc, "Longbow") == 2


def test_proficiency_from_class_category(armed):
    engine, pc = armed
    engine.set_class(pc, "Fighter")
    assert engine.attack_modifier(pc, "Longbow") == 1 + 2
    assert engine.attack_modifier(pc, _sword()) == 3 + 2


def test_removing_one_source_keeps_bonus(armed):
    engine, pc = armed
    engine.set_class(pc, "Fighter")
    engine.set_race(pc, "Elf")
    engine.set_subrace(pc, "High Elf")
    engine.clear_race(pc)
    assert engine.attack_modifier(pc, "Longsword") == 5
    engine.add_combat_proficiency(pc, WeaponCategoryProficiency(category=WeaponCategory.MARTIAL))
    engine.clear_class(pc)
    assert engine.attack_modifier(pc, "Longsword") == 5
    engine.remove_combat_proficiency(pc, WeaponCategoryProficiency(category="martial"))
    assert engine.attack_modifier(pc, "Longsword") == 3


def test_remove_unchosen_proficiency(engine, pc):
    with pytest.raises(PreconditionViolated):
        engine.remove_combat_proficiency(pc, WeaponProficiency(name="dagger"))


def test_unknown_weapon(engine, pc):
    with pytest.raises(NotFound):
        engine.attack_modifier(pc, "Vorpal Spoon")


def test_finesse_melee_uses_strength_by_default(srd_engine, pc, monkeypatch):
    monkeypatch.delenv("CHARFORGE_FINESSE_BEST_OF", raising=False)
    srd_engine.set_attribute(pc, "str", 8)
    srd_engine.set_attribute(pc, "dex", 16)
    assert srd_engine.attack_modifier(pc, "Rapier") == -1
    assert srd_engine.attack_modifier(pc, "Shortbow") == 3


def test_finesse_best_of_is_opt_in(srd_engine, pc, monkeypatch):
    monkeypatch.setenv("CHARFORGE_FINESSE_BEST_OF", "true")
    srd_engine.set_attribute(pc, "str", 8)
    srd_engine.set_attribute(pc, "dex", 16)
    assert srd_engine.attack_modifier(pc, "Rapier") == 3
    # no finesse property, so still Strength
    assert srd_engine.attack_modifier(pc, "Longsword") == -1


def test_proficiency_from_race_alone(srd_engine, pc):
    srd_engine.set_attribute(pc, "str", 14)
    assert srd_engine.attack_modifier(pc, "Warhammer") == 2
    srd_engine.set_race(pc, "Dwarf")
    assert pc.subrace is None
    assert srd_engine.attack_modifier(pc, "Warhammer") == 2 + 2
    srd_engine.clear_race(pc)
    assert srd_engine.attack_modifier(pc, "Warhammer") == 2


def test_armor_by_category(srd_engine, pc):
    srd_engine.set_class(pc, "Cleric")
    assert srd_engine.is_proficient_with_armor(pc, "Chain Shirt")
    assert srd_engine.is_proficient_with_armor(pc, "Shield")
    assert not srd_engine.is_proficient_with_armor(pc, "Plate")
    srd_engine.set_subclass(pc, "Life Domain")
    assert srd_engine.is_proficient_with_armor(pc, "Plate")


def test_overlapping_languages(engine, pc):
    engine.set_race(pc, "Elf")
    engine.learn_feat(pc, "Brawny")
    engine.add_language(pc, "Elvish")
    engine.unlearn_feat(pc, "Brawny")
    assert engine.speaks(pc, "Elvish")
    engine.remove_language(pc, "Elvish")
    assert engine.speaks(pc, "Elvish")  # the race still grants it
    engine.clear_race(pc)
    assert engine.languages(pc) == set()


def test_remove_granted_language_is_rejected(engine, pc):
    engine.set_race(pc, "Dwarf")
    with pytest.raises(PreconditionViolated):
        engine.remove_language(pc, "Dwarvish")
