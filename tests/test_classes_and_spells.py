import pytest

from charforge.errors import InvalidLevel, NotFound, PreconditionViolated
from charforge.models import Ability, SpellcastingTier
from charforge.models.types import Die


def test_hit_die_defaults_and_class(engine, pc):
    assert engine.hit_die(pc) == Die.D20
    engine.set_class(pc, "Wizard")
    assert engine.hit_die(pc) == Die.D6


def test_subclass_needs_class(engine, pc):
    with pytest.raises(PreconditionViolated):
        engine.set_subclass(pc, "Eldritch Knight")


def test_subclass_must_belong_to_class(engine, pc):
    engine.set_class(pc, "Wizard")
    with pytest.raises(NotFound):
        engine.set_subclass(pc, "Eldritch Knight")


def test_third_caster_subclass_overrides_tier(engine, pc):
    engine.set_class(pc, "Fighter")
    engine.set_level(pc, 3)
    assert engine.spellcasting_tier(pc) == SpellcastingTier.NONE
    assert engine.spell_slots(pc).total == 0
    engine.set_subclass(pc, "Eldritch Knight")
    assert engine.spellcasting_tier(pc) == SpellcastingTier.THIRD
    assert engine.spell_slots(pc).l1 == 2
    engine.set_class(pc, "Fighter")  # re-selecting clears the subclass
    assert pc.subclass is None
    assert engine.spell_slots(pc).total == 0


def test_full_caster_slots(engine, pc):
    engine.set_class(pc, "Wizard")
    assert engine.spell_slots(pc).as_tuple() == (2, 0, 0, 0, 0, 0, 0, 0, 0)
    engine.set_level(pc, 20)
    assert engine.spell_slots(pc).as_tuple() == (4, 3, 3, 3, 3, 2, 2, 1, 1)


def test_bad_level_keeps_old_level(engine, pc):
    engine.set_level(pc, 5)
    with pytest.raises(InvalidLevel):
        engine.set_level(pc, 21)
    assert pc.level == 5
    assert engine.proficiency_bonus(pc) == 3


def test_learn_spell_uses_class_ability(srd_engine, pc):
    srd_engine.set_class(pc, "Wizard")
    srd_engine.set_attribute(pc, "int", 16)
    srd_engine.learn_spell(pc, "fire bolt")
    assert pc.spells == {"Fire Bolt": Ability.INT}
    assert srd_engine.spell_attack_modifier(pc, "Fire Bolt") == 3 + 2
    assert srd_engine.spell_save_dc(pc, "fire bolt") == 8 + 3 + 2


def test_learn_spell_with_explicit_ability(srd_engine, pc):
    srd_engine.learn_spell(pc, "Bless", ability="cha")
    assert pc.spells["Bless"] == Ability.CHA


def test_learn_spell_without_caster(srd_engine, pc):
    with pytest.raises(PreconditionViolated):
        srd_engine.learn_spell(pc, "Magic Missile")
    assert pc.spells == {}


def test_unknown_spell(srd_engine, pc):
    srd_engine.set_class(pc, "Wizard")
    with pytest.raises(NotFound):
        srd_engine.learn_spell(pc, "Wish")


def test_forget_spell(srd_engine, pc):
    srd_engine.set_class(pc, "Cleric")
    srd_engine.learn_spell(pc, "Cure Wounds")
    srd_engine.forget_spell(pc, "cure wounds")
    assert pc.spells == {}
    with pytest.raises(PreconditionViolated):
        srd_engine.forget_spell(pc, "Cure Wounds")


def test_create_builds_in_one_go(srd_engine):
    pc = srd_engine.create(
        name="Elora",
        abilities={"str": 8, "dex": 14, "con": 12, "int": 15, "wis": 10, "cha": 12},
        race="Elf",
        subrace="High Elf",
        klass="Wizard",
        level=3,
    )
    assert srd_engine.effective_attribute(pc, "int") == 16
    assert srd_engine.hit_die(pc) == Die.D6
    assert srd_engine.spell_slots(pc).l2 == 2

    with pytest.raises(NotFound):
        srd_engine.create(race="Elf", subrace="Hill Dwarf")


def test_summary_is_plain_data(srd_engine):
    pc = srd_engine.create(name="Bruno", race="Dwarf", subrace="Hill Dwarf", klass="Fighter")
    sheet = srd_engine.summary(pc)
    assert sheet["abilities"]["con"] == 12
    assert sheet["abilities"]["wis"] == 11
    assert sheet["hit_die"] == "d10"
    assert sheet["speed"] == 25
    assert sheet["languages"] == ["Common", "Dwarvish"]
    assert sheet["saves"]["str"] == 2
    assert sheet["spell_slots"] == [0] * 9


def test_alignment_and_subclass_clearing(engine, pc):
    engine.set_alignment(pc, "Chaotic Good")
    assert pc.alignment.value == "chaotic_good"
    engine.set_class(pc, "Fighter")
    engine.set_subclass(pc, "eldritch knight")
    assert pc.subclass == "Eldritch Knight"
    engine.clear_subclass(pc)
    assert pc.class_ == "Fighter" and pc.subclass is None
