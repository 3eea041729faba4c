import pytest

from charforge.errors import NotFound, PreconditionViolated
from charforge.models import Ability, WeaponProficiency
from charforge.models.types import Size


def _scores(engine, pc):
    s = engine.effective_attributes(pc)
    return s.str, s.dex, s.int


def test_race_swap_fully_undoes_old_race(engine, pc):
    engine.set_race(pc, "Elf")
    assert engine.effective_attribute(pc, "dex") == 12
    assert engine.effective_attribute(pc, "int") == 11

    engine.set_race(pc, "Dwarf")
    assert _scores(engine, pc) == (12, 10, 9)
    # base scores were never touched
    assert pc.abilities.dex == 10 and pc.abilities.int == 10


def test_race_lookup_is_case_insensitive(engine, pc):
    engine.set_race(pc, "elf")
    assert pc.race == "Elf"


def test_subrace_stacks_on_race(engine, pc):
    engine.set_race(pc, "Elf")
    engine.set_subrace(pc, "High Elf")
    assert engine.effective_attribute(pc, Ability.INT) == 12
    assert engine.is_proficient(pc, WeaponProficiency(name="longsword"))
    engine.set_subrace(pc, "Wood Elf")
    assert engine.effective_attribute(pc, Ability.INT) == 11
    assert engine.effective_attribute(pc, Ability.WIS) == 11
    assert not engine.is_proficient(pc, WeaponProficiency(name="longsword"))


def test_switching_race_clears_subrace(engine, pc):
    engine.set_race(pc, "Elf")
    engine.set_subrace(pc, "High Elf")
    engine.set_race(pc, "Dwarf")
    assert pc.subrace is None
    assert _scores(engine, pc) == (12, 10, 9)


def test_clear_race_removes_everything(engine, pc):
    engine.set_race(pc, "Dwarf")
    engine.set_subrace(pc, "Hill Dwarf")
    engine.clear_race(pc)
    assert pc.race is None and pc.subrace is None
    assert engine.effective_attributes(pc) == pc.abilities
    assert engine.speed(pc) == 30
    assert engine.languages(pc) == set()


def test_unknown_race_leaves_character_unchanged(engine, pc):
    engine.set_race(pc, "Elf")
    engine.set_subrace(pc, "High Elf")
    before = pc.model_copy(deep=True)
    with pytest.raises(NotFound) as ei:
        engine.set_race(pc, "Tiefling")
    assert ei.value.kind == "race"
    assert pc == before


def test_subrace_needs_race(engine, pc):
    with pytest.raises(PreconditionViolated):
        engine.set_subrace(pc, "High Elf")


def test_subrace_must_belong_to_race(engine, pc):
    engine.set_race(pc, "Dwarf")
    with pytest.raises(NotFound):
        engine.set_subrace(pc, "High Elf")
    assert pc.subrace is None


def test_size_and_speed(engine, pc):
    assert engine.size(pc) == Size.MEDIUM
    assert engine.speed(pc) == 30
    engine.set_race(pc, "Dwarf")
    assert engine.speed(pc) == 25
