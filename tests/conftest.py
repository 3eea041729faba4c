import pytest

from charforge.codex import Datastore
from charforge.engine import RulesEngine
from charforge.models import CharacterClass, Feat, PlayerCharacter, Race


def _toy_store() -> Datastore:
    store = Datastore()
    store.add_race(
        Race.model_validate(
            {
                "name": "Elf",
                "attribute_bonuses": {"dex": 2, "int": 1},
                "languages": ["Common", "Elvish"],
                "skill_proficiencies": ["Perception"],
                "subraces": [
                    {
                        "name": "High Elf",
                        "attribute_bonuses": {"int": 1},
                        "combat_proficiencies": [{"kind": "weapon", "name": "Longsword"}],
                    },
                    {"name": "Wood Elf", "attribute_bonuses": {"wis": 1}},
                ],
            }
        )
    )
    store.add_race(
        Race.model_validate(
            {
                "name": "Dwarf",
                "attribute_bonuses": {"str": 2, "int": -1},
                "speed": 25,
                "languages": ["Common", "Dwarvish"],
                "subraces": [{"name": "Hill Dwarf", "attribute_bonuses": {"wis": 1}}],
            }
        )
    )
    store.add_class(
        CharacterClass.model_validate(
            {
                "name": "Wizard",
                "hit_die": "d6",
                "saving_throws": ["int", "wis"],
                "spellcasting": "full",
                "spellcasting_ability": "int",
            }
        )
    )
    store.add_class(
        CharacterClass.model_validate(
            {
                "name": "Fighter",
                "hit_die": "d10",
                "saving_throws": ["str", "con"],
                "skill_proficiencies": ["perception"],
                "combat_proficiencies": [
                    {"kind": "weapon_category", "category": "martial"},
                    {"kind": "armor_category", "category": "heavy"},
                ],
                "subclasses": [
                    {"name": "Eldritch Knight", "spellcasting": "third", "spellcasting_ability": "int"}
                ],
            }
        )
    )
    store.add_feat(
        Feat.model_validate(
            {
                "name": "Scholar",
                "prerequisites": [{"kind": "minimum_ability", "ability": "int", "score": 14}],
                "effects": [{"kind": "ability_increase", "ability": "wis", "amount": 1}],
            }
        )
    )
    store.add_feat(
        Feat.model_validate(
            {
                "name": "Brawny",
                "effects": [
                    {"kind": "ability_increase", "ability": "str", "amount": 2},
                    {"kind": "skill_proficiency", "skill": "athletics", "level": "expert"},
                    {"kind": "language", "language": "Elvish"},
                ],
            }
        )
    )
    store.add_feat(Feat.model_validate({"name": "Tough"}))
    return store


@pytest.fixture
def toy_store():
    return _toy_store()


@pytest.fixture
def engine(toy_store):
    return RulesEngine(toy_store)


@pytest.fixture
def srd_engine():
    return RulesEngine(Datastore.srd())


@pytest.fixture
def pc():
    return PlayerCharacter(name="Tester")
