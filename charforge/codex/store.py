"""Name-keyed reference datastore.

Every ``get_*`` returns ``None`` for an unknown name; callers that need the
record (the rules engine) turn that into :class:`~charforge.errors.NotFound`.
Lookups are case-insensitive. Records are immutable once added.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import yaml
from pydantic import ValidationError

from charforge.errors import DatastoreError
from charforge.logging import get_logger
from charforge.models.providers import CharacterClass, Feat, Race
from charforge.models.types import Ability, normalize_skill
from charforge.rules.config import data_dir

from .armor import Armor, ArmorIndex
from .spells import Spell
from .weapons import Weapon, WeaponIndex

log = get_logger(__name__)

SRD_DIR = Path(__file__).resolve().parent.parent / "data"

_PACK_SUFFIXES = {".yaml", ".yml", ".json"}
_SECTIONS = ("races", "classes", "feats", "weapons", "armor", "spells", "skills")


def _read_pack(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise DatastoreError(f"Cannot read {path}: {e}") from e
    try:
        if path.suffix == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise DatastoreError(f"Parse error in {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise DatastoreError(f"{path}: top level must be a mapping of sections")
    unknown = set(data) - set(_SECTIONS)
    if unknown:
        raise DatastoreError(f"{path}: unknown sections {sorted(unknown)}")
    for section, value in data.items():
        if value is None:
            continue
        if section == "skills":
            if not isinstance(value, dict):
                raise DatastoreError(f"{path}: skills must be a mapping")
        elif not isinstance(value, list):
            raise DatastoreError(f"{path}: {section} must be a list")
        elif not all(isinstance(rec, dict) for rec in value):
            raise DatastoreError(f"{path}: every entry in {section} must be a mapping")
    return data


class Datastore:
    def __init__(self) -> None:
        self.races: Dict[str, Race] = {}
        self.classes: Dict[str, CharacterClass] = {}
        self.feats: Dict[str, Feat] = {}
        self.spells: Dict[str, Spell] = {}
        self.skills: Dict[str, Ability] = {}
        self.weapons = WeaponIndex({})
        self.armor = ArmorIndex({})

    # --- Construction ---

    @classmethod
    def load(cls, path: str | Path) -> "Datastore":
        store = cls()
        store.load_pack(path)
        return store

    @classmethod
    def srd(cls) -> "Datastore":
        """The small SRD seed pack shipped with the package."""
        return cls.load(SRD_DIR)

    @classmethod
    def default(cls) -> "Datastore":
        path = data_dir()
        return cls.load(path) if path else cls.srd()

    def load_pack(self, path: str | Path) -> None:
        """Load a pack file, or every pack file in a directory (sorted by name).

        All files are parsed and validated before anything is added, so a bad
        pack leaves the store unchanged.
        """
        path = Path(path)
        if path.is_dir():
            files = sorted(p for p in path.iterdir() if p.suffix in _PACK_SUFFIXES)
        elif path.exists():
            files = [path]
        else:
            raise DatastoreError(f"Pack not found: {path}")

        staged = Datastore()
        for f in files:
            staged._ingest(f, _read_pack(f))
        self.merge(staged)
        log.info(
            "loaded pack %s: %d races, %d classes, %d feats, %d weapons, %d armor, %d spells",
            path,
            len(staged.races),
            len(staged.classes),
            len(staged.feats),
            len(staged.weapons),
            len(staged.armor),
            len(staged.spells),
        )

    def _ingest(self, path: Path, data: Dict[str, Any]) -> None:
        for model, section, add in (
            (Race, "races", self.add_race),
            (CharacterClass, "classes", self.add_class),
            (Feat, "feats", self.add_feat),
        ):
            for i, rec in enumerate(data.get(section) or []):
                try:
                    add(model.model_validate(rec))
                except ValidationError as e:
                    raise DatastoreError(f"{path}: {section}[{i}] {_rec_name(rec)}: {e}") from e

        try:
            weapons = WeaponIndex.from_records(data.get("weapons") or [])
            armor = ArmorIndex.from_records(data.get("armor") or [])
            spells = [Spell.from_dict(s) for s in data.get("spells") or []]
            skills = {k: Ability(v) for k, v in (data.get("skills") or {}).items()}
        except (TypeError, ValueError, KeyError) as e:
            raise DatastoreError(f"{path}: {e}") from e
        for w in weapons.by_name.values():
            self.add_weapon(w)
        for a in armor.by_name.values():
            self.add_armor(a)
        for s in spells:
            self.add_spell(s)
        for name, ability in skills.items():
            self.add_skill(name, ability)

    def merge(self, other: "Datastore") -> None:
        self.races.update(other.races)
        self.classes.update(other.classes)
        self.feats.update(other.feats)
        self.spells.update(other.spells)
        self.skills.update(other.skills)
        self.weapons.by_name.update(other.weapons.by_name)
        self.armor.by_name.update(other.armor.by_name)

    # --- Registration ---

    def add_race(self, race: Race) -> None:
        self.races[race.name.lower()] = race

    def add_class(self, klass: CharacterClass) -> None:
        self.classes[klass.name.lower()] = klass

    def add_feat(self, feat: Feat) -> None:
        self.feats[feat.name.lower()] = feat

    def add_weapon(self, weapon: Weapon) -> None:
        self.weapons.add(weapon)

    def add_armor(self, armor: Armor) -> None:
        self.armor.add(armor)

    def add_spell(self, spell: Spell) -> None:
        self.spells[spell.name.lower()] = spell

    def add_skill(self, name: str, ability) -> None:
        """Register a custom skill (or tool) and the ability it keys off."""
        self.skills[normalize_skill(name)] = Ability(ability)

    # --- Lookup ---

    def get_race(self, name: str) -> Optional[Race]:
        return self.races.get(name.lower())

    def get_class(self, name: str) -> Optional[CharacterClass]:
        return self.classes.get(name.lower())

    def get_feat(self, name: str) -> Optional[Feat]:
        return self.feats.get(name.lower())

    def get_weapon(self, name: str) -> Optional[Weapon]:
        return self.weapons.get(name)

    def get_armor(self, name: str) -> Optional[Armor]:
        return self.armor.get(name)

    def get_spell(self, name: str) -> Optional[Spell]:
        return self.spells.get(name.lower())

    def get_skill(self, name: str) -> Optional[Ability]:
        return self.skills.get(normalize_skill(name))

    def names(self, section: str) -> Iterable[str]:
        if section == "weapons":
            return sorted(w.name for w in self.weapons.by_name.values())
        if section == "armor":
            return sorted(a.name for a in self.armor.by_name.values())
        if section == "skills":
            return sorted(self.skills)
        return sorted(r.name for r in getattr(self, section).values())


def _rec_name(rec: Any) -> str:
    if isinstance(rec, dict) and "name" in rec:
        return repr(rec["name"])
    return "<unnamed>"


__all__ = ["Datastore", "SRD_DIR"]
