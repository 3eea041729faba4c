from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional
import re

from charforge.models.types import WeaponCategory, WeaponKind

# Allowed weapon property keys
_ALLOWED_PROP_KEYS = {
    "finesse",
    "light",
    "heavy",
    "two-handed",
    "reach",
    "loading",
    "ammunition",
    "thrown",
    "special",
    "range",
    "versatile",
}

_VERSATILE_VAL_PAT = re.compile(r"^\d+d\d+$")
_DAMAGE_PAT = re.compile(r"^\d+d\d+$|^\d+$")


def _range_ok(val: str) -> bool:
    try:
        a, b = (int(x) for x in val.split("/", 1))
    except ValueError:
        return False
    return a > 0 and b >= a


def _validate_weapon_dict(w: dict) -> list[str]:
    errs: list[str] = []
    name = w.get("name", "<unnamed>")
    if w.get("category") not in {c.value for c in WeaponCategory}:
        errs.append(f"{name}: bad category '{w.get('category')}', expected simple|martial")
    if w.get("kind") not in {k.value for k in WeaponKind}:
        errs.append(f"{name}: bad kind '{w.get('kind')}', expected melee|ranged")
    if not _DAMAGE_PAT.match(str(w.get("damage", ""))):
        errs.append(f"{name}: bad damage '{w.get('damage')}', expected XdY")
    for p in w.get("properties", []):
        key, val = (p.split(":", 1) + [None])[:2]
        if key not in _ALLOWED_PROP_KEYS:
            errs.append(f"{name}: unknown property '{key}'")
            continue
        if key == "range" and not (val and _range_ok(val)):
            errs.append(f"{name}: bad range '{p}', expected range:X/Y")
        if key == "versatile" and not (val and _VERSATILE_VAL_PAT.match(val)):
            errs.append(f"{name}: bad versatile '{p}', expected versatile:XdY")
    return errs


@dataclass(frozen=True)
class Weapon:
    name: str
    category: str           # "simple" | "martial"
    kind: str               # "melee" | "ranged"
    damage: str             # "1d6" etc.
    damage_type: str        # "slashing" | "piercing" | "bludgeoning"
    properties: List[str]   # e.g., ["finesse", "versatile:1d10", "range:20/60"]

    @property
    def weapon_category(self) -> WeaponCategory:
        return WeaponCategory(self.category)

    @property
    def ranged(self) -> bool:
        return WeaponKind(self.kind) == WeaponKind.RANGED

    def has_prop(self, key: str) -> bool:
        return any(p.split(":")[0] == key for p in self.properties)


class WeaponIndex:
    def __init__(self, weapons: Dict[str, Weapon]):
        self.by_name = weapons

    @classmethod
    def from_records(cls, raw: Iterable[dict]) -> "WeaponIndex":
        """Validate every record first; a bad pack adds nothing."""
        weapons = {}
        errors: list[str] = []
        for w in raw:
            errs = _validate_weapon_dict(w)
            if errs:
                errors.extend(errs)
                continue
            weapon = Weapon(**{**w, "properties": list(w.get("properties", []))})
            weapons[weapon.name.lower()] = weapon
        if errors:
            raise ValueError("; ".join(errors))
        return cls(weapons)

    def add(self, weapon: Weapon) -> None:
        self.by_name[weapon.name.lower()] = weapon

    def get(self, name: str) -> Optional[Weapon]:
        return self.by_name.get(name.lower())

    def __len__(self) -> int:
        return len(self.by_name)
