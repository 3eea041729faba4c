from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from charforge.models.types import ArmorCategory


@dataclass(frozen=True)
class Armor:
    name: str
    category: str          # light | medium | heavy | shield
    base_ac: int           # armor’s base (0 for shield)
    dex_cap: Optional[int] = None  # None=no cap; 2=medium; 0=heavy (ignore Dex)
    stealth_disadvantage: bool = False
    str_min: Optional[int] = None

    @property
    def armor_category(self) -> ArmorCategory:
        return ArmorCategory(self.category)


class ArmorIndex:
    def __init__(self, by_name: Dict[str, Armor]):
        self.by_name = by_name

    @classmethod
    def from_records(cls, raw: Iterable[dict]) -> "ArmorIndex":
        by_name = {}
        for a in raw:
            ar = Armor(**a)
            ArmorCategory(ar.category)  # ValueError on unknown category
            by_name[ar.name.lower()] = ar
        return cls(by_name)

    def add(self, armor: Armor) -> None:
        self.by_name[armor.name.lower()] = armor

    def get(self, name: str) -> Optional[Armor]:
        return self.by_name.get(name.lower())

    def __len__(self) -> int:
        return len(self.by_name)
