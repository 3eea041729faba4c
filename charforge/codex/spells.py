from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

from charforge.models.types import SpellLevel, SpellSchool


@dataclass(frozen=True)
class Spell:
    name: str
    level: SpellLevel
    school: SpellSchool
    casting_time: str = "1 action"
    duration: str = "Instantaneous"
    components: Tuple[str, ...] = ()  # "V", "S", "M:a pinch of sulfur"
    description: str = ""
    classes: Tuple[str, ...] = field(default=())

    @classmethod
    def from_dict(cls, d: dict) -> "Spell":
        data = dict(d)
        data["level"] = SpellLevel(int(data.get("level", 0)))
        data["school"] = SpellSchool(data["school"])
        data["components"] = tuple(data.get("components", ()))
        data["classes"] = tuple(data.get("classes", ()))
        return cls(**data)
