"""Reference data: providers, weapons, armor, spells and custom skills."""

from .weapons import Weapon, WeaponIndex  # noqa: F401
from .armor import Armor, ArmorIndex  # noqa: F401
from .spells import Spell  # noqa: F401
from .store import Datastore, SRD_DIR  # noqa: F401

__all__ = ["Weapon", "WeaponIndex", "Armor", "ArmorIndex", "Spell", "Datastore", "SRD_DIR"]
