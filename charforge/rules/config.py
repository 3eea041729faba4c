import os
from pathlib import Path
from typing import Optional

_TRUTHY = {"1", "true", "yes", "on"}


def data_dir() -> Optional[Path]:
    """Directory of the reference pack to load, or None for the bundled SRD seed."""
    val = os.getenv("CHARFORGE_DATA_DIR")
    return Path(val) if val else None


def log_level() -> str:
    return os.getenv("CHARFORGE_LOG_LEVEL", "INFO").upper()


def finesse_best_of() -> bool:
    """Return True if finesse weapons attack with the better of STR and DEX.

    Off by default: melee attacks use STR, ranged attacks use DEX.
    """
    return os.getenv("CHARFORGE_FINESSE_BEST_OF", "false").strip().lower() in _TRUTHY
