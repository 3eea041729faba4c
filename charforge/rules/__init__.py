from .config import data_dir, finesse_best_of, log_level

__all__ = [
    "data_dir",
    "finesse_best_of",
    "log_level",
]
