__all__ = ["__version__", "Datastore", "PlayerCharacter", "RulesEngine"]
__version__ = "0.1.0"

from .codex import Datastore  # noqa: E402
from .engine import RulesEngine  # noqa: E402
from .models import PlayerCharacter  # noqa: E402
