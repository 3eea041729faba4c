from __future__ import annotations


class CharacterError(Exception):
    """Base class for every rules error. Raised before any state is touched."""


class NotFound(CharacterError, LookupError):
    def __init__(self, kind: str, name: str):
        self.kind = kind
        self.name = name
        super().__init__(f"Unknown {kind}: {name!r}")


class PreconditionViolated(CharacterError):
    pass


class InvalidLevel(CharacterError, ValueError):
    def __init__(self, level: int):
        self.level = level
        super().__init__(f"Level {level} is outside the supported range 1..20")


class DatastoreError(CharacterError):
    """A reference pack could not be read or did not validate."""


__all__ = [
    "CharacterError",
    "NotFound",
    "PreconditionViolated",
    "InvalidLevel",
    "DatastoreError",
]
