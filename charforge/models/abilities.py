from __future__ import annotations

from typing import Dict, Mapping

from pydantic import BaseModel, ConfigDict

from .types import ABILITY_ORDER, Ability

# Scores are plain signed ints; curses and feats may push them outside 1..30.
Score = int


def mod(score: Score) -> Score:
    """5e ability modifier. Floors toward negative infinity, so mod(9) == -1."""
    return (score - 10) // 2


class Abilities(BaseModel):
    """All six ability scores. There is never a partial set."""

    model_config = ConfigDict(validate_assignment=True)

    str: Score = 10
    dex: Score = 10
    con: Score = 10
    int: Score = 10
    wis: Score = 10
    cha: Score = 10

    @classmethod
    def from_mapping(cls, scores: Mapping) -> "Abilities":
        return cls(**{Ability(k).value: v for k, v in scores.items()})

    def get(self, ability) -> Score:
        return getattr(self, Ability(ability).value)

    def set(self, ability, score: Score) -> None:
        setattr(self, Ability(ability).value, score)

    def modifier(self, ability) -> Score:
        return mod(self.get(ability))

    def as_dict(self) -> Dict[Ability, Score]:
        return {a: self.get(a) for a in ABILITY_ORDER}

    def with_bonuses(self, bonuses: Mapping[Ability, Score]) -> "Abilities":
        """Return a new set with additive bonuses applied; self is untouched."""
        scores = self.as_dict()
        for ability, delta in bonuses.items():
            scores[Ability(ability)] += delta
        return Abilities.from_mapping(scores)


__all__ = ["Abilities", "Score", "mod"]
