"""Rules resolution: applies provider choices and computes derived values."""

from .resolver import RulesEngine  # noqa: F401

__all__ = ["RulesEngine"]
