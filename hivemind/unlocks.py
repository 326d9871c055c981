"""Unlock predicates for units and evolution bonuses.

Predicates are a small tagged variant parsed from game data:

    {"type": "always"}
    {"type": "unit_count", "unit": "worker", "min": 5}
    {"type": "bonus", "bonus": "enhancedMetabolism"}
    {"type": "all", "of": [<predicate>, ...]}

Each predicate is evaluated against a snapshot dict holding ``units``
(unit kind -> count) and ``bonuses`` (flag -> bool).
"""
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Always:
    def evaluate(self, snapshot):
        return True

    def describe(self):
        return 'Available from the start'


@dataclass(frozen=True)
class UnitCountAtLeast:
    unit: str
    minimum: int

    def evaluate(self, snapshot):
        return snapshot['units'].get(self.unit, 0) >= self.minimum

    def describe(self):
        return f"{self.unit} >= {self.minimum}"


@dataclass(frozen=True)
class BonusUnlocked:
    bonus: str

    def evaluate(self, snapshot):
        return bool(snapshot['bonuses'].get(self.bonus, False))

    def describe(self):
        return f"{self.bonus} purchased"


@dataclass(frozen=True)
class AllOf:
    predicates: Tuple

    def evaluate(self, snapshot):
        return all(p.evaluate(snapshot) for p in self.predicates)

    def describe(self):
        return ' and '.join(p.describe() for p in self.predicates)


def predicate_from_dict(data):
    """Build a predicate from its game data representation."""
    if not isinstance(data, dict):
        raise ValueError(f"Unlock predicate must be an object, got {data!r}")
    kind = data.get('type')
    if kind == 'always':
        return Always()
    if kind == 'unit_count':
        return UnitCountAtLeast(unit=data['unit'], minimum=int(data['min']))
    if kind == 'bonus':
        return BonusUnlocked(bonus=data['bonus'])
    if kind == 'all':
        return AllOf(predicates=tuple(predicate_from_dict(p) for p in data.get('of', [])))
    raise ValueError(f"Unknown unlock predicate type: {kind}")


def unlock_snapshot(units, bonuses):
    """Snapshot of roster counts and bonus flags for predicate evaluation."""
    return {'units': dict(units), 'bonuses': dict(bonuses)}
