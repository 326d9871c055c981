"""Game state: resources, unit roster, evolution and settings."""
from hivemind.config import Config
from hivemind.errors import InsufficientResourcesError
from hivemind.game_data_loader import BONUS_FLAGS, RESOURCE_KINDS, UNIT_KINDS

class ResourceLedger:
    """Current amounts of each resource kind. Amounts never go below zero."""

    def __init__(self, amounts=None):
        """Initialize the ledger."""
        self.amounts = {kind: 0.0 for kind in RESOURCE_KINDS}
        for kind, amount in (amounts or {}).items():
            if kind in self.amounts:
                self.amounts[kind] = max(0.0, float(amount))

    @classmethod
    def initial(cls):
        return cls({
            'biomass': Config.INITIAL_BIOMASS,
            'energy': Config.INITIAL_ENERGY,
            'knowledge': Config.INITIAL_KNOWLEDGE,
            'territory': Config.INITIAL_TERRITORY,
        })

    def get(self, kind):
        return self.amounts.get(kind, 0.0)

    def add(self, kind, amount):
        """Add (or, for negative amounts, remove) a resource, clamping at zero."""
        self.amounts[kind] = max(0.0, self.amounts[kind] + amount)

    def can_afford(self, costs):
        return all(self.amounts.get(kind, 0.0) >= cost for kind, cost in costs.items())

    def spend(self, costs):
        """Pay a multi-resource cost, all channels or none.

        Raises InsufficientResourcesError without touching any balance if a
        single channel is short.
        """
        shortfall = {
            kind: cost - self.amounts.get(kind, 0.0)
            for kind, cost in costs.items()
            if self.amounts.get(kind, 0.0) < cost
        }
        if shortfall:
            raise InsufficientResourcesError(shortfall)
        for kind, cost in costs.items():
            self.amounts[kind] -= cost

    def to_dict(self):
        return dict(self.amounts)


class UnitRoster:
    """Owned unit counts."""

    def __init__(self, counts=None):
        self.counts = {kind: 0 for kind in UNIT_KINDS}
        for kind, count in (counts or {}).items():
            if kind in self.counts:
                self.counts[kind] = max(0, int(count))

    def get(self, kind):
        return self.counts.get(kind, 0)

    def add(self, kind, amount=1):
        self.counts[kind] = max(0, self.counts[kind] + amount)

    def total(self):
        return sum(self.counts.values())

    def to_dict(self):
        return dict(self.counts)


class EvolutionLedger:
    """Evolution point balance and purchased bonus flags."""

    def __init__(self, points=0.0, bonuses=None):
        self.points = max(0.0, float(points))
        self.bonuses = {flag: False for flag in BONUS_FLAGS}
        for flag, value in (bonuses or {}).items():
            if flag in self.bonuses:
                self.bonuses[flag] = bool(value)

    def add_points(self, amount):
        if amount > 0:
            self.points += amount

    def is_unlocked(self, flag):
        return self.bonuses.get(flag, False)

    def unlock(self, flag, cost):
        """Debit points and set a flag. Flags never go back to False."""
        if self.bonuses.get(flag):
            return False
        if self.points < cost:
            raise InsufficientResourcesError({'evolution_points': cost - self.points})
        self.points -= cost
        self.bonuses[flag] = True
        return True

    def to_dict(self):
        return {'points': self.points, 'bonuses': dict(self.bonuses)}


class Settings:
    """Game speed, last-saved timestamp and accumulated playtime."""

    def __init__(self, game_speed=None, last_saved_ms=0, total_playtime_ms=0):
        self.game_speed = float(game_speed if game_speed is not None else Config.DEFAULT_GAME_SPEED)
        if self.game_speed <= 0:
            raise ValueError(f"Game speed must be positive, got {self.game_speed}")
        self.last_saved_ms = int(last_saved_ms)
        self.total_playtime_ms = max(0, int(total_playtime_ms))

    def add_playtime(self, elapsed_ms):
        if elapsed_ms > 0:
            self.total_playtime_ms += int(elapsed_ms)

    def to_dict(self):
        return {
            'gameSpeed': self.game_speed,
            'lastSaved': self.last_saved_ms,
            'totalPlaytime': self.total_playtime_ms,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            game_speed=data.get('gameSpeed', Config.DEFAULT_GAME_SPEED),
            last_saved_ms=data.get('lastSaved', 0),
            total_playtime_ms=data.get('totalPlaytime', 0),
        )
