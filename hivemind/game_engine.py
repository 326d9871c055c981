"""Core game engine for simulation."""
import logging
import math

from hivemind.config import Config
from hivemind.errors import InsufficientResourcesError
from hivemind.game_data_loader import RESOURCE_KINDS, get_game_data_loader
from hivemind.state import EvolutionLedger, ResourceLedger, Settings, UnitRoster
from hivemind.unlocks import unlock_snapshot

logger = logging.getLogger(__name__)

MS_PER_SECOND = 1000
MS_PER_HOUR = 60 * 60 * 1000
SECONDS_PER_HOUR = 3600

class GameEngine:
    """Core game simulation engine.

    Owns the resource ledger, unit roster, evolution ledger and settings,
    and applies live ticks, offline catch-up and purchases to them.
    """

    def __init__(self, config=None):
        """Initialize game engine."""
        self.config = config or {}
        self.data_loader = get_game_data_loader()

        self.resources = ResourceLedger.initial()
        for kind in RESOURCE_KINDS:
            key = f'initial_{kind}'
            if key in self.config:
                self.resources.amounts[kind] = max(0.0, float(self.config[key]))

        self.units = UnitRoster(self.config.get('initial_units'))
        self.evolution = EvolutionLedger()
        self.settings = Settings(last_saved_ms=self.config.get('now_ms', 0))

    @classmethod
    def load_from_state(cls, state, config=None):
        """Load game engine from a saved state snapshot."""
        engine = cls(config)

        if state:
            engine.resources = ResourceLedger(state.get('resources', engine.resources.to_dict()))
            engine.units = UnitRoster(state.get('units', {}))

            evolution = state.get('evolution', {})
            engine.evolution = EvolutionLedger(
                points=evolution.get('points', 0.0),
                bonuses=evolution.get('bonuses', {})
            )

            settings = state.get('settings')
            if settings:
                engine.settings = Settings.from_dict(settings)

        return engine

    def get_state(self):
        """Get current game state as dictionary."""
        return {
            'resources': self.resources.to_dict(),
            'units': self.units.to_dict(),
            'evolution': self.evolution.to_dict(),
            'settings': self.settings.to_dict()
        }

    def get_snapshot(self):
        """Get state plus derived rates for display."""
        state = self.get_state()
        state['production_rates'] = self._calculate_production_rates()
        state['evolution_rate'] = self.calculate_evolution_rate(self.units.total())
        return state

    # --------- production ---------

    def _get_category_multipliers(self):
        """Multiplier per production category from purchased bonuses.

        Category bonuses are independent of each other. hiveUnity scales
        each active bonus's effect: 1 + (bonus - 1) * amplifier.
        """
        amplify = False
        multipliers = {}
        for flag, bonus in self.data_loader.load_bonuses().items():
            if not self.evolution.is_unlocked(flag):
                continue
            effect = bonus.get('effect', {})
            if effect.get('type') == 'category':
                multipliers[effect['category']] = effect['multiplier']
            elif effect.get('type') == 'amplify':
                amplify = True

        if amplify:
            amplifier = self.config.get('hive_unity_amplifier', Config.HIVE_UNITY_AMPLIFIER)
            multipliers = {
                category: 1.0 + (multiplier - 1.0) * amplifier
                for category, multiplier in multipliers.items()
            }
        return multipliers

    def _get_resource_multipliers(self):
        """Bonus multiplier for each resource kind."""
        category_multipliers = self._get_category_multipliers()
        return {
            kind: category_multipliers.get(self.data_loader.get_resource_category(kind), 1.0)
            for kind in RESOURCE_KINDS
        }

    def _calculate_production_rates(self):
        """Net production per second for each resource, bonuses applied."""
        multipliers = self._get_resource_multipliers()
        rates = {kind: 0.0 for kind in RESOURCE_KINDS}

        for unit_id, count in self.units.counts.items():
            if count <= 0:
                continue
            for kind, rate in self.data_loader.get_production_profile(unit_id).items():
                rates[kind] += rate * count * multipliers[kind]

        return rates

    @staticmethod
    def calculate_evolution_rate(total_units):
        """Evolution points per second for a unit count (logarithmic)."""
        if total_units <= 0:
            return 0.0
        return math.log(total_units + 1) * Config.EVOLUTION_RATE_COEFFICIENT

    def live_tick(self, elapsed_ms, speed_multiplier=None):
        """Advance the simulation by elapsed wall-clock time."""
        elapsed_ms = max(0, elapsed_ms)
        if speed_multiplier is None:
            speed_multiplier = self.settings.game_speed
        time_factor = elapsed_ms / MS_PER_SECOND * speed_multiplier

        for kind, rate in self._calculate_production_rates().items():
            if rate:
                self.resources.add(kind, rate * time_factor)

        total_units = self.units.total()
        if total_units > 0:
            self.evolution.add_points(self.calculate_evolution_rate(total_units) * time_factor)

        self.settings.add_playtime(elapsed_ms)

    def offline_tick(self, now_ms, last_saved_ms):
        """Apply catch-up production for the time since the last save.

        Returns a report dict when production was applied, or None when the
        gap is too short to count as time away.
        """
        gap_ms = now_ms - last_saved_ms
        min_gap_ms = self.config.get('offline_min_gap_ms', Config.OFFLINE_MIN_GAP_MS)
        if gap_ms <= min_gap_ms:
            return None

        max_gap_ms = self.config.get('offline_max_gap_ms', Config.OFFLINE_MAX_GAP_MS)
        clamped_ms = min(gap_ms, max_gap_ms)
        hours = clamped_ms / MS_PER_HOUR
        efficiency = self.config.get('offline_efficiency', Config.OFFLINE_EFFICIENCY)

        multipliers = self._get_resource_multipliers()
        gains = {kind: 0.0 for kind in RESOURCE_KINDS}
        for unit_id, count in self.units.counts.items():
            if count <= 0:
                continue
            hourly_production = count * SECONDS_PER_HOUR
            for kind, rate in self.data_loader.get_production_profile(unit_id).items():
                gains[kind] += rate * hourly_production * hours * multipliers[kind]

        for kind in gains:
            gains[kind] *= efficiency
            if gains[kind]:
                self.resources.add(kind, gains[kind])

        logger.info("Offline catch-up: %.2fh away (gap %dms), gains %s", hours, gap_ms, gains)
        return {
            'gap_ms': gap_ms,
            'clamped_ms': clamped_ms,
            'hours': hours,
            'gains': gains
        }

    def mark_saved(self, now_ms):
        """Stamp the last-saved timestamp."""
        self.settings.last_saved_ms = int(now_ms)

    # --------- purchases ---------

    def _unlock_snapshot(self):
        return unlock_snapshot(self.units.counts, self.evolution.bonuses)

    def is_unit_available(self, unit_id):
        """Whether a unit kind's unlock predicate is satisfied."""
        predicate = self.data_loader.get_unit_unlock(unit_id)
        return predicate is not None and predicate.evaluate(self._unlock_snapshot())

    def is_bonus_available(self, flag):
        """Whether an evolution bonus's unlock predicate is satisfied."""
        predicate = self.data_loader.get_bonus_unlock(flag)
        return predicate is not None and predicate.evaluate(self._unlock_snapshot())

    def get_unit_cost(self, unit_id):
        """Cost of the next unit: floor(base * growth^count) per resource.

        Costs past the float range are infinite, so the unit is never affordable.
        """
        growth = self.config.get('unit_cost_growth', Config.UNIT_COST_GROWTH)
        try:
            multiplier = growth ** self.units.get(unit_id)
        except OverflowError:
            multiplier = math.inf

        cost = {}
        for kind, base in self.data_loader.get_base_cost(unit_id).items():
            amount = base * multiplier
            cost[kind] = math.floor(amount) if math.isfinite(amount) else math.inf
        return cost

    def get_bonus_cost(self, flag):
        bonus = self.data_loader.get_bonus(flag)
        return bonus['cost'] if bonus else None

    def purchase_unit(self, unit_id):
        """Buy one unit. Returns False, changing nothing, if unaffordable.

        Unlock predicates are checked by the caller.
        """
        if self.data_loader.get_unit(unit_id) is None:
            raise ValueError(f"Unit type not found: {unit_id}")

        try:
            self.resources.spend(self.get_unit_cost(unit_id))
        except InsufficientResourcesError as e:
            logger.debug("Purchase of %s rejected: %s", unit_id, e)
            return False

        self.units.add(unit_id, 1)
        return True

    def purchase_bonus(self, flag):
        """Buy an evolution bonus with points. Returns False if already owned or unaffordable."""
        cost = self.get_bonus_cost(flag)
        if cost is None:
            raise ValueError(f"Evolution bonus not found: {flag}")

        try:
            return self.evolution.unlock(flag, cost)
        except InsufficientResourcesError as e:
            logger.debug("Purchase of %s rejected: %s", flag, e)
            return False

    def get_catalog(self):
        """Units and bonuses with their current cost and availability."""
        units = {}
        for unit_id, unit in self.data_loader.load_units().items():
            cost = self.get_unit_cost(unit_id)
            units[unit_id] = {
                'name': unit['name'],
                'description': unit.get('description', ''),
                'count': self.units.get(unit_id),
                'cost': {kind: amount if math.isfinite(amount) else None for kind, amount in cost.items()},
                'production': dict(unit.get('production', {})),
                'unlocked': self.is_unit_available(unit_id),
                'requirement': self.data_loader.get_unit_unlock(unit_id).describe(),
                'affordable': self.resources.can_afford(cost)
            }

        bonuses = {}
        for flag, bonus in self.data_loader.load_bonuses().items():
            bonuses[flag] = {
                'name': bonus['name'],
                'description': bonus.get('description', ''),
                'cost': bonus['cost'],
                'purchased': self.evolution.is_unlocked(flag),
                'unlocked': self.is_bonus_available(flag),
                'requirement': self.data_loader.get_bonus_unlock(flag).describe(),
                'affordable': self.evolution.points >= bonus['cost']
            }

        return {'units': units, 'bonuses': bonuses}
