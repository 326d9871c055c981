"""Game data loader for loading JSON configuration files."""
import json
from pathlib import Path

from hivemind.unlocks import predicate_from_dict

RESOURCE_KINDS = ('biomass', 'energy', 'knowledge', 'territory')
UNIT_KINDS = ('worker', 'scout', 'soldier', 'specialist')
BONUS_FLAGS = ('enhancedMetabolism', 'rapidGrowth', 'knowledgeSynthesis',
               'territorialDominance', 'hiveUnity')

class GameDataLoader:
    """Loads and caches game data from JSON files."""

    def __init__(self, data_dir=None):
        """Initialize the data loader."""
        if data_dir is None:
            self.data_dir = Path(__file__).parent / 'game_data'
        else:
            self.data_dir = Path(data_dir)

        self._resources = None
        self._units = None
        self._bonuses = None
        self._unit_unlocks = {}
        self._bonus_unlocks = {}

    def load_units(self):
        """Load unit definitions and the resource category map."""
        if self._units is None:
            file_path = self.data_dir / 'units.json'
            with open(file_path, 'r') as f:
                data = json.load(f)
                self._resources = data.get('resources', {})
                self._units = data['units']

            # Parse unlock predicates once; bad game data fails loudly here
            self._unit_unlocks = {
                unit_id: predicate_from_dict(unit.get('unlock', {'type': 'always'}))
                for unit_id, unit in self._units.items()
            }
        return self._units

    def load_resources(self):
        """Load resource definitions."""
        if self._resources is None:
            self.load_units()
        return self._resources

    def load_bonuses(self):
        """Load evolution bonus definitions."""
        if self._bonuses is None:
            file_path = self.data_dir / 'evolution.json'
            with open(file_path, 'r') as f:
                data = json.load(f)
                self._bonuses = data['bonuses']

            self._bonus_unlocks = {
                flag: predicate_from_dict(bonus.get('unlock', {'type': 'always'}))
                for flag, bonus in self._bonuses.items()
            }
        return self._bonuses

    def get_unit(self, unit_id):
        """Get unit data by ID."""
        return self.load_units().get(unit_id)

    def get_bonus(self, flag):
        """Get evolution bonus data by flag name."""
        return self.load_bonuses().get(flag)

    def get_production_profile(self, unit_id):
        """Per-unit, per-second production rates for a unit kind."""
        unit = self.get_unit(unit_id)
        return dict(unit.get('production', {})) if unit else {}

    def get_base_cost(self, unit_id):
        """Base purchase cost for a unit kind."""
        unit = self.get_unit(unit_id)
        return dict(unit.get('base_cost', {})) if unit else {}

    def get_resource_category(self, resource):
        """Production category a resource belongs to (general, knowledge, territory)."""
        return self.load_resources().get(resource, {}).get('category', resource)

    def get_unit_unlock(self, unit_id):
        """Unlock predicate for a unit kind."""
        self.load_units()
        return self._unit_unlocks.get(unit_id)

    def get_bonus_unlock(self, flag):
        """Unlock predicate for an evolution bonus."""
        self.load_bonuses()
        return self._bonus_unlocks.get(flag)

    def validate_data(self):
        """Validate loaded data structure."""
        errors = []

        units = self.load_units()
        for unit_id in UNIT_KINDS:
            if unit_id not in units:
                errors.append(f"Missing unit definition: {unit_id}")
        for unit_id, unit in units.items():
            for resource in list(unit.get('production', {})) + list(unit.get('base_cost', {})):
                if resource not in RESOURCE_KINDS:
                    errors.append(f"Unit {unit_id} references unknown resource: {resource}")

        bonuses = self.load_bonuses()
        for flag in BONUS_FLAGS:
            if flag not in bonuses:
                errors.append(f"Missing evolution bonus: {flag}")
        for flag, bonus in bonuses.items():
            if bonus.get('cost', 0) <= 0:
                errors.append(f"Evolution bonus {flag} must have a positive cost")

        return errors

# Global instance
_game_data_loader = None

def get_game_data_loader(data_dir=None):
    """Get or create the global game data loader instance."""
    global _game_data_loader
    if _game_data_loader is None:
        _game_data_loader = GameDataLoader(data_dir)
    return _game_data_loader
