"""Unit tests for the resource, unit and evolution ledgers."""

import pytest

from hivemind.errors import InsufficientResourcesError
from hivemind.state import EvolutionLedger, ResourceLedger, Settings, UnitRoster


class TestResourceLedger:
    """Tests for ResourceLedger."""

    def test_initial_amounts(self):
        ledger = ResourceLedger.initial()
        assert ledger.to_dict() == {'biomass': 50.0, 'energy': 25.0, 'knowledge': 0.0, 'territory': 0.0}

    def test_negative_amounts_clamped_on_creation(self):
        ledger = ResourceLedger({'biomass': -5, 'energy': 3})
        assert ledger.get('biomass') == 0.0
        assert ledger.get('energy') == 3.0

    def test_add_clamps_at_zero(self):
        ledger = ResourceLedger({'energy': 10})
        ledger.add('energy', -25)
        assert ledger.get('energy') == 0.0

    def test_spend_debits_every_channel(self):
        ledger = ResourceLedger({'biomass': 50, 'energy': 25})
        ledger.spend({'biomass': 10, 'energy': 5})
        assert ledger.get('biomass') == 40.0
        assert ledger.get('energy') == 20.0

    def test_spend_is_all_or_nothing(self):
        ledger = ResourceLedger({'biomass': 50, 'energy': 25})

        with pytest.raises(InsufficientResourcesError) as excinfo:
            ledger.spend({'biomass': 10, 'energy': 100})

        assert excinfo.value.shortfall == {'energy': 75.0}
        assert ledger.get('biomass') == 50.0
        assert ledger.get('energy') == 25.0

    def test_can_afford(self):
        ledger = ResourceLedger({'biomass': 10})
        assert ledger.can_afford({'biomass': 10})
        assert not ledger.can_afford({'biomass': 10, 'knowledge': 1})


class TestUnitRoster:
    """Tests for UnitRoster."""

    def test_unknown_kinds_ignored(self):
        roster = UnitRoster({'worker': 3, 'dragon': 9})
        assert roster.to_dict() == {'worker': 3, 'scout': 0, 'soldier': 0, 'specialist': 0}

    def test_total(self):
        roster = UnitRoster({'worker': 3, 'scout': 2})
        roster.add('soldier')
        assert roster.total() == 6


class TestEvolutionLedger:
    """Tests for EvolutionLedger."""

    def test_unlock_debits_points(self):
        evolution = EvolutionLedger(points=150)
        assert evolution.unlock('enhancedMetabolism', 100) is True
        assert evolution.points == 50
        assert evolution.is_unlocked('enhancedMetabolism')

    def test_unlock_twice_is_rejected_without_debit(self):
        evolution = EvolutionLedger(points=300)
        evolution.unlock('enhancedMetabolism', 100)
        assert evolution.unlock('enhancedMetabolism', 100) is False
        assert evolution.points == 200

    def test_unlock_insufficient_points(self):
        evolution = EvolutionLedger(points=99)
        with pytest.raises(InsufficientResourcesError):
            evolution.unlock('enhancedMetabolism', 100)
        assert evolution.points == 99
        assert not evolution.is_unlocked('enhancedMetabolism')

    def test_add_points_ignores_non_positive(self):
        evolution = EvolutionLedger(points=5)
        evolution.add_points(-3)
        evolution.add_points(0)
        assert evolution.points == 5


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self):
        settings = Settings()
        assert settings.game_speed == 1.0
        assert settings.total_playtime_ms == 0

    def test_dict_round_trip(self):
        settings = Settings(game_speed=2, last_saved_ms=1234, total_playtime_ms=5000)
        restored = Settings.from_dict(settings.to_dict())
        assert restored.to_dict() == {'gameSpeed': 2.0, 'lastSaved': 1234, 'totalPlaytime': 5000}

    @pytest.mark.parametrize('speed', [0, -1.5])
    def test_rejects_non_positive_speed(self, speed):
        with pytest.raises(ValueError):
            Settings(game_speed=speed)

