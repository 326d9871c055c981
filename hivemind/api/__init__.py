"""API blueprints for Hive Mind."""
from hivemind.api.game import game_bp
from hivemind.api.saves import saves_bp

__all__ = ['game_bp', 'saves_bp']
