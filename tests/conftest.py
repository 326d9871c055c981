"""
Pytest configuration and shared fixtures.
"""

import pytest

from hivemind.config import Config
from hivemind.game_engine import GameEngine
from hivemind.save_system import SaveSystem
from hivemind.simulation import SimulationContext
from hivemind.storage import MemoryStore

START_MS = 1_700_000_000_000
HOUR_MS = 60 * 60 * 1000


class FakeClock:
    """Controllable millisecond clock."""

    def __init__(self, now=START_MS):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms
        return self.now

    def sleep(self, seconds):
        self.advance(int(round(seconds * 1000)))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return MemoryStore(Config.SAVE_STORAGE_CAPACITY)


@pytest.fixture
def save_system(store, clock):
    return SaveSystem(store, clock)


@pytest.fixture
def engine(clock):
    return GameEngine({'now_ms': clock()})


@pytest.fixture
def simulation(save_system, clock):
    return SimulationContext(save_system, clock=clock)


@pytest.fixture
def app(clock):
    from hivemind.app import create_app
    app = create_app('testing', clock=clock)
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()
