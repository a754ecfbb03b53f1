"""Pytest configuration and fixtures for snake engine tests."""

import random

import pytest

from solo_snake.config import GameOptions
from solo_snake.game import SimulationEngine
from solo_snake.input import InputArbiter
from solo_snake.models import BoundaryMode
from solo_snake.store import MemoryHighScoreStore


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now: float = 10_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float):
        self.now += ms


@pytest.fixture
def seeded_rng():
    """Provide a deterministic RNG for tests."""
    return random.Random(42)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return MemoryHighScoreStore()


@pytest.fixture
def make_engine(seeded_rng, clock, store):
    def _make(boundary: BoundaryMode = BoundaryMode.WALL) -> SimulationEngine:
        engine = SimulationEngine(
            InputArbiter(),
            GameOptions(boundary=boundary),
            store,
            seeded_rng,
            clock,
        )
        engine.start()
        return engine

    return _make


@pytest.fixture
def engine(make_engine):
    """A running engine with food parked out of the snake's way."""
    engine = make_engine()
    engine.grid.food = (0, 19)
    return engine
