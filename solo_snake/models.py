"""Data models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .constants import BASE_SPEED, MIN_SPEED, SPEED_STEP, START_DIRECTION

Cell = tuple[int, int]


class GamePhase(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    OVER = "over"


class BoundaryMode(Enum):
    WALL = "wall"
    WRAP = "wrap"


class GyroState(Enum):
    DISABLED = "disabled"
    CALIBRATING = "calibrating"
    ACTIVE = "active"


class SensorPermission(Enum):
    GRANTED = "granted"
    DENIED = "denied"
    UNSUPPORTED = "unsupported"


def tick_interval_for_level(level: int) -> int:
    return max(MIN_SPEED, BASE_SPEED - (level - 1) * SPEED_STEP)


@dataclass
class RunState:
    high_score: int = 0
    score: int = 0
    level: int = 1
    food_eaten: int = 0
    combo: int = 1
    last_eat_ms: Optional[float] = None
    tick_interval_ms: int = BASE_SPEED
    direction: str = START_DIRECTION
    new_record: bool = False
    leveled_up: bool = False

    def set_level(self, level: int):
        self.level = level
        self.tick_interval_ms = tick_interval_for_level(level)


@dataclass
class GyroCalibration:
    calibrated: bool = False
    beta_offset: float = 0.0
    gamma_offset: float = 0.0
    last_change_ms: Optional[float] = None

    def reset(self):
        self.calibrated = False
        self.beta_offset = 0.0
        self.gamma_offset = 0.0
        self.last_change_ms = None


@dataclass
class Particle:
    x: float
    y: float
    vx: float
    vy: float
    life: float = 1.0
    decay: float = 2.0
    color: str = "#ffffff"
    size: float = 3.0


@dataclass
class FrameResult:
    ticks: int = 0
    interpolation: float = 0.0
    leveled_up: bool = False
    game_over: bool = False
    events: list = field(default_factory=list)
