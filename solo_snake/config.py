"""Gameplay options and process settings."""

import os
from dataclasses import dataclass, field

from .models import BoundaryMode

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8765
DEFAULT_FRAME_RATE = 60
DEFAULT_HIGH_SCORE_PATH = "data/high_score.json"


def parse_boundary(value, default: BoundaryMode = BoundaryMode.WALL) -> BoundaryMode:
    try:
        return BoundaryMode(str(value).lower())
    except ValueError:
        return default


@dataclass
class GameOptions:
    """Per-session switches a player may change between runs."""

    boundary: BoundaryMode = BoundaryMode.WALL

    def update(self, msg: dict) -> bool:
        """Apply recognised fields from an ``options`` message. Returns True if anything changed."""
        changed = False
        boundary = msg.get("boundary")
        if isinstance(boundary, str) and boundary.lower() in {m.value for m in BoundaryMode}:
            new = BoundaryMode(boundary.lower())
            changed = new is not self.boundary
            self.boundary = new
        return changed

    def to_dict(self) -> dict:
        return {"boundary": self.boundary.value}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass
class Settings:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    frame_rate: int = DEFAULT_FRAME_RATE
    high_score_path: str = DEFAULT_HIGH_SCORE_PATH
    log_level: str = "INFO"
    default_options: GameOptions = field(default_factory=GameOptions)

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            host=os.getenv("SNAKE_HOST", DEFAULT_HOST),
            port=_env_int("SNAKE_PORT", DEFAULT_PORT),
            frame_rate=max(1, _env_int("SNAKE_FRAME_RATE", DEFAULT_FRAME_RATE)),
            high_score_path=os.getenv("SNAKE_HIGH_SCORE_PATH", DEFAULT_HIGH_SCORE_PATH),
            log_level=os.getenv("SNAKE_LOG_LEVEL", "INFO").upper(),
            default_options=GameOptions(boundary=parse_boundary(os.getenv("SNAKE_BOUNDARY", "wall"))),
        )

    def new_options(self) -> GameOptions:
        return GameOptions(boundary=self.default_options.boundary)
