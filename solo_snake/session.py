"""One player's game: engine, input, scheduler and effects behind a control surface."""

import logging
import random
from typing import Optional

from .config import GameOptions
from .constants import LEVEL_THEMES, PAUSE_KEYS
from .effects import EffectBus
from .game import SimulationEngine, monotonic_ms
from .input import InputArbiter, negotiate_sensor_permission
from .models import FrameResult, GamePhase, SensorPermission
from .scheduler import TickScheduler
from .store import HighScoreStore

logger = logging.getLogger(__name__)


def theme_for_level(level: int) -> dict:
    return LEVEL_THEMES[(level - 1) % len(LEVEL_THEMES)]


class GameSession:
    def __init__(
        self,
        options: Optional[GameOptions] = None,
        store: Optional[HighScoreStore] = None,
        rng: Optional[random.Random] = None,
        clock=None,
    ):
        self.rng = rng or random.Random()
        self.clock = clock or monotonic_ms
        self.arbiter = InputArbiter()
        self.engine = SimulationEngine(self.arbiter, options, store, self.rng, self.clock)
        self.scheduler = TickScheduler(self.engine)
        self.effects = EffectBus(self.rng)
        self.last_frame: FrameResult = FrameResult()
        self.last_cues: list[dict] = []
        self.sensor_released = False
        self.gyro_changed = False

    @property
    def phase(self) -> GamePhase:
        return self.engine.phase

    @property
    def options(self) -> GameOptions:
        return self.engine.options

    # ── Control surface ──

    def start(self):
        self.engine.start()
        self.scheduler.reset()
        self.effects.clear()
        self.last_frame = FrameResult()
        self.last_cues = []
        self.sensor_released = False

    def toggle_pause(self) -> bool:
        return self.engine.toggle_pause()

    def stop(self):
        """Tear down: release the sensor subscription."""
        self.arbiter.gyro.disable()

    def update_options(self, msg: dict) -> bool:
        if self.phase in (GamePhase.RUNNING, GamePhase.PAUSED):
            return False
        return self.options.update(msg)

    # ── Input ──

    def accepts_input(self) -> bool:
        return self.phase is GamePhase.RUNNING

    def key(self, key) -> bool:
        if isinstance(key, str) and key in PAUSE_KEYS and self.phase in (GamePhase.RUNNING, GamePhase.PAUSED):
            return self.toggle_pause()
        if not self.accepts_input():
            return False
        return self.arbiter.handle_key(key)

    def button(self, direction) -> bool:
        if not self.accepts_input():
            return False
        return self.arbiter.handle_button(direction)

    def touch_start(self, x: float, y: float):
        self.arbiter.swipe.begin(x, y)

    def touch_move(self, x: float, y: float) -> Optional[str]:
        if not self.accepts_input():
            return None
        return self.arbiter.swipe.move(x, y)

    async def toggle_gyro(self, request=None, supported: bool = True) -> Optional[SensorPermission]:
        """Switch the tilt sensor off (returns None), or negotiate access and switch it on."""
        gyro = self.arbiter.gyro
        if gyro.enabled:
            gyro.disable()
            return None
        permission = await negotiate_sensor_permission(request, supported)
        if permission is SensorPermission.GRANTED:
            gyro.enable(self.clock())
        else:
            logger.info("Gyro not enabled: %s", permission.value)
        return permission

    def gyro_sample(self, beta, gamma) -> Optional[str]:
        gyro = self.arbiter.gyro
        if not self.accepts_input():
            # Keeps the watchdog fed while paused.
            if gyro.enabled:
                gyro.received = True
            return None
        return gyro.handle_sample(beta, gamma, self.clock())

    def recalibrate_gyro(self):
        self.arbiter.gyro.recalibrate()

    # ── Frame ──

    def frame(self, timestamp_ms: float) -> FrameResult:
        """Advance one rendered frame: watchdog, ticks, then effects."""
        gyro = self.arbiter.gyro
        self.gyro_changed = gyro.check_watchdog(self.clock())

        last = self.scheduler.last_timestamp
        dt = 0.0 if last is None else (timestamp_ms - last) / 1000.0

        result = self.scheduler.frame(timestamp_ms)
        if self.phase is not GamePhase.PAUSED:
            self.effects.update(max(0.0, dt))

        for event in result.events:
            if event["type"] == "eat":
                self.effects.spawn_burst(event["cell"], theme_for_level(event["level"])["food"])
                self.effects.show_combo(event["combo"])
            elif event["type"] == "level_up":
                self.effects.flash_level()
                self.effects.spawn_level_up(theme_for_level(event["level"])["snake_hue"])

        if result.game_over and not self.sensor_released:
            if gyro.enabled:
                self.gyro_changed = True
            self.stop()
            self.sensor_released = True

        self.last_frame = result
        self.last_cues = result.events
        return result
