"""Directional intent arbitration for keys, buttons, swipes and the tilt sensor."""

import logging
import math
from typing import Awaitable, Callable, Optional

from .constants import (
    DIRECTIONS, OPPOSITES, KEY_MAP, START_DIRECTION,
    SWIPE_THRESHOLD_PX, GYRO_DEAD_ZONE, GYRO_THROTTLE_MS, GYRO_WATCHDOG_MS,
)
from .models import GyroCalibration, GyroState, SensorPermission

logger = logging.getLogger(__name__)


def _finite(*values) -> bool:
    return all(
        isinstance(v, (int, float)) and not isinstance(v, bool) and math.isfinite(v)
        for v in values
    )


class InputArbiter:
    """Single last-writer-wins register for the next direction.

    Every input source writes through ``record_intent``. Reversals are
    rejected by the engine when the direction is committed, so the register
    itself accepts anything that names a real direction.
    """

    def __init__(self, heading: Optional[Callable[[], str]] = None):
        self.pending = START_DIRECTION
        self.heading = heading or (lambda: self.pending)
        self.swipe = SwipeTracker(self)
        self.gyro = GyroController(self)

    def record_intent(self, direction) -> bool:
        if not isinstance(direction, str) or direction not in DIRECTIONS:
            logger.debug("Ignoring unknown direction %r", direction)
            return False
        self.pending = direction
        return True

    def is_reversal(self, direction: str) -> bool:
        return OPPOSITES.get(direction) == self.heading()

    def handle_key(self, key) -> bool:
        if not isinstance(key, str):
            return False
        return self.record_intent(KEY_MAP.get(key))

    def handle_button(self, name) -> bool:
        return self.record_intent(name)

    def reset(self, direction: str = START_DIRECTION):
        self.pending = direction
        self.swipe.reset()
        self.gyro.recalibrate()


class SwipeTracker:
    """Turns a continuous touch drag into directions, re-anchoring after each one."""

    def __init__(self, arbiter: InputArbiter, threshold: float = SWIPE_THRESHOLD_PX):
        self.arbiter = arbiter
        self.threshold = threshold
        self.anchor: Optional[tuple[float, float]] = None

    def reset(self):
        self.anchor = None

    def begin(self, x: float, y: float):
        self.anchor = (x, y) if _finite(x, y) else None

    def move(self, x: float, y: float) -> Optional[str]:
        if not _finite(x, y):
            return None
        if self.anchor is None:
            self.anchor = (x, y)
            return None

        dx = x - self.anchor[0]
        dy = y - self.anchor[1]
        if abs(dx) < self.threshold and abs(dy) < self.threshold:
            return None

        if abs(dx) > abs(dy):
            direction = "right" if dx > 0 else "left"
        else:
            direction = "down" if dy > 0 else "up"

        if self.arbiter.is_reversal(direction):
            return None

        self.arbiter.record_intent(direction)
        self.anchor = (x, y)
        return direction


class GyroController:
    """Tilt sensor state machine: DISABLED -> CALIBRATING -> ACTIVE.

    The first sample after (re)calibration becomes the neutral orientation.
    Later samples are read relative to it, with a dead zone, a throttle on
    direction changes, and a watchdog that switches the feature off if the
    sensor never reports after being enabled.
    """

    def __init__(
        self,
        arbiter: InputArbiter,
        dead_zone: float = GYRO_DEAD_ZONE,
        throttle_ms: float = GYRO_THROTTLE_MS,
        watchdog_ms: float = GYRO_WATCHDOG_MS,
    ):
        self.arbiter = arbiter
        self.dead_zone = dead_zone
        self.throttle_ms = throttle_ms
        self.watchdog_ms = watchdog_ms
        self.state = GyroState.DISABLED
        self.calibration = GyroCalibration()
        self.last_emitted: Optional[str] = None
        self.enabled_at: Optional[float] = None
        self.received = False
        self.unavailable = False

    @property
    def enabled(self) -> bool:
        return self.state is not GyroState.DISABLED

    def enable(self, now_ms: float):
        self.state = GyroState.CALIBRATING
        self.calibration.reset()
        self.last_emitted = None
        self.enabled_at = now_ms
        self.received = False
        self.unavailable = False
        logger.info("Gyro enabled, waiting for first sample")

    def disable(self):
        if self.state is not GyroState.DISABLED:
            logger.info("Gyro disabled")
        self.state = GyroState.DISABLED
        self.calibration.reset()
        self.last_emitted = None
        self.enabled_at = None

    def recalibrate(self):
        if self.state is GyroState.DISABLED:
            return
        self.state = GyroState.CALIBRATING
        self.calibration.reset()
        self.last_emitted = None

    def check_watchdog(self, now_ms: float) -> bool:
        """Disable the feature if no sample arrived in time. Returns True when it fired."""
        if self.state is GyroState.DISABLED or self.received or self.enabled_at is None:
            return False
        if now_ms - self.enabled_at < self.watchdog_ms:
            return False
        self.disable()
        self.unavailable = True
        logger.warning("No orientation data within %dms, gyro unavailable", self.watchdog_ms)
        return True

    def handle_sample(self, beta, gamma, now_ms: float) -> Optional[str]:
        if self.state is GyroState.DISABLED:
            return None
        self.received = True
        if not _finite(beta, gamma):
            return None

        cal = self.calibration
        if self.state is GyroState.CALIBRATING:
            cal.beta_offset = beta
            cal.gamma_offset = gamma
            cal.calibrated = True
            self.state = GyroState.ACTIVE
            logger.debug("Gyro calibrated at beta=%.1f gamma=%.1f", beta, gamma)
            return None

        rel_beta = beta - cal.beta_offset
        rel_gamma = gamma - cal.gamma_offset
        if abs(rel_beta) < self.dead_zone and abs(rel_gamma) < self.dead_zone:
            return None

        if abs(rel_gamma) > abs(rel_beta):
            direction = "right" if rel_gamma > 0 else "left"
        else:
            direction = "down" if rel_beta > 0 else "up"

        if direction == self.last_emitted:
            return None
        if cal.last_change_ms is not None and now_ms - cal.last_change_ms < self.throttle_ms:
            return None
        if self.arbiter.is_reversal(direction):
            return None

        self.arbiter.record_intent(direction)
        self.last_emitted = direction
        cal.last_change_ms = now_ms
        return direction


async def negotiate_sensor_permission(
    request: Optional[Callable[[], Awaitable[str]]] = None,
    supported: bool = True,
) -> SensorPermission:
    """Resolve whether the orientation sensor may be used.

    ``request`` is the platform's permission prompt, or None where the
    platform grants access without asking.
    """
    if not supported:
        return SensorPermission.UNSUPPORTED
    if request is None:
        return SensorPermission.GRANTED
    try:
        answer = await request()
    except Exception:
        logger.warning("Sensor permission request failed", exc_info=True)
        return SensorPermission.DENIED
    if answer == SensorPermission.GRANTED.value:
        return SensorPermission.GRANTED
    if answer == SensorPermission.UNSUPPORTED.value:
        return SensorPermission.UNSUPPORTED
    return SensorPermission.DENIED
