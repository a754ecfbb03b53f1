"""Fixed-timestep tick scheduler with render interpolation."""

from typing import Optional

from .game import SimulationEngine
from .models import FrameResult, GamePhase


class TickScheduler:
    """Runs ``advance_tick`` at the engine's tick interval, whatever the frame rate.

    Each frame adds its wall-clock delta to an accumulator and pays out as
    many whole ticks as it covers, so a frame may run zero, one or several
    ticks. The remainder becomes the interpolation fraction for rendering.
    While paused nothing accumulates, and the first frame after a resume
    counts as zero elapsed time.
    """

    def __init__(self, engine: SimulationEngine):
        self.engine = engine
        self.accumulated = 0.0
        self.interpolation = 0.0
        self.last_timestamp: Optional[float] = None
        self._resume_pending = False

    def reset(self):
        self.accumulated = 0.0
        self.interpolation = 0.0
        self.last_timestamp = None
        self._resume_pending = False

    def frame(self, timestamp_ms: float) -> FrameResult:
        """Frame callback taking an absolute timestamp, like requestAnimationFrame."""
        if self.engine.phase is not GamePhase.RUNNING:
            self.last_timestamp = None
            return self.advance(0.0)
        if self.last_timestamp is None:
            self.last_timestamp = timestamp_ms
        delta = timestamp_ms - self.last_timestamp
        self.last_timestamp = timestamp_ms
        return self.advance(delta)

    def advance(self, delta_ms: float) -> FrameResult:
        engine = self.engine
        result = FrameResult()

        if engine.phase is not GamePhase.RUNNING:
            if engine.phase is GamePhase.PAUSED:
                self._resume_pending = True
            self.interpolation = 0.0
            result.game_over = engine.phase is GamePhase.OVER
            return result

        if self._resume_pending:
            self._resume_pending = False
            delta_ms = 0.0

        self.accumulated += max(0.0, delta_ms)
        while engine.phase is GamePhase.RUNNING:
            interval = engine.run.tick_interval_ms
            if self.accumulated < interval:
                break
            engine.advance_tick()
            result.ticks += 1
            if engine.phase is not GamePhase.RUNNING:
                result.game_over = True
                break
            self.accumulated -= interval
            if engine.run.leveled_up:
                result.leveled_up = True

        if engine.phase is GamePhase.RUNNING:
            self.interpolation = self.accumulated / engine.run.tick_interval_ms
        else:
            self.interpolation = 0.0
        result.interpolation = self.interpolation
        result.events = engine.drain_events()
        return result
