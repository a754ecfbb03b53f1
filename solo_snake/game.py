"""Core game state and logic."""

import logging
import random
import time
from typing import Callable, Optional

from .config import GameOptions
from .constants import (
    GRID, START_SNAKE, START_DIRECTION, DIRECTIONS, OPPOSITES,
    FOODS_PER_LEVEL, POINTS_PER_FOOD, COMBO_WINDOW_MS, MAX_COMBO,
    FOOD_PLACEMENT_ATTEMPTS, OBSTACLE_PLACEMENT_ATTEMPTS, OBSTACLES_PER_LEVEL, CLEAR_ZONE,
)
from .grid import GridModel, manhattan
from .input import InputArbiter
from .models import BoundaryMode, Cell, GamePhase, RunState
from .store import HighScoreStore, MemoryHighScoreStore

logger = logging.getLogger(__name__)


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class SimulationEngine:
    """Authoritative state for one snake run and the tick transition.

    ``start()`` throws away the previous run and builds a new GridModel and
    RunState. Directions come from the InputArbiter once per tick.
    """

    def __init__(
        self,
        arbiter: Optional[InputArbiter] = None,
        options: Optional[GameOptions] = None,
        store: Optional[HighScoreStore] = None,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.arbiter = arbiter or InputArbiter()
        self.arbiter.heading = lambda: self.run.direction
        self.options = options or GameOptions()
        self.store = store or MemoryHighScoreStore()
        self.rng = rng or random.Random()
        self.clock = clock or monotonic_ms
        self.on_game_over: Optional[Callable[["SimulationEngine"], None]] = None

        self.phase = GamePhase.IDLE
        self.run = RunState(high_score=self.store.load_high_score())
        self.grid = GridModel(GRID, self.rng)
        self.prev_snake: list[Cell] = []
        self.events: list[dict] = []
        self._record_at_start = self.run.high_score

    @property
    def snake(self) -> list[Cell]:
        return self.grid.snake

    @property
    def food(self) -> Optional[Cell]:
        return self.grid.food

    @property
    def obstacles(self) -> set[Cell]:
        return self.grid.obstacles

    def start(self):
        high_score = max(self.run.high_score, self.store.load_high_score())
        self.run = RunState(high_score=high_score)
        self._record_at_start = high_score
        self.grid = GridModel(GRID, self.rng)
        self.grid.snake = list(START_SNAKE)
        self.prev_snake = list(self.grid.snake)
        self.events = []
        self.arbiter.reset(START_DIRECTION)
        self.place_food()
        self.phase = GamePhase.RUNNING
        logger.info("Run started (boundary=%s, high score %d)", self.options.boundary.value, high_score)

    def toggle_pause(self) -> bool:
        if self.phase is GamePhase.RUNNING:
            self.phase = GamePhase.PAUSED
        elif self.phase is GamePhase.PAUSED:
            self.phase = GamePhase.RUNNING
        else:
            return False
        return True

    def place_food(self):
        grid = self.grid
        grid.food = None
        grid.food = grid.random_free_cell(
            lambda c: c not in grid.snake and c not in grid.obstacles,
            FOOD_PLACEMENT_ATTEMPTS,
        )

    def add_obstacles(self):
        grid = self.grid
        head = grid.snake[0]
        lo, hi = OBSTACLES_PER_LEVEL
        count = self.rng.randint(lo, hi)
        for _ in range(count):
            cell = grid.random_free_cell(
                lambda c: not grid.is_occupied(c) and manhattan(c, head) > CLEAR_ZONE,
                OBSTACLE_PLACEMENT_ATTEMPTS,
                rank=lambda c: (not grid.is_occupied(c), manhattan(c, head)),
            )
            if grid.is_occupied(cell):
                logger.debug("No free cell for obstacle, skipping")
                continue
            grid.obstacles.add(cell)

    def commit_direction(self) -> str:
        run = self.run
        pending = self.arbiter.pending
        if pending in DIRECTIONS and OPPOSITES[pending] != run.direction:
            run.direction = pending
        return run.direction

    def advance_tick(self) -> bool:
        """Run one simulation step. Returns False once the run is over."""
        if self.phase is not GamePhase.RUNNING:
            return False

        run = self.run
        grid = self.grid
        run.leveled_up = False

        dx, dy = DIRECTIONS[self.commit_direction()]
        self.prev_snake = list(grid.snake)
        hx, hy = grid.snake[0]
        head = (hx + dx, hy + dy)

        if not grid.in_bounds(head):
            if self.options.boundary is BoundaryMode.WRAP:
                head = grid.wrap(head)
            else:
                self.game_over("wall")
                return False

        if head in grid.snake:
            self.game_over("self")
            return False
        if head in grid.obstacles:
            self.game_over("obstacle")
            return False

        grid.snake.insert(0, head)

        if head == grid.food:
            self.eat(head)
            self.prev_snake.insert(0, self.prev_snake[0])
        else:
            grid.snake.pop()
        return True

    def eat(self, cell: Cell):
        run = self.run
        now = self.clock()
        if run.last_eat_ms is not None and now - run.last_eat_ms < COMBO_WINDOW_MS:
            run.combo = min(run.combo + 1, MAX_COMBO)
        else:
            run.combo = 1
        run.last_eat_ms = now

        run.score += POINTS_PER_FOOD * run.combo
        run.food_eaten += 1
        if run.score > run.high_score:
            run.high_score = run.score
            self.store.save_high_score(run.high_score)
        self.events.append({"type": "eat", "combo": run.combo, "cell": cell, "level": run.level})

        if run.food_eaten % FOODS_PER_LEVEL == 0:
            run.set_level(run.level + 1)
            run.leveled_up = True
            self.add_obstacles()
            self.events.append({"type": "level_up", "level": run.level})
            logger.info("Level %d reached, tick interval %dms", run.level, run.tick_interval_ms)

        self.place_food()

    def game_over(self, cause: str):
        run = self.run
        self.phase = GamePhase.OVER
        run.new_record = run.score > self._record_at_start
        self.events.append({"type": "death", "cause": cause})
        logger.info("Game over (%s): score %d, level %d", cause, run.score, run.level)
        if self.on_game_over:
            self.on_game_over(self)

    def drain_events(self) -> list[dict]:
        events, self.events = self.events, []
        return events
