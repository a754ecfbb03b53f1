"""Grid positions, occupancy queries and bounded random placement."""

import random
from typing import Callable, Optional

from .constants import GRID
from .models import Cell


def manhattan(a: Cell, b: Cell) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


class GridModel:
    """Square grid holding the snake body, obstacles and the food cell.

    A fresh GridModel is created for every run; the engine that owns it is the
    only writer.
    """

    def __init__(self, size: int = GRID, rng: Optional[random.Random] = None):
        self.size = size
        self.rng = rng or random.Random()
        self.snake: list[Cell] = []
        self.obstacles: set[Cell] = set()
        self.food: Optional[Cell] = None

    def in_bounds(self, cell: Cell) -> bool:
        x, y = cell
        return 0 <= x < self.size and 0 <= y < self.size

    def wrap(self, cell: Cell) -> Cell:
        return cell[0] % self.size, cell[1] % self.size

    def is_occupied(self, cell: Cell) -> bool:
        if cell in self.snake:
            return True
        if cell in self.obstacles:
            return True
        return self.food is not None and self.food == cell

    def random_cell(self) -> Cell:
        return self.rng.randrange(self.size), self.rng.randrange(self.size)

    def random_free_cell(
        self,
        accept: Callable[[Cell], bool],
        max_attempts: int,
        rank: Optional[Callable[[Cell], object]] = None,
    ) -> Cell:
        """Draw random cells until one passes ``accept``.

        Placement never fails: once ``max_attempts`` draws are used up the
        highest ranked candidate seen is returned. The default rank prefers
        unoccupied cells, so callers can still detect a collision afterwards.
        """
        if rank is None:
            rank = lambda c: not self.is_occupied(c)

        best: Optional[Cell] = None
        best_rank = None
        for _ in range(max(1, max_attempts)):
            candidate = self.random_cell()
            if accept(candidate):
                return candidate
            candidate_rank = rank(candidate)
            if best is None or candidate_rank >= best_rank:
                best, best_rank = candidate, candidate_rank
        return best
