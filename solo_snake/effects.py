"""Decorative effects: particles and decaying display timers."""

import math
import random
from typing import Optional

from .constants import (
    GRID, TILE_SIZE, COMBO_DISPLAY_SECONDS, LEVEL_FLASH_ALPHA, LEVEL_FLASH_DECAY,
)
from .models import Cell, Particle


class EffectBus:
    """Particle physics in pixel space, advanced every frame.

    Nothing here is read back by the simulation.
    """

    def __init__(self, rng: Optional[random.Random] = None, tile_size: int = TILE_SIZE):
        self.rng = rng or random.Random()
        self.tile_size = tile_size
        self.particles: list[Particle] = []
        self.combo = 1
        self.combo_timer = 0.0
        self.level_flash = 0.0

    def clear(self):
        self.particles.clear()
        self.combo = 1
        self.combo_timer = 0.0
        self.level_flash = 0.0

    def spawn_burst(self, cell: Cell, color: str, count: int = 10):
        cx = cell[0] * self.tile_size + self.tile_size / 2
        cy = cell[1] * self.tile_size + self.tile_size / 2
        for i in range(count):
            angle = math.tau * i / count + self.rng.random() * 0.5
            speed = 40 + self.rng.random() * 80
            self.particles.append(Particle(
                x=cx,
                y=cy,
                vx=math.cos(angle) * speed,
                vy=math.sin(angle) * speed,
                life=1.0,
                decay=1.5 + self.rng.random() * 1.5,
                color=color,
                size=2 + self.rng.random() * 3,
            ))

    def spawn_level_up(self, snake_hue: int, bursts: int = 3):
        color = f"hsl({snake_hue}, 100%, 60%)"
        for _ in range(bursts):
            cell = (self.rng.randrange(GRID), self.rng.randrange(GRID))
            self.spawn_burst(cell, color, 6)

    def show_combo(self, combo: int):
        self.combo = combo
        self.combo_timer = COMBO_DISPLAY_SECONDS

    def flash_level(self):
        self.level_flash = LEVEL_FLASH_ALPHA

    def update(self, dt: float):
        alive = []
        for p in self.particles:
            p.x += p.vx * dt
            p.y += p.vy * dt
            p.life -= p.decay * dt
            if p.life > 0:
                alive.append(p)
        self.particles = alive

        if self.combo_timer > 0:
            self.combo_timer = max(0.0, self.combo_timer - dt)
        if self.level_flash > 0:
            self.level_flash = max(0.0, self.level_flash - LEVEL_FLASH_DECAY * dt)
