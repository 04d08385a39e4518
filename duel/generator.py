"""
Procedural battlefield generation.

Walls are scattered at random with a bias away from the four corner zones
(where the units start). A layout is accepted only when every floor cell can
reach every other one; after ``MAX_GENERATION_ATTEMPTS`` failures a sparse
fallback layout is used instead.
"""

from __future__ import annotations

import math
import random
from typing import List, Optional, Tuple

from .dice import roll_cell, roll_chance
from .enums import (
    CORNER_MARGIN,
    FALLBACK_WALL_DENSITY,
    GRID_SIZE,
    MAX_GENERATION_ATTEMPTS,
    WALL_DENSITY,
    Cell,
)
from .map import BattleGrid, Position

OPEN_AREA_WALL_CHANCE = 0.9
CORNER_WALL_CHANCE = 0.2
START_SPREAD_RATIO = 0.6


class GridGenerator:
    def __init__(self, size: int = GRID_SIZE, wall_density: float = WALL_DENSITY,
                 rng: Optional[random.Random] = None,
                 max_attempts: int = MAX_GENERATION_ATTEMPTS):
        self._check(size, wall_density)
        self.size = size
        self.wall_density = wall_density
        self.rng = rng or random.Random()
        self.max_attempts = max_attempts
        self.last_used_fallback = False
        self.last_attempts = 0

    @staticmethod
    def _check(size: int, wall_density: float) -> None:
        if size < 5:
            raise ValueError(f"Grid size must be at least 5, got {size}")
        if not 0 <= wall_density < 1:
            raise ValueError(f"Wall density must be in [0, 1), got {wall_density}")

    def is_near_corner(self, x: int, y: int) -> bool:
        lo = CORNER_MARGIN - 1
        hi = self.size - CORNER_MARGIN
        near_x = x <= lo or x >= hi
        near_y = y <= lo or y >= hi
        return near_x and near_y

    def generate(self, size: Optional[int] = None, wall_density: Optional[float] = None) -> BattleGrid:
        if size is not None or wall_density is not None:
            size = self.size if size is None else size
            wall_density = self.wall_density if wall_density is None else wall_density
            self._check(size, wall_density)
            self.size, self.wall_density = size, wall_density
        self.last_used_fallback = False
        self.last_attempts = 0
        target = math.floor(self.size * self.size * self.wall_density)
        for attempt in range(1, self.max_attempts + 1):
            self.last_attempts = attempt
            grid = self._scatter_walls(target)
            if grid.is_connected():
                return grid
        self.last_used_fallback = True
        return self.generate_fallback()

    def _scatter_walls(self, target: int) -> BattleGrid:
        grid = BattleGrid(self.size)
        walls = 0
        while walls < target:
            x, y = roll_cell(self.size, self.rng)
            if grid.cells[y][x] != Cell.FLOOR:
                continue
            if not self.is_near_corner(x, y) and roll_chance(OPEN_AREA_WALL_CHANCE, self.rng):
                grid.set_cell(x, y, Cell.WALL)
                walls += 1
            elif roll_chance(CORNER_WALL_CHANCE, self.rng):
                grid.set_cell(x, y, Cell.WALL)
                walls += 1
        return grid

    def generate_fallback(self) -> BattleGrid:
        grid = BattleGrid(self.size)
        draws = int(math.ceil(self.size * self.size * FALLBACK_WALL_DENSITY))
        for _ in range(draws):
            x, y = roll_cell(self.size, self.rng)
            grid.set_cell(x, y, Cell.WALL)
        return grid

    def corner_seeds(self, size: Optional[int] = None) -> List[Position]:
        n = size or self.size
        return [(2, 2), (n - 3, n - 3), (2, n - 3), (n - 3, 2)]

    def find_start_positions(self, grid: BattleGrid) -> Optional[Tuple[Position, Position]]:
        """Player start near the top-left corner, AI start in a distant corner.

        Returns ``None`` when the grid cannot hold both units.
        """
        seeds = self.corner_seeds(grid.size)
        player_start = grid.nearest_floor(seeds[0])
        if player_start is None:
            return None
        far_corners = seeds[1:]
        self.rng.shuffle(far_corners)
        min_spread = grid.size * START_SPREAD_RATIO
        for corner in far_corners:
            candidate = grid.nearest_floor(corner, occupied=[player_start])
            if candidate and grid.manhattan_distance(player_start, candidate) > min_spread:
                return player_start, candidate
        center = (grid.size // 2, grid.size // 2)
        ai_start = grid.nearest_floor(center, occupied=[player_start])
        if ai_start is None:
            return None
        return player_start, ai_start
