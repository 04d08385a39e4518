"""
Weapon powerups.

Each collected powerup raises the collector's weapon level by one (capped).
At most ``max_powerups`` lie on the board; after every turn a new one may
appear with ``spawn_chance``.
"""

from __future__ import annotations

import random
from typing import Iterable, List, Optional, Tuple

from .dice import roll_cell, roll_chance
from .enums import (
    AI_DISTANCE_BIAS,
    MAX_POWERUPS,
    POWERUP_SPAWN_ATTEMPTS,
    POWERUP_SPAWN_CHANCE,
    Side,
)
from .map import BattleGrid, Position
from .participant import Unit


def nearest_position(origin: Position, positions: Iterable[Position]) -> Optional[Position]:
    """Closest of *positions* to *origin* by Manhattan distance; first wins ties."""
    best: Optional[Position] = None
    best_dist = None
    for p in positions:
        d = BattleGrid.manhattan_distance(origin, p)
        if best_dist is None or d < best_dist:
            best, best_dist = p, d
    return best


class PowerupField:
    def __init__(self, max_powerups: int = MAX_POWERUPS,
                 spawn_chance: float = POWERUP_SPAWN_CHANCE,
                 spawn_attempts: int = POWERUP_SPAWN_ATTEMPTS,
                 rng: Optional[random.Random] = None):
        if max_powerups < 0:
            raise ValueError(f"max_powerups must be >= 0, got {max_powerups}")
        if not 0 <= spawn_chance <= 1:
            raise ValueError(f"spawn_chance must be in [0, 1], got {spawn_chance}")
        self.max_powerups = max_powerups
        self.spawn_chance = spawn_chance
        self.spawn_attempts = spawn_attempts
        self.rng = rng or random.Random()
        self.positions: List[Position] = []

    def __len__(self) -> int:
        return len(self.positions)

    def __contains__(self, position) -> bool:
        return tuple(position) in self.positions

    def clear(self) -> None:
        self.positions = []

    @property
    def at_cap(self) -> bool:
        return len(self.positions) >= self.max_powerups

    def _is_free(self, grid: BattleGrid, units: Iterable[Unit], x: int, y: int) -> bool:
        if not grid.is_floor(x, y):
            return False
        if any(u.position == (x, y) for u in units):
            return False
        return (x, y) not in self.positions

    def maybe_spawn(self, grid: BattleGrid, units: Iterable[Unit],
                    game_over: bool = False, resolving: bool = False) -> Optional[Position]:
        if game_over or resolving or self.at_cap:
            return None
        if not roll_chance(self.spawn_chance, self.rng):
            return None
        return self.spawn(grid, units)

    def spawn(self, grid: BattleGrid, units: Iterable[Unit]) -> Optional[Position]:
        """Place one powerup on a random free floor cell; ``None`` if the board is too crowded."""
        if self.at_cap:
            return None
        units = list(units)
        for _ in range(self.spawn_attempts):
            x, y = roll_cell(grid.size, self.rng)
            if self._is_free(grid, units, x, y):
                self.positions.append((x, y))
                return (x, y)
        return None

    def collect(self, unit: Unit, position: Position) -> bool:
        position = tuple(position)
        if position not in self.positions:
            return False
        self.positions.remove(position)
        unit.upgrade_weapon()
        return True

    def nearest(self, position: Position) -> Optional[Position]:
        return nearest_position(position, self.positions)

    @staticmethod
    def placement_weight(cell: Position, player_pos: Position, ai_pos: Position,
                         bias: float = AI_DISTANCE_BIAS) -> float:
        """Favor cells whose AI/player distance ratio is close to *bias*."""
        dist_player = max(1, BattleGrid.manhattan_distance(cell, player_pos))
        dist_ai = max(1, BattleGrid.manhattan_distance(cell, ai_pos))
        diff = abs(dist_ai / dist_player - bias)
        return 0.01 + 1 / (1 + diff * diff * 10)

    def seed_initial(self, grid: BattleGrid, units: Iterable[Unit], count: int) -> List[Position]:
        """Weighted sampling without replacement for the opening powerups."""
        units = list(units)
        count = min(count, self.max_powerups - len(self.positions))
        if count <= 0:
            return []
        available = [(x, y) for (x, y) in grid.floor_cells() if self._is_free(grid, units, x, y)]
        if len(available) <= count:
            self.positions.extend(available)
            return available

        player_pos = next(u.position for u in units if u.side is Side.PLAYER)
        ai_pos = next(u.position for u in units if u.side is Side.AI)
        weighted: List[Tuple[Position, float]] = [
            (cell, self.placement_weight(cell, player_pos, ai_pos)) for cell in available
        ]
        placed: List[Position] = []
        while len(placed) < count and weighted:
            total = sum(w for _, w in weighted)
            pick = self.rng.random() * total
            index = len(weighted) - 1
            for i, (_, w) in enumerate(weighted):
                pick -= w
                if pick <= 0:
                    index = i
                    break
            cell, _ = weighted.pop(index)
            placed.append(cell)
        self.positions.extend(placed)
        return placed
