"""
Line-of-fire geometry.

Shots are chains of axis-aligned segments. ``segment`` walks a single
straight leg, ``full_path`` chains legs through the waypoints of a shot plan,
and ``reachable`` answers whether *any* bent shot within a bend budget can
connect two cells.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Set, Tuple

from .enums import DIRECTIONS
from .map import BattleGrid, Position

Direction = Tuple[int, int]


@dataclass
class SegmentResult:
    path: List[Position] = field(default_factory=list)
    valid: bool = False


@dataclass
class PathResult:
    path: List[Position] = field(default_factory=list)
    valid: bool = False

    def hits(self, target: Position) -> bool:
        return self.valid and tuple(target) in self.path


def step_direction(start: Position, end: Position) -> Optional[Direction]:
    """Unit step from *start* toward *end*, or ``None`` unless purely orthogonal."""
    dx = end[0] - start[0]
    dy = end[1] - start[1]
    if dx == 0 and dy == 0:
        return None
    if dx != 0 and dy != 0:
        return None
    return ((dx > 0) - (dx < 0), (dy > 0) - (dy < 0))


def segment(start: Position, end: Position, grid: BattleGrid) -> SegmentResult:
    direction = step_direction(start, end)
    if direction is None:
        return SegmentResult()
    sx, sy = direction
    x, y = start
    path: List[Position] = []
    while (x, y) != tuple(end):
        x, y = x + sx, y + sy
        if not grid.in_bounds(x, y) or grid.is_wall(x, y):
            return SegmentResult(path=path, valid=False)
        path.append((x, y))
    return SegmentResult(path=path, valid=True)


def full_path(start: Position, waypoints: Sequence[Position], grid: BattleGrid) -> PathResult:
    if not waypoints:
        return PathResult()
    path: List[Position] = []
    current = tuple(start)
    for waypoint in waypoints:
        leg = segment(current, waypoint, grid)
        if not leg.valid:
            return PathResult()
        path.extend(leg.path)
        current = tuple(waypoint)
    return PathResult(path=path, valid=True)


def reachable(attacker: Position, target: Position, grid: BattleGrid, bend_budget: int) -> bool:
    """Whether a shot with at most *bend_budget* direction changes can hit *target*.

    Breadth-first search over (cell, bends used, arriving direction). From each
    state a ray is cast in every direction except straight back; turning costs
    one bend. Cell occupancy is ignored.
    """
    attacker = tuple(attacker)
    target = tuple(target)
    if not grid.in_bounds(*target) or grid.is_wall(*target):
        return False
    if attacker == target:
        return True
    if bend_budget < 0:
        return False

    queue = deque([(attacker, 0, None)])
    visited: Set[Tuple[Position, int, Optional[Direction]]] = {(attacker, 0, None)}
    while queue:
        (x, y), bends, arriving = queue.popleft()
        for direction in DIRECTIONS:
            if arriving is not None and direction == (-arriving[0], -arriving[1]):
                continue
            ray_bends = bends + (1 if arriving is not None and direction != arriving else 0)
            if ray_bends > bend_budget:
                continue
            dx, dy = direction
            nx, ny = x + dx, y + dy
            while grid.in_bounds(nx, ny) and not grid.is_wall(nx, ny):
                if (nx, ny) == target:
                    return True
                state = ((nx, ny), ray_bends, direction)
                if state not in visited:
                    visited.add(state)
                    queue.append(state)
                nx, ny = nx + dx, ny + dy
    return False
