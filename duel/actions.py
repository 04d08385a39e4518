"""
Turn actions and their legality checks.

An action is one of ``Stay``, ``Move`` (one orthogonal step) or ``Shoot``
(a list of waypoints; each waypoint after the first is a bend).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from .enums import DIRECTIONS, ActionType
from .geometry import segment
from .map import BattleGrid, Position
from .participant import Unit


@dataclass(frozen=True)
class Action:
    type: ActionType

    @property
    def key(self) -> str:
        return self.type.value

    def describe(self) -> str:
        return self.type.value


@dataclass(frozen=True)
class Stay(Action):
    type: ActionType = field(default=ActionType.STAY, init=False)


@dataclass(frozen=True)
class Move(Action):
    target: Position = (0, 0)
    type: ActionType = field(default=ActionType.MOVE, init=False)

    def __post_init__(self):
        object.__setattr__(self, "target", tuple(self.target))

    @property
    def key(self) -> str:
        return f"move-{self.target[0]},{self.target[1]}"

    def describe(self) -> str:
        return f"move to {self.target[0]},{self.target[1]}"


@dataclass(frozen=True)
class Shoot(Action):
    waypoints: Tuple[Position, ...] = ()
    type: ActionType = field(default=ActionType.SHOOT, init=False)

    def __post_init__(self):
        object.__setattr__(self, "waypoints", tuple(tuple(p) for p in self.waypoints))

    @property
    def bends(self) -> int:
        return max(0, len(self.waypoints) - 1)

    @property
    def key(self) -> str:
        return "shoot-" + "|".join(f"{x},{y}" for x, y in self.waypoints)

    def describe(self) -> str:
        return f"shoot via {len(self.waypoints)} waypoint(s), bends: {self.bends}"


def valid_moves(unit_pos: Position, opponent_pos: Position, grid: BattleGrid) -> List[Position]:
    moves = []
    for dx, dy in DIRECTIONS:
        nx, ny = unit_pos[0] + dx, unit_pos[1] + dy
        if grid.is_floor(nx, ny) and (nx, ny) != tuple(opponent_pos):
            moves.append((nx, ny))
    return moves


def validate_move(unit: Unit, opponent: Unit, target: Position,
                  grid: BattleGrid) -> Tuple[bool, str]:
    target = tuple(target)
    if target == opponent.position:
        return False, f"{unit.name} move blocked by opponent!"
    if target not in valid_moves(unit.position, opponent.position, grid):
        return False, "Invalid move target. Pick an adjacent floor cell."
    return True, ""


def validate_shoot(unit: Unit, waypoints: Sequence[Position],
                   grid: BattleGrid) -> Tuple[bool, str]:
    if not waypoints:
        return False, "A shot needs at least one waypoint."
    bends = len(waypoints) - 1
    if bends > unit.bend_budget:
        return False, (f"Too many bends ({bends}) for weapon level "
                       f"{unit.weapon_level} (max {unit.bend_budget}).")
    current = unit.position
    for waypoint in waypoints:
        if tuple(waypoint) == current:
            return False, "Cannot target the starting cell for a segment."
        if not segment(current, waypoint, grid).valid:
            return False, "Invalid target: path segment is blocked or not straight."
        current = tuple(waypoint)
    return True, ""
