from collections import deque
from typing import Iterable, List, Optional, Set, Tuple

from .enums import Cell, DIRECTIONS

Position = Tuple[int, int]


class BattleGrid:
    """Square floor/wall matrix, stored row-major (``cells[y][x]``)."""

    def __init__(self, size: int, cells: Optional[List[List[Cell]]] = None):
        self.size = size
        if cells is None:
            cells = [[Cell.FLOOR for _ in range(size)] for _ in range(size)]
        if len(cells) != size or any(len(row) != size for row in cells):
            raise ValueError(f"Grid rows must be {size}x{size}")
        self.cells: List[List[Cell]] = cells

    @classmethod
    def from_rows(cls, rows: List[str]) -> "BattleGrid":
        """Build a grid from strings where ``#`` is a wall and anything else floor."""
        size = len(rows)
        cells = [[Cell.WALL if ch == "#" else Cell.FLOOR for ch in row] for row in rows]
        return cls(size, cells)

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.size and 0 <= y < self.size

    def get_cell(self, x: int, y: int) -> Optional[Cell]:
        if self.in_bounds(x, y):
            return self.cells[y][x]
        return None

    def set_cell(self, x: int, y: int, cell: Cell) -> None:
        self.cells[y][x] = cell

    def is_wall(self, x: int, y: int) -> bool:
        return self.get_cell(x, y) == Cell.WALL

    def is_floor(self, x: int, y: int) -> bool:
        return self.get_cell(x, y) == Cell.FLOOR

    def get_neighbors(self, x: int, y: int) -> List[Position]:
        neighbors = []
        for dx, dy in DIRECTIONS:
            nx, ny = x + dx, y + dy
            if self.in_bounds(nx, ny):
                neighbors.append((nx, ny))
        return neighbors

    @staticmethod
    def manhattan_distance(a: Position, b: Position) -> int:
        return abs(a[0] - b[0]) + abs(a[1] - b[1])

    def floor_cells(self) -> List[Position]:
        return [(x, y) for y in range(self.size) for x in range(self.size)
                if self.cells[y][x] == Cell.FLOOR]

    def wall_count(self) -> int:
        return sum(1 for row in self.cells for c in row if c == Cell.WALL)

    def first_floor(self) -> Optional[Position]:
        for y in range(self.size):
            for x in range(self.size):
                if self.cells[y][x] == Cell.FLOOR:
                    return (x, y)
        return None

    def reachable_floor(self, start: Position) -> Set[Position]:
        """Flood fill over orthogonally adjacent floor cells."""
        if not self.is_floor(*start):
            return set()
        seen = {start}
        queue = deque([start])
        while queue:
            x, y = queue.popleft()
            for nx, ny in self.get_neighbors(x, y):
                if (nx, ny) in seen or not self.is_floor(nx, ny):
                    continue
                seen.add((nx, ny))
                queue.append((nx, ny))
        return seen

    def is_connected(self) -> bool:
        start = self.first_floor()
        if start is None:
            return False
        total = len(self.floor_cells())
        return len(self.reachable_floor(start)) == total

    def nearest_floor(self, origin: Position, occupied: Iterable[Position] = ()) -> Optional[Position]:
        """Breadth-first search from *origin* (walls included) for the closest free floor."""
        blocked = set(occupied)
        seen = {origin} | blocked
        queue = deque([origin])
        while queue:
            x, y = queue.popleft()
            if self.is_floor(x, y) and (x, y) not in blocked:
                return (x, y)
            for nx, ny in self.get_neighbors(x, y):
                if (nx, ny) in seen:
                    continue
                seen.add((nx, ny))
                queue.append((nx, ny))
        return None

    def render_rows(self, marks: Optional[dict] = None) -> List[str]:
        marks = marks or {}
        rows = []
        for y in range(self.size):
            chars = []
            for x in range(self.size):
                if (x, y) in marks:
                    chars.append(marks[(x, y)])
                elif self.cells[y][x] == Cell.WALL:
                    chars.append("#")
                else:
                    chars.append(".")
            rows.append(" ".join(chars))
        return rows

    def __repr__(self) -> str:
        return f"BattleGrid({self.size}x{self.size}, walls={self.wall_count()})"
