from enum import Enum, auto
from typing import List, Tuple

GRID_SIZE = 20
WALL_DENSITY = 0.28
MAX_WEAPON_LEVEL = 5
MAX_POWERUPS = 4
POWERUP_SPAWN_CHANCE = 0.6
POWERUP_SPAWN_ATTEMPTS = 50
INITIAL_POWERUP_COUNT = MAX_POWERUPS
AI_DISTANCE_BIAS = 0.95
AI_MAX_BEND_CHECK_DEPTH = 2

MAX_GENERATION_ATTEMPTS = 10
CORNER_MARGIN = 5
FALLBACK_WALL_DENSITY = 0.1

# Seconds
SHOT_FLASH_DELAY = 0.6
RESOLVE_DELAY = 0.2
AI_THINK_DELAY = 0.5


class Cell(Enum):
    FLOOR = "floor"
    WALL = "wall"


class Side(Enum):
    PLAYER = "player"
    AI = "ai"

    @property
    def opponent(self) -> "Side":
        return Side.AI if self is Side.PLAYER else Side.PLAYER

    @property
    def label(self) -> str:
        return "Player" if self is Side.PLAYER else "AI"


class Phase(Enum):
    PLANNING = "planning"
    RESOLVING = "resolving"
    GAME_OVER = "game_over"


class ActionType(Enum):
    STAY = "stay"
    MOVE = "move"
    SHOOT = "shoot"


class PlanningMode(Enum):
    MOVE = "move"
    SHOOT = "shoot"


class EventType(Enum):
    MOVE_COMPLETED = auto()
    SHOT_RESOLVED = auto()
    POWERUP_COLLECTED = auto()
    POWERUP_SPAWNED = auto()
    TURN_SWITCHED = auto()
    GAME_OVER = auto()
    WARNING = auto()


# Up, down, left, right (y grows downward)
DIRECTIONS: List[Tuple[int, int]] = [(0, -1), (0, 1), (-1, 0), (1, 0)]
