# Bendshot duel package

from .engine import DuelEngine, DuelConfig, DuelEvent, GameOutcome, PathPreview, Resolution
from .ai import DuelAI, STRATEGY_DEFAULTS
from .map import BattleGrid
from .generator import GridGenerator
from .geometry import segment, full_path, reachable, SegmentResult, PathResult
from .participant import Unit
from .powerups import PowerupField
from .actions import Action, Stay, Move, Shoot, valid_moves, validate_move, validate_shoot
from .batch import BatchRunner, BatchConfig, BatchResult, DuelRecord
from .enums import Cell, Side, Phase, ActionType, PlanningMode, EventType, MAX_WEAPON_LEVEL, MAX_POWERUPS
from .dice import roll_chance, roll_jitter, roll_cell

__version__ = "1.0.0"

__all__ = [
    "DuelEngine", "DuelConfig", "DuelEvent", "GameOutcome", "PathPreview", "Resolution",
    "DuelAI", "STRATEGY_DEFAULTS",
    "BattleGrid", "GridGenerator",
    "segment", "full_path", "reachable", "SegmentResult", "PathResult",
    "Unit", "PowerupField",
    "Action", "Stay", "Move", "Shoot", "valid_moves", "validate_move", "validate_shoot",
    "BatchRunner", "BatchConfig", "BatchResult", "DuelRecord",
    "Cell", "Side", "Phase", "ActionType", "PlanningMode", "EventType",
    "MAX_WEAPON_LEVEL", "MAX_POWERUPS",
    "roll_chance", "roll_jitter", "roll_cell",
]
