"""
DuelEngine - session owner and turn state machine.

The engine owns the grid, both units, the powerups and the turn state. The
presentation layer (or a batch runner) feeds it discrete commands and reads
back state and events:

    engine = DuelEngine(DuelConfig(), rng=random.Random(3))
    engine.request_move((3, 2))
    engine.request_shoot_waypoint((3, 9))
    for event in engine.drain_events():
        ...

Turn cycle:
    PLAYER/PLANNING -> RESOLVING -> (GAME_OVER | AI/PLANNING)
    AI/PLANNING     -> RESOLVING -> (GAME_OVER | PLAYER/PLANNING)

Commands are accepted only from the active side while the phase is
PLANNING. Illegal commands never raise; they come back as a failed
``Resolution`` carrying a human-readable message.
"""

from __future__ import annotations

import random
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from .actions import Action, Move, Shoot, Stay, valid_moves, validate_move, validate_shoot
from .ai import DuelAI
from .enums import (
    AI_MAX_BEND_CHECK_DEPTH,
    AI_THINK_DELAY,
    GRID_SIZE,
    INITIAL_POWERUP_COUNT,
    MAX_POWERUPS,
    MAX_WEAPON_LEVEL,
    POWERUP_SPAWN_CHANCE,
    RESOLVE_DELAY,
    SHOT_FLASH_DELAY,
    WALL_DENSITY,
    EventType,
    Phase,
    PlanningMode,
    Side,
)
from .generator import GridGenerator
from .geometry import full_path, segment
from .map import BattleGrid, Position
from .participant import Unit
from .powerups import PowerupField


@dataclass
class DuelConfig:
    """Session settings.

    Parameters
    ----------
    grid_size, wall_density : board shape and target wall share.
    max_weapon_level : weapon level cap (bend budget is level - 1).
    max_powerups, spawn_chance, initial_powerups : powerup economy.
    ai_strategy, ai_max_bend_depth : AI planner settings.
    shot_flash_delay, resolve_delay, ai_think_delay : pauses in seconds.
    realtime : actually sleep for the pauses (off for tests and batches).
    auto_play_ai : play the AI turn as soon as it becomes active.
    verbose : echo log lines to stdout.
    """

    grid_size: int = GRID_SIZE
    wall_density: float = WALL_DENSITY
    max_weapon_level: int = MAX_WEAPON_LEVEL
    max_powerups: int = MAX_POWERUPS
    spawn_chance: float = POWERUP_SPAWN_CHANCE
    initial_powerups: int = INITIAL_POWERUP_COUNT
    ai_strategy: str = "balanced"
    ai_max_bend_depth: int = AI_MAX_BEND_CHECK_DEPTH
    shot_flash_delay: float = SHOT_FLASH_DELAY
    resolve_delay: float = RESOLVE_DELAY
    ai_think_delay: float = AI_THINK_DELAY
    realtime: bool = False
    auto_play_ai: bool = True
    verbose: bool = False


@dataclass
class GameOutcome:
    winner: Optional[Side]
    reason: str


@dataclass
class Resolution:
    """What happened to one submitted action."""
    side: Side
    action: Action
    success: bool
    message: str
    path: List[Position] = field(default_factory=list)
    hit: bool = False
    collected_powerup: bool = False
    weapon_level: Optional[int] = None
    game_over: bool = False
    accepted: bool = True


@dataclass
class DuelEvent:
    type: EventType
    side: Optional[Side] = None
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class PathPreview:
    """Hypothetical next waypoint during shoot planning."""
    path: List[Position]
    valid: bool
    hits_opponent: bool


class DuelEngine:
    def __init__(self, config: Optional[DuelConfig] = None,
                 rng: Optional[random.Random] = None,
                 ai: Optional[DuelAI] = None,
                 sleep: Optional[Callable[[float], None]] = None,
                 listener: Optional[Callable[[DuelEvent], None]] = None,
                 grid: Optional[BattleGrid] = None):
        self.config = config or DuelConfig()
        self.rng = rng or random.Random()
        self.combat_log: List[str] = []
        self.events: List[DuelEvent] = []
        self.listener = listener
        if sleep is None:
            sleep = time.sleep if self.config.realtime else (lambda seconds: None)
        self._sleep = sleep
        self.ai = ai or DuelAI(
            strategy=self.config.ai_strategy,
            rng=self.rng,
            decision_log=self.combat_log,
            max_bend_depth=self.config.ai_max_bend_depth,
        )
        self.generator = GridGenerator(self.config.grid_size, self.config.wall_density, rng=self.rng)
        self.powerups = PowerupField(
            max_powerups=self.config.max_powerups,
            spawn_chance=self.config.spawn_chance,
            rng=self.rng,
        )
        self._fixed_grid = grid
        self.grid: BattleGrid = BattleGrid(self.config.grid_size)
        self.player = Unit(Side.PLAYER, max_weapon_level=self.config.max_weapon_level)
        self.ai_unit = Unit(Side.AI, max_weapon_level=self.config.max_weapon_level)
        self.active_side = Side.PLAYER
        self.phase = Phase.PLANNING
        self.outcome: Optional[GameOutcome] = None
        self.planning_mode = PlanningMode.MOVE
        self.shoot_plan: List[Position] = []
        self.turn = 0
        self.generation_fallback = False
        self.reset()

    # ------------------------------------------------------------------
    # Logging / events
    # ------------------------------------------------------------------

    def log(self, message: str) -> None:
        self.combat_log.append(message)
        if self.config.verbose:
            print(message)

    def _emit(self, event_type: EventType, side: Optional[Side] = None, **data: Any) -> None:
        event = DuelEvent(event_type, side, data)
        self.events.append(event)
        if self.listener:
            self.listener(event)

    def drain_events(self) -> List[DuelEvent]:
        events, self.events = self.events, []
        return events

    # ------------------------------------------------------------------
    # Session setup
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Regenerate the board and start a fresh duel."""
        self.combat_log.clear()
        self.events = []
        self.powerups.clear()
        self.turn = 0
        self.outcome = None
        self.active_side = Side.PLAYER
        self.phase = Phase.PLANNING
        self.planning_mode = PlanningMode.MOVE
        self.shoot_plan = []

        if self._fixed_grid is not None:
            self.grid = self._fixed_grid
            self.generation_fallback = False
        else:
            self.grid = self.generator.generate()
            self.generation_fallback = self.generator.last_used_fallback
        if self.generation_fallback:
            attempts = self.generator.last_attempts
            message = f"Warning: Grid generation failed after {attempts} attempts, using fallback."
            self.log(message)
            self._emit(EventType.WARNING, message=message, attempts=attempts)

        starts = self.generator.find_start_positions(self.grid)
        if starts is None:
            self.log("Error: Could not place players. Please reset.")
            self.player = Unit(Side.PLAYER, max_weapon_level=self.config.max_weapon_level)
            self.ai_unit = Unit(Side.AI, max_weapon_level=self.config.max_weapon_level)
            self._finish(None, "Initialization failed")
            return

        player_start, ai_start = starts
        self.player = Unit(Side.PLAYER, player_start, max_weapon_level=self.config.max_weapon_level)
        self.ai_unit = Unit(Side.AI, ai_start, max_weapon_level=self.config.max_weapon_level)
        self.log(f"Player start: {player_start[0]},{player_start[1]}. "
                 f"AI start: {ai_start[0]},{ai_start[1]}")

        for pos in self.powerups.seed_initial(self.grid, self.units, self.config.initial_powerups):
            self._emit(EventType.POWERUP_SPAWNED, position=pos)
        self.log("Your Turn: Plan your move or shot.")

    def place_units(self, player_pos: Position, ai_pos: Position,
                    player_level: int = 1, ai_level: int = 1) -> None:
        """Put both units on chosen cells (scenario setup); clears powerups."""
        for pos in (player_pos, ai_pos):
            if not self.grid.is_floor(*pos):
                raise ValueError(f"Cannot place a unit on {pos}: not a floor cell")
        if tuple(player_pos) == tuple(ai_pos):
            raise ValueError("Units cannot share a cell")
        self.player = Unit(Side.PLAYER, player_pos, player_level, self.config.max_weapon_level)
        self.ai_unit = Unit(Side.AI, ai_pos, ai_level, self.config.max_weapon_level)
        self.powerups.clear()

    # ------------------------------------------------------------------
    # Query surface
    # ------------------------------------------------------------------

    @property
    def units(self) -> Tuple[Unit, Unit]:
        return self.player, self.ai_unit

    def unit_for(self, side: Side) -> Unit:
        return self.player if side is Side.PLAYER else self.ai_unit

    @property
    def powerup_positions(self) -> List[Position]:
        return list(self.powerups.positions)

    @property
    def is_game_over(self) -> bool:
        return self.outcome is not None

    @property
    def accepts_player_input(self) -> bool:
        return (not self.is_game_over and self.phase is Phase.PLANNING
                and self.active_side is Side.PLAYER)

    def valid_player_moves(self) -> List[Position]:
        if not self.accepts_player_input:
            return []
        return valid_moves(self.player.position, self.ai_unit.position, self.grid)

    def preview_waypoint(self, target: Position) -> Optional[PathPreview]:
        """Legality and path of appending *target* to the current shoot plan."""
        if not self.accepts_player_input:
            return None
        start = tuple(self.shoot_plan[-1]) if self.shoot_plan else self.player.position
        leg = segment(start, target, self.grid)
        if not leg.valid:
            return PathPreview(path=leg.path, valid=False, hits_opponent=False)
        so_far = full_path(self.player.position, self.shoot_plan, self.grid).path if self.shoot_plan else []
        path = so_far + leg.path
        return PathPreview(path=path, valid=True, hits_opponent=self.ai_unit.position in path)

    def snapshot(self) -> Dict[str, Any]:
        return {
            "turn": self.turn,
            "active_side": self.active_side.value,
            "phase": self.phase.value,
            "grid": [[cell.value for cell in row] for row in self.grid.cells],
            "player": self.player.to_dict(),
            "ai": self.ai_unit.to_dict(),
            "powerups": [list(p) for p in self.powerups.positions],
            "planning_mode": self.planning_mode.value,
            "shoot_plan": [list(p) for p in self.shoot_plan],
            "outcome": None if self.outcome is None else {
                "winner": self.outcome.winner.value if self.outcome.winner else None,
                "reason": self.outcome.reason,
            },
        }

    def render_ascii(self) -> str:
        marks = {p: "+" for p in self.powerups.positions}
        marks[self.player.position] = "P"
        marks[self.ai_unit.position] = "A"
        return "\n".join(self.grid.render_rows(marks))

    # ------------------------------------------------------------------
    # Player command surface
    # ------------------------------------------------------------------

    def set_planning_mode(self, mode: PlanningMode) -> bool:
        if not self.accepts_player_input:
            return False
        self.planning_mode = mode
        self.shoot_plan = []
        if mode is PlanningMode.MOVE:
            self.log("Your Turn: Pick an adjacent floor cell to move.")
        else:
            self.log(f"Your Turn (Shoot Lv {self.player.weapon_level}): pick the first "
                     f"segment target (Max Bends: {self.player.bend_budget}).")
        return True

    def cancel_plan(self) -> bool:
        if not self.accepts_player_input:
            return False
        self.shoot_plan = []
        self.planning_mode = PlanningMode.MOVE
        return True

    def request_move(self, target: Position) -> Resolution:
        self.shoot_plan = []
        return self.submit_action(Side.PLAYER, Move(target))

    def request_stay(self) -> Resolution:
        self.shoot_plan = []
        return self.submit_action(Side.PLAYER, Stay())

    def request_shoot_waypoint(self, target: Position) -> Resolution:
        """Append one waypoint to the player's shot; fires once the bend budget is used up."""
        target = tuple(target)
        pending = Shoot(tuple(self.shoot_plan) + (target,))
        if not self.accepts_player_input:
            return self._reject(Side.PLAYER, pending, "Not your turn.")
        self.planning_mode = PlanningMode.SHOOT
        start = tuple(self.shoot_plan[-1]) if self.shoot_plan else self.player.position
        if target == start:
            return self._reject(Side.PLAYER, pending, "Cannot target the starting cell for a segment.")
        if not segment(start, target, self.grid).valid:
            return self._reject(Side.PLAYER, pending, "Invalid target: Path segment is blocked by a wall.")
        self.shoot_plan.append(target)
        bends = len(self.shoot_plan) - 1
        if bends < self.player.bend_budget:
            message = (f"Shoot Plan: Bend {bends + 1} at {target[0]},{target[1]}. "
                       f"Pick target cell for segment {bends + 2}.")
            self.log(message)
            return Resolution(Side.PLAYER, pending, success=True, message=message, accepted=False)
        plan, self.shoot_plan = self.shoot_plan, []
        return self.submit_action(Side.PLAYER, Shoot(plan))

    # ------------------------------------------------------------------
    # Turn state machine
    # ------------------------------------------------------------------

    def submit_action(self, side: Side, action: Action) -> Resolution:
        if self.is_game_over:
            return self._reject(side, action, "The game is over.")
        if side is not self.active_side:
            return self._reject(side, action, f"It is not the {side.label}'s turn.")
        if self.phase is not Phase.PLANNING:
            return self._reject(side, action, "An action is already resolving.")

        actor = self.unit_for(side)
        opponent = self.unit_for(side.opponent)
        if isinstance(action, Move):
            ok, reason = validate_move(actor, opponent, action.target, self.grid)
            if not ok:
                return self._reject(side, action, reason)
        elif isinstance(action, Shoot):
            ok, reason = validate_shoot(actor, action.waypoints, self.grid)
            if not ok:
                return self._reject(side, action, reason)

        self.phase = Phase.RESOLVING
        self.log(f"Executing {side.label}'s action: {action.describe()}")
        resolution = self._resolve(side, action)
        self._after_resolution(resolution)
        return resolution

    def play_ai_turn(self) -> Optional[Resolution]:
        if self.is_game_over or self.active_side is not Side.AI or self.phase is not Phase.PLANNING:
            return None
        self.log("AI is thinking...")
        self._sleep(self.config.ai_think_delay)
        action = self.ai.choose_action(self.ai_unit, self.player, self.grid, self.powerups.positions)
        return self.submit_action(Side.AI, action)

    def _reject(self, side: Side, action: Action, reason: str) -> Resolution:
        self.log(reason)
        return Resolution(side, action, success=False, message=reason, accepted=False)

    def _resolve(self, side: Side, action: Action) -> Resolution:
        actor = self.unit_for(side)
        opponent = self.unit_for(side.opponent)
        name = side.label.upper()

        if isinstance(action, Move):
            ok, reason = validate_move(actor, opponent, action.target, self.grid)
            if not ok:
                self._sleep(self.config.resolve_delay)
                return Resolution(side, action, success=False, message=reason)
            actor.move_to(*action.target)
            messages = [f"{name} moved to {action.target[0]},{action.target[1]}."]
            self._emit(EventType.MOVE_COMPLETED, side, target=actor.position)
            collected = self.powerups.collect(actor, actor.position)
            if collected:
                messages.append(f"{name} collected weapon upgrade! (Level {actor.weapon_level})")
                self._emit(EventType.POWERUP_COLLECTED, side, position=actor.position,
                           weapon_level=actor.weapon_level)
            return Resolution(side, action, success=True, message=" ".join(messages),
                              collected_powerup=collected, weapon_level=actor.weapon_level)

        if isinstance(action, Shoot):
            result = full_path(actor.position, action.waypoints, self.grid)
            if not result.valid:
                self._sleep(self.config.resolve_delay)
                self._emit(EventType.SHOT_RESOLVED, side, path=[], hit=False, valid=False)
                return Resolution(side, action, success=False, message=f"{name} shot blocked!")
            hit = result.hits(opponent.position)
            self._emit(EventType.SHOT_RESOLVED, side, path=list(result.path), hit=hit, valid=True)
            self._sleep(self.config.shot_flash_delay)
            if hit:
                message = f"{name} shot path confirmed. {side.opponent.label} was hit!"
            else:
                message = f"{name} shot path confirmed. Shot missed!"
            return Resolution(side, action, success=True, message=message,
                              path=list(result.path), hit=hit, game_over=hit)

        self._sleep(self.config.resolve_delay)
        return Resolution(side, action, success=True, message=f"{name} did not move.")

    def _after_resolution(self, resolution: Resolution) -> None:
        self.log(resolution.message)
        if resolution.hit:
            self._finish(resolution.side, f"{resolution.side.label.upper()} Wins!")
            return

        self.turn += 1
        spawned = self.powerups.maybe_spawn(self.grid, self.units, game_over=self.is_game_over)
        if spawned:
            self.log(f"Powerup spawned at {spawned[0]},{spawned[1]}.")
            self._emit(EventType.POWERUP_SPAWNED, position=spawned)

        self.active_side = resolution.side.opponent
        self.phase = Phase.PLANNING
        self.planning_mode = PlanningMode.MOVE
        self.shoot_plan = []
        self._emit(EventType.TURN_SWITCHED, self.active_side, turn=self.turn)
        self._sleep(self.config.resolve_delay)

        if self.active_side is Side.AI and self.config.auto_play_ai:
            self.play_ai_turn()
        elif self.active_side is Side.PLAYER:
            self.log("Your Turn: Plan your action.")

    def _finish(self, winner: Optional[Side], reason: str) -> None:
        self.outcome = GameOutcome(winner=winner, reason=reason)
        self.phase = Phase.GAME_OVER
        self.shoot_plan = []
        self.log(f"Game Over: {reason}")
        self._emit(EventType.GAME_OVER, winner, winner=winner.value if winner else None, reason=reason)
