"""
Duel AI - standalone decision-making module.

Enumerates every candidate action for the AI unit (stay, each legal step,
and every bent shot up to its planning depth), scores each one with a set of
independent heuristics, and picks the best.

Usage:
    ai = DuelAI(strategy="balanced", rng=random.Random(7))
    action = ai.choose_action(ai_unit, player_unit, grid, powerup_positions)

Strategies:
    - "balanced": the standard weights (default)
    - "aggressive": rewards threatening positions, shrugs off exposure
    - "defensive": punishes exposure harder, prefers cover
    - "random": uniform pick among legal candidates
"""

from __future__ import annotations

import random as _random
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .actions import Action, Move, Shoot, Stay, valid_moves
from .dice import roll_jitter
from .enums import AI_MAX_BEND_CHECK_DEPTH, DIRECTIONS, ActionType
from .geometry import full_path, reachable, step_direction
from .map import BattleGrid, Position
from .participant import Unit
from .powerups import nearest_position


# ---------------------------------------------------------------------------
# Strategy configuration
# ---------------------------------------------------------------------------

_BALANCED = {
    "hit_reward": 1200.0,
    "waypoint_penalty": 40.0,
    "powerup_reward": 700.0,
    "exposed_penalty": 1000.0,
    "newly_exposed_penalty": 300.0,
    "cover_reward": 100.0,
    "retreat_bonus": 50.0,
    "enter_line_penalty": 80.0,
    "powerup_approach_base": 300.0,
    "powerup_approach_decay": 30.0,
    "powerup_closing_bonus": 10.0,
    "ideal_min_distance": 5,
    "too_close_penalty": 40.0,
    "too_far_penalty": 10.0,
    "threat_reward": 250.0,
    "direct_threat_bonus": 100.0,
    "safe_threat_bonus": 150.0,
    "jitter": 5.0,
    "tie_margin": 5.0,
    "tie_accept_threshold": 0.4,
}

STRATEGY_DEFAULTS: Dict[str, Dict[str, float]] = {
    "balanced": dict(_BALANCED),
    "aggressive": dict(_BALANCED, exposed_penalty=700.0, newly_exposed_penalty=150.0,
                       threat_reward=400.0, ideal_min_distance=3),
    "defensive": dict(_BALANCED, exposed_penalty=1300.0, newly_exposed_penalty=450.0,
                      cover_reward=180.0, threat_reward=150.0),
    "random": dict(_BALANCED),
}


@dataclass
class ScoringContext:
    """Snapshot of the board the AI scores against, plus a reachability cache."""
    ai_pos: Position
    player_pos: Position
    ai_level: int
    player_level: int
    grid: BattleGrid
    powerups: List[Position]
    shot_hits: Dict[str, bool] = field(default_factory=dict)
    _reach_cache: Dict[Tuple[Position, Position, int], bool] = field(default_factory=dict)

    def can_hit(self, attacker: Position, target: Position, level: int) -> bool:
        key = (attacker, target, level)
        if key not in self._reach_cache:
            self._reach_cache[key] = reachable(attacker, target, self.grid, level - 1)
        return self._reach_cache[key]

    def nearest_powerup(self, pos: Position) -> Optional[Position]:
        return nearest_position(pos, self.powerups)


# ---------------------------------------------------------------------------
# DuelAI
# ---------------------------------------------------------------------------

class DuelAI:
    """Autonomous decision maker for the AI side.

    Parameters
    ----------
    strategy : str
        One of ``"balanced"`` (default), ``"aggressive"``, ``"defensive"``, ``"random"``.
    rng : random.Random | None
        Source for jitter and tie-breaking; seed it to pin decisions in tests.
    decision_log : list[str] | None
        Optional list to append decision explanations to.
    show_decisions : bool
        If True, decision reasons are appended to *decision_log*.
    max_bend_depth : int
        Upper bound on bends in the shot plans the AI considers.
    """

    def __init__(
        self,
        strategy: str = "balanced",
        rng: Optional[_random.Random] = None,
        decision_log: Optional[List[str]] = None,
        show_decisions: bool = True,
        max_bend_depth: int = AI_MAX_BEND_CHECK_DEPTH,
    ) -> None:
        if strategy not in STRATEGY_DEFAULTS:
            strategy = "balanced"
        self.strategy = strategy
        self.config: Dict[str, Any] = dict(STRATEGY_DEFAULTS[strategy])
        self.rng = rng or _random.Random()
        self.decision_log: List[str] = decision_log if decision_log is not None else []
        self.show_decisions = show_decisions
        self.max_bend_depth = max_bend_depth

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def choose_action(self, ai_unit: Unit, player_unit: Unit, grid: BattleGrid,
                      powerups: Iterable[Position]) -> Action:
        ctx = ScoringContext(
            ai_pos=ai_unit.position,
            player_pos=player_unit.position,
            ai_level=ai_unit.weapon_level,
            player_level=player_unit.weapon_level,
            grid=grid,
            powerups=[tuple(p) for p in powerups],
        )
        candidates = self.enumerate_actions(ctx)

        if self.strategy == "random":
            choice = self.rng.choice(candidates)
            self._log(f"AI (random) chose: {choice.describe()}")
            return choice

        best: Action = Stay()
        best_score = self.score(best, ctx)
        self._log(f"AI eval: stay score {best_score:.2f}")
        margin = self.config["tie_margin"]
        for action in candidates:
            if action.type is ActionType.STAY:
                continue
            value = self.score(action, ctx)
            if value > best_score:
                best, best_score = action, value
            elif value >= best_score - margin and self.rng.random() > self.config["tie_accept_threshold"]:
                best, best_score = action, value
        self._log(f"AI chose: {best.describe()} (score {best_score:.2f}, "
                  f"{len(candidates)} candidates)")
        return best

    def enumerate_actions(self, ctx: ScoringContext) -> List[Action]:
        """Stay, every legal step, and every shot plan; deduplicated by key."""
        actions: List[Action] = [Stay()]
        for target in valid_moves(ctx.ai_pos, ctx.player_pos, ctx.grid):
            actions.append(Move(target))
        actions.extend(self._enumerate_shots(ctx))

        unique: List[Action] = []
        seen = set()
        for action in actions:
            if action.key in seen:
                continue
            seen.add(action.key)
            unique.append(action)
        return unique

    def max_planned_bends(self, ai_level: int) -> int:
        return max(0, min(ai_level - 1, self.max_bend_depth))

    # ------------------------------------------------------------------
    # Shot enumeration
    # ------------------------------------------------------------------

    def _enumerate_shots(self, ctx: ScoringContext) -> List[Shoot]:
        """Bounded work-list expansion of bent shot plans.

        Each work item is (bend point, waypoints so far, whether the path so
        far already crosses the player). Items are only pushed while another
        bend fits in the planning budget, so depth never exceeds
        ``max_planned_bends``.
        """
        grid = ctx.grid
        max_bends = self.max_planned_bends(ctx.ai_level)
        shots: List[Shoot] = []
        work: List[Tuple[Position, Tuple[Position, ...], bool]] = [(ctx.ai_pos, (), False)]
        while work:
            origin, waypoints, hit_so_far = work.pop()
            forbidden = None
            if waypoints:
                prev = waypoints[-2] if len(waypoints) > 1 else ctx.ai_pos
                arriving = step_direction(prev, waypoints[-1])
                if arriving is not None:
                    forbidden = (-arriving[0], -arriving[1])
            for dx, dy in DIRECTIONS:
                if (dx, dy) == forbidden:
                    continue
                hit = hit_so_far
                for i in range(1, grid.size + 1):
                    cell = (origin[0] + dx * i, origin[1] + dy * i)
                    if not grid.in_bounds(*cell) or grid.is_wall(*cell):
                        break
                    if cell == ctx.player_pos:
                        hit = True
                    plan = waypoints + (cell,)
                    shot = Shoot(plan)
                    ctx.shot_hits[shot.key] = hit
                    shots.append(shot)
                    if len(plan) <= max_bends:
                        work.append((cell, plan, hit))
        return shots

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------

    def score(self, action: Action, ctx: ScoringContext) -> float:
        cfg = self.config
        value = 0.0
        predicted = ctx.ai_pos
        is_move = isinstance(action, Move)
        if is_move:
            predicted = action.target

        if isinstance(action, Shoot) and self._shot_hits(action, ctx):
            value += cfg["hit_reward"] - cfg["waypoint_penalty"] * len(action.waypoints)

        if is_move and predicted in ctx.powerups:
            value += cfg["powerup_reward"]

        value += self._exposure_score(is_move, predicted, ctx)
        value += self._powerup_approach_score(action, predicted, ctx)
        value += self._distance_band_score(predicted, ctx)

        if action.type in (ActionType.MOVE, ActionType.STAY):
            value += self._threat_score(predicted, ctx)

        value += roll_jitter(cfg["jitter"], self.rng)
        return value

    def _shot_hits(self, action: Shoot, ctx: ScoringContext) -> bool:
        if action.key not in ctx.shot_hits:
            ctx.shot_hits[action.key] = full_path(ctx.ai_pos, action.waypoints, ctx.grid).hits(ctx.player_pos)
        return ctx.shot_hits[action.key]

    def _exposure_score(self, is_move: bool, predicted: Position, ctx: ScoringContext) -> float:
        cfg = self.config
        value = 0.0
        player, current = ctx.player_pos, ctx.ai_pos
        if ctx.can_hit(player, predicted, ctx.player_level):
            value -= cfg["exposed_penalty"]
            if is_move and not ctx.can_hit(player, current, ctx.player_level):
                value -= cfg["newly_exposed_penalty"]
        if not ctx.can_hit(player, predicted, 1):
            value += cfg["cover_reward"]
            dist = ctx.grid.manhattan_distance
            if is_move and dist(predicted, player) > dist(current, player):
                value += cfg["retreat_bonus"]
        elif is_move and not ctx.can_hit(player, current, 1):
            value -= cfg["enter_line_penalty"]
        return value

    def _powerup_approach_score(self, action: Action, predicted: Position,
                                ctx: ScoringContext) -> float:
        cfg = self.config
        nearest = ctx.nearest_powerup(predicted)
        if nearest is None:
            return 0.0
        if isinstance(action, Move) and nearest == action.target:
            return 0.0
        dist = ctx.grid.manhattan_distance
        dist_after = dist(predicted, nearest)
        before = ctx.nearest_powerup(ctx.ai_pos)
        dist_before = dist(ctx.ai_pos, before)
        if dist_after >= dist_before:
            return 0.0
        closed = dist_before - dist_after
        return (max(0.0, cfg["powerup_approach_base"] - dist_after * cfg["powerup_approach_decay"])
                + closed * cfg["powerup_closing_bonus"])

    def _distance_band_score(self, predicted: Position, ctx: ScoringContext) -> float:
        cfg = self.config
        d = ctx.grid.manhattan_distance(predicted, ctx.player_pos)
        ideal_min = cfg["ideal_min_distance"]
        ideal_max = ctx.grid.size / 2
        if d < ideal_min:
            return -(ideal_min - d) * cfg["too_close_penalty"]
        if d > ideal_max:
            return -(d - ideal_max) * cfg["too_far_penalty"]
        return 0.0

    def _threat_score(self, predicted: Position, ctx: ScoringContext) -> float:
        cfg = self.config
        player = ctx.player_pos
        if not ctx.can_hit(predicted, player, ctx.ai_level):
            return 0.0
        value = cfg["threat_reward"]
        if ctx.can_hit(predicted, player, 1):
            value += cfg["direct_threat_bonus"]
        if not ctx.can_hit(player, predicted, ctx.player_level):
            value += cfg["safe_threat_bonus"]
        return value

    # ==================================================================
    # Misc helpers
    # ==================================================================

    def _log(self, message: str) -> None:
        if self.show_decisions:
            self.decision_log.append(message)
