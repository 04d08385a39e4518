"""
Batch simulation runner for headless duels.

Runs N AI-vs-AI duels (the Player side is driven by its own DuelAI) and
collects statistics.

Usage:
    from duel.batch import BatchRunner, BatchConfig

    config = BatchConfig(num_duels=50, player_strategy="aggressive")
    result = BatchRunner.run(config, progress_callback=lambda i, n: ...)
    print(result.summary())
"""

from __future__ import annotations

import random
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from .ai import DuelAI
from .engine import DuelConfig, DuelEngine
from .enums import Side


@dataclass
class BatchConfig:
    """Configuration for a batch of duels.

    Parameters
    ----------
    num_duels : int
        How many duels to run.
    turn_limit : int
        Max turns per duel before it is scored a draw.
    player_strategy, ai_strategy : str
        DuelAI strategy names for each side.
    duel_config : DuelConfig or None
        Board and economy settings; delays are ignored.
    seed : int or None
        Seed for reproducible batches.
    """

    num_duels: int = 20
    turn_limit: int = 200
    player_strategy: str = "balanced"
    ai_strategy: str = "balanced"
    duel_config: Optional[DuelConfig] = None
    seed: Optional[int] = None


@dataclass
class DuelRecord:
    """Stats for a single completed duel."""
    winner: str = ""
    turns: int = 0
    weapon_levels: Dict[str, int] = field(default_factory=dict)
    used_fallback_grid: bool = False


@dataclass
class BatchResult:
    """Aggregated statistics from a batch run."""
    records: List[DuelRecord] = field(default_factory=list)
    elapsed_seconds: float = 0.0

    @property
    def num_duels(self) -> int:
        return len(self.records)

    def win_counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for r in self.records:
            counts[r.winner] = counts.get(r.winner, 0) + 1
        return counts

    def win_rates(self) -> Dict[str, float]:
        n = max(1, self.num_duels)
        return {k: v / n for k, v in self.win_counts().items()}

    def avg_turns(self) -> float:
        if not self.records:
            return 0.0
        return sum(r.turns for r in self.records) / len(self.records)

    def draws(self) -> int:
        return sum(1 for r in self.records if r.winner == "Draw")

    def summary(self) -> str:
        lines = [
            f"=== Batch Result: {self.num_duels} duels ===",
            f"Elapsed: {self.elapsed_seconds:.2f}s",
            f"Average turns: {self.avg_turns():.1f}",
        ]
        rates = self.win_rates()
        counts = self.win_counts()
        for side in sorted(rates, key=rates.get, reverse=True):  # type: ignore
            if side == "Draw":
                continue
            lines.append(f"  {side}: {rates[side] * 100:.1f}% win rate ({counts[side]} wins)")
        d = self.draws()
        if d:
            lines.append(f"  Draws: {d}")
        return "\n".join(lines)


class BatchRunner:
    """Runs multiple duels and collects statistics."""

    @staticmethod
    def run(
        config: BatchConfig,
        progress_callback: Optional[Callable[[int, int], None]] = None,
    ) -> BatchResult:
        result = BatchResult()
        t0 = time.time()
        rng = random.Random(config.seed)
        for i in range(config.num_duels):
            record = BatchRunner._run_single(config, random.Random(rng.random()))
            result.records.append(record)
            if progress_callback:
                progress_callback(i + 1, config.num_duels)
        result.elapsed_seconds = time.time() - t0
        return result

    @staticmethod
    def _run_single(config: BatchConfig, rng: random.Random) -> DuelRecord:
        base = config.duel_config or DuelConfig()
        duel_config = DuelConfig(**{**base.__dict__, "realtime": False,
                                    "auto_play_ai": False, "verbose": False,
                                    "ai_strategy": config.ai_strategy})
        engine = DuelEngine(duel_config, rng=rng)
        pilot = DuelAI(strategy=config.player_strategy, rng=rng, show_decisions=False,
                       max_bend_depth=duel_config.ai_max_bend_depth)
        engine.ai.show_decisions = False

        while not engine.is_game_over and engine.turn < config.turn_limit:
            if engine.active_side is Side.PLAYER:
                action = pilot.choose_action(engine.player, engine.ai_unit, engine.grid,
                                             engine.powerup_positions)
                resolution = engine.submit_action(Side.PLAYER, action)
            else:
                resolution = engine.play_ai_turn()
            if resolution is None or not resolution.accepted:
                break

        record = DuelRecord(turns=engine.turn, used_fallback_grid=engine.generation_fallback)
        if engine.outcome and engine.outcome.winner:
            record.winner = engine.outcome.winner.label
        else:
            record.winner = "Draw"
        record.weapon_levels = {u.side.label: u.weapon_level for u in engine.units}
        return record
