import random
from typing import Optional, Tuple


def _source(rng: Optional[random.Random]):
    return rng if rng is not None else random


def roll_chance(probability: float, rng: Optional[random.Random] = None) -> bool:
    return _source(rng).random() < probability


def roll_jitter(amplitude: float, rng: Optional[random.Random] = None) -> float:
    """Uniform noise in [-amplitude / 2, amplitude / 2]."""
    return (_source(rng).random() - 0.5) * amplitude


def roll_cell(size: int, rng: Optional[random.Random] = None) -> Tuple[int, int]:
    src = _source(rng)
    return src.randrange(size), src.randrange(size)
