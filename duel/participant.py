from dataclasses import dataclass
from typing import Any, Dict, Tuple

from .enums import MAX_WEAPON_LEVEL, Side


@dataclass
class Unit:
    side: Side
    position: Tuple[int, int] = (0, 0)
    weapon_level: int = 1
    max_weapon_level: int = MAX_WEAPON_LEVEL

    def __post_init__(self) -> None:
        self.position = tuple(self.position)
        if not 1 <= self.weapon_level <= self.max_weapon_level:
            raise ValueError(
                f"Weapon level must be in [1, {self.max_weapon_level}], got {self.weapon_level}")

    @property
    def name(self) -> str:
        return self.side.label

    @property
    def bend_budget(self) -> int:
        return self.weapon_level - 1

    def upgrade_weapon(self) -> int:
        self.weapon_level = min(self.max_weapon_level, self.weapon_level + 1)
        return self.weapon_level

    def move_to(self, x: int, y: int) -> None:
        self.position = (x, y)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "side": self.side.value,
            "position": list(self.position),
            "weapon_level": self.weapon_level,
        }
