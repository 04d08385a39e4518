"""
Tests for the powerup economy: spawning, the board cap, collection and the
weighted opening placement.
"""

import random
import unittest

from duel import MAX_POWERUPS, MAX_WEAPON_LEVEL, BattleGrid, PowerupField, Side, Unit


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _units(player=(2, 2), ai=(17, 17)):
    return [Unit(Side.PLAYER, player), Unit(Side.AI, ai)]


class _AlwaysRoll(random.Random):
    """Chance rolls always succeed."""

    def random(self):
        return 0.0


class TestSpawn(unittest.TestCase):

    def test_spawn_on_free_floor(self):
        grid = BattleGrid(20)
        field = PowerupField(rng=random.Random(1))
        units = _units()
        for _ in range(4):
            pos = field.spawn(grid, units)
            self.assertIsNotNone(pos)
            self.assertTrue(grid.is_floor(*pos))
            self.assertNotIn(pos, [u.position for u in units])
        self.assertEqual(len(set(field.positions)), 4)

    def test_spawn_respects_cap(self):
        field = PowerupField(max_powerups=2, rng=random.Random(2))
        grid = BattleGrid(10)
        field.spawn(grid, _units((0, 0), (9, 9)))
        field.spawn(grid, _units((0, 0), (9, 9)))
        self.assertIsNone(field.spawn(grid, _units((0, 0), (9, 9))))
        self.assertEqual(len(field), 2)

    def test_crowded_board_returns_none(self):
        rows = ["#" * 5 for _ in range(5)]
        rows[0] = "..###"
        grid = BattleGrid.from_rows(rows)
        field = PowerupField(rng=random.Random(3))
        self.assertIsNone(field.spawn(grid, _units((0, 0), (1, 0))))
        self.assertEqual(len(field), 0)

    def test_maybe_spawn_never_exceeds_cap(self):
        grid = BattleGrid(20)
        field = PowerupField(rng=_AlwaysRoll(4))
        units = _units()
        for _ in range(30):
            field.maybe_spawn(grid, units)
        self.assertEqual(len(field), MAX_POWERUPS)

    def test_maybe_spawn_at_cap_is_noop(self):
        grid = BattleGrid(20)
        field = PowerupField(rng=random.Random(5))
        field.positions = [(5, 5), (6, 6), (7, 7), (8, 8)]
        for _ in range(50):
            self.assertIsNone(field.maybe_spawn(grid, _units()))
        self.assertEqual(len(field), 4)

    def test_maybe_spawn_gated(self):
        grid = BattleGrid(20)
        field = PowerupField(rng=_AlwaysRoll(6))
        self.assertIsNone(field.maybe_spawn(grid, _units(), game_over=True))
        self.assertIsNone(field.maybe_spawn(grid, _units(), resolving=True))
        self.assertIsNotNone(field.maybe_spawn(grid, _units()))

    def test_zero_chance_never_spawns(self):
        grid = BattleGrid(20)
        field = PowerupField(spawn_chance=0.0, rng=random.Random(7))
        for _ in range(20):
            field.maybe_spawn(grid, _units())
        self.assertEqual(len(field), 0)

    def test_invalid_settings(self):
        with self.assertRaises(ValueError):
            PowerupField(max_powerups=-1)
        with self.assertRaises(ValueError):
            PowerupField(spawn_chance=1.5)


class TestCollect(unittest.TestCase):

    def test_collect_raises_level(self):
        field = PowerupField()
        field.positions = [(3, 3)]
        unit = Unit(Side.PLAYER, (3, 3))
        self.assertTrue(field.collect(unit, (3, 3)))
        self.assertEqual(unit.weapon_level, 2)
        self.assertNotIn((3, 3), field)

    def test_collect_miss(self):
        field = PowerupField()
        field.positions = [(3, 3)]
        unit = Unit(Side.AI, (4, 3))
        self.assertFalse(field.collect(unit, (4, 3)))
        self.assertEqual(unit.weapon_level, 1)
        self.assertEqual(len(field), 1)

    def test_level_capped(self):
        field = PowerupField(max_powerups=10)
        unit = Unit(Side.PLAYER, (0, 0))
        levels = []
        for i in range(8):
            field.positions.append((i, 0))
            field.collect(unit, (i, 0))
            levels.append(unit.weapon_level)
        self.assertEqual(unit.weapon_level, MAX_WEAPON_LEVEL)
        self.assertEqual(levels, sorted(levels))

    def test_nearest(self):
        field = PowerupField()
        self.assertIsNone(field.nearest((0, 0)))
        field.positions = [(9, 9), (2, 1)]
        self.assertEqual(field.nearest((0, 0)), (2, 1))


class TestSeedInitial(unittest.TestCase):

    def test_seed_capped(self):
        grid = BattleGrid(20)
        field = PowerupField(rng=random.Random(8))
        placed = field.seed_initial(grid, _units(), 8)
        self.assertEqual(len(placed), MAX_POWERUPS)
        self.assertEqual(len(set(placed)), MAX_POWERUPS)
        for pos in placed:
            self.assertTrue(grid.is_floor(*pos))
            self.assertNotIn(pos, [(2, 2), (17, 17)])

    def test_seed_few_free_cells(self):
        rows = ["#" * 6 for _ in range(6)]
        rows[0] = "....##"
        grid = BattleGrid.from_rows(rows)
        field = PowerupField(rng=random.Random(9))
        placed = field.seed_initial(grid, _units((0, 0), (3, 0)), 3)
        self.assertEqual(sorted(placed), [(1, 0), (2, 0)])

    def test_weight_prefers_balanced_cells(self):
        player, ai = (2, 2), (17, 17)
        balanced = PowerupField.placement_weight((10, 9), player, ai)
        lopsided = PowerupField.placement_weight((3, 2), player, ai)
        self.assertGreater(balanced, lopsided)
        self.assertGreater(lopsided, 0.0)


if __name__ == "__main__":
    unittest.main()
