"""
Tests for turn actions and their legality checks.
"""

import unittest

from duel import BattleGrid, Cell, Move, Shoot, Side, Stay, Unit, valid_moves, validate_move, validate_shoot


class TestActionKeys(unittest.TestCase):

    def test_keys(self):
        self.assertEqual(Stay().key, "stay")
        self.assertEqual(Move((3, 4)).key, "move-3,4")
        self.assertEqual(Shoot([(1, 5), (6, 5)]).key, "shoot-1,5|6,5")

    def test_shoot_normalizes_waypoints(self):
        shot = Shoot([[1, 5], [6, 5]])
        self.assertEqual(shot.waypoints, ((1, 5), (6, 5)))
        self.assertEqual(shot.bends, 1)
        self.assertEqual(Shoot([(2, 2)]).bends, 0)

    def test_equal_actions_compare_equal(self):
        self.assertEqual(Move([2, 3]), Move((2, 3)))
        self.assertNotEqual(Move((2, 3)), Move((3, 2)))


class TestValidMoves(unittest.TestCase):

    def test_open_cell(self):
        moves = valid_moves((5, 5), (9, 9), BattleGrid(10))
        self.assertEqual(sorted(moves), [(4, 5), (5, 4), (5, 6), (6, 5)])

    def test_excludes_walls_edges_and_opponent(self):
        grid = BattleGrid(10)
        grid.set_cell(1, 0, Cell.WALL)
        self.assertEqual(valid_moves((0, 0), (0, 1), grid), [])


class TestValidateMove(unittest.TestCase):

    def test_blocked_by_opponent(self):
        player = Unit(Side.PLAYER, (5, 5))
        ai = Unit(Side.AI, (6, 5))
        ok, reason = validate_move(player, ai, (6, 5), BattleGrid(20))
        self.assertFalse(ok)
        self.assertEqual(reason, "Player move blocked by opponent!")

    def test_not_adjacent(self):
        player = Unit(Side.PLAYER, (5, 5))
        ai = Unit(Side.AI, (15, 15))
        ok, _ = validate_move(player, ai, (7, 5), BattleGrid(20))
        self.assertFalse(ok)
        ok, _ = validate_move(player, ai, (6, 6), BattleGrid(20))
        self.assertFalse(ok)

    def test_wall(self):
        grid = BattleGrid(20)
        grid.set_cell(5, 6, Cell.WALL)
        ok, _ = validate_move(Unit(Side.AI, (5, 5)), Unit(Side.PLAYER, (0, 0)), (5, 6), grid)
        self.assertFalse(ok)

    def test_legal_step(self):
        ok, reason = validate_move(Unit(Side.PLAYER, (5, 5)), Unit(Side.AI, (9, 9)), (5, 4), BattleGrid(20))
        self.assertTrue(ok)
        self.assertEqual(reason, "")


class TestValidateShoot(unittest.TestCase):

    def test_empty(self):
        ok, _ = validate_shoot(Unit(Side.PLAYER, (5, 5)), [], BattleGrid(20))
        self.assertFalse(ok)

    def test_bend_budget(self):
        grid = BattleGrid(20)
        plan = [(5, 10), (10, 10)]
        ok, reason = validate_shoot(Unit(Side.PLAYER, (5, 5), weapon_level=1), plan, grid)
        self.assertFalse(ok)
        self.assertIn("Too many bends", reason)
        ok, _ = validate_shoot(Unit(Side.PLAYER, (5, 5), weapon_level=2), plan, grid)
        self.assertTrue(ok)

    def test_leg_starting_on_itself(self):
        grid = BattleGrid(20)
        ok, _ = validate_shoot(Unit(Side.PLAYER, (5, 5)), [(5, 5)], grid)
        self.assertFalse(ok)
        ok, _ = validate_shoot(Unit(Side.PLAYER, (5, 5), weapon_level=3), [(5, 8), (5, 8)], grid)
        self.assertFalse(ok)

    def test_blocked_leg(self):
        grid = BattleGrid(20)
        grid.set_cell(5, 7, Cell.WALL)
        ok, reason = validate_shoot(Unit(Side.PLAYER, (5, 5)), [(5, 9)], grid)
        self.assertFalse(ok)
        self.assertIn("blocked", reason)

    def test_diagonal_leg(self):
        ok, _ = validate_shoot(Unit(Side.PLAYER, (5, 5), weapon_level=2), [(8, 8)], BattleGrid(20))
        self.assertFalse(ok)


if __name__ == "__main__":
    unittest.main()
