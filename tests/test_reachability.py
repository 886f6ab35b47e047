from __future__ import annotations

import unittest

from keygate import can_reach, reachable


def _ring(center: tuple[int, int]) -> frozenset[tuple[int, int]]:
    cx, cy = center
    return frozenset(
        (cx + dx, cy + dy)
        for dx in (-1, 0, 1)
        for dy in (-1, 0, 1)
        if (dx, dy) != (0, 0)
    )


class TestReachable(unittest.TestCase):
    def test_enclosed_origin_stays_inside_ring(self) -> None:
        walls = _ring((3, 3))
        cells = reachable((3, 3), walls, width=7, height=7)
        self.assertEqual(cells, frozenset({(3, 3)}))

    def test_outside_ring_never_enters_ring_or_leaves_grid(self) -> None:
        walls = _ring((3, 3))
        cells = reachable((0, 0), walls, width=7, height=7)
        self.assertEqual(len(cells), 49 - len(walls) - 1)
        self.assertNotIn((3, 3), cells)
        self.assertFalse(cells & walls)
        for x, y in cells:
            self.assertTrue(0 <= x < 7 and 0 <= y < 7)

    def test_blocked_cells_split_corridor(self) -> None:
        cells = reachable((0, 0), {(2, 0)}, width=5, height=1)
        self.assertEqual(cells, frozenset({(0, 0), (1, 0)}))

    def test_moves_are_axis_aligned_only(self) -> None:
        # (1, 1) touches (0, 0) only diagonally once both orthogonal cells are blocked.
        cells = reachable((0, 0), {(1, 0), (0, 1)}, width=2, height=2)
        self.assertEqual(cells, frozenset({(0, 0)}))

    def test_origin_always_included(self) -> None:
        self.assertEqual(
            reachable((0, 0), set(), width=1, height=1), frozenset({(0, 0)})
        )


class TestCanReach(unittest.TestCase):
    def test_target_reachable_around_obstacle(self) -> None:
        blocked = {(1, 0), (1, 1)}
        self.assertTrue(can_reach((0, 0), (2, 0), blocked, width=3, height=3))

    def test_target_cut_off(self) -> None:
        blocked = {(1, 0), (1, 1), (1, 2)}
        self.assertFalse(can_reach((0, 0), (2, 0), blocked, width=3, height=3))

    def test_blocked_target_is_unreachable(self) -> None:
        self.assertFalse(can_reach((0, 0), (1, 0), {(1, 0)}, width=3, height=1))

    def test_origin_equals_target(self) -> None:
        self.assertTrue(can_reach((1, 1), (1, 1), set(), width=3, height=3))


if __name__ == "__main__":
    unittest.main()
