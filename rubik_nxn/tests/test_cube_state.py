import unittest

from rubik_nxn.core import CubeState, InvalidSizeError, MalformedStateError, OutOfBoundsError
from rubik_nxn.core.rotation import rotate_layer


class TestCubeState(unittest.TestCase):
    def test_starts_solved(self):
        c = CubeState.build(3)
        self.assertTrue(c.is_solved())
        c.check_invariants()

    def test_facelet_count_is_six_n_squared(self):
        for n in range(1, 8):
            self.assertEqual(CubeState.build(n).facelet_count(), 6 * n * n)

    def test_cubie_kinds_3x3(self):
        c = CubeState.build(3)
        sizes = [len(c.get(p)) for p in c.positions()]
        self.assertEqual(sizes.count(3), 8)
        self.assertEqual(sizes.count(2), 12)
        self.assertEqual(sizes.count(1), 6)
        self.assertEqual(sizes.count(0), 1)

    def test_get_returns_copy(self):
        c = CubeState.build(2)
        cubie = c.get((0, 0, 0))
        cubie["U"] = "U"
        self.assertNotIn("U", c.get((0, 0, 0)))

    def test_get_out_of_bounds(self):
        c = CubeState.build(3)
        with self.assertRaises(OutOfBoundsError):
            c.get((3, 0, 0))
        with self.assertRaises(OutOfBoundsError):
            c.get((0, -1, 0))

    def test_build_rejects_bad_size(self):
        for bad in (0, 21, -1, True):
            with self.assertRaises(InvalidSizeError):
                CubeState.build(bad)

    def test_replace_requires_full_arena(self):
        c = CubeState.build(2)
        with self.assertRaises(MalformedStateError):
            c.replace(c.cubies()[:-1])
        before = c.to_hashable()
        c.replace(c.cubies())
        self.assertEqual(before, c.to_hashable())

    def test_not_solved_after_move(self):
        c = CubeState.build(3)
        rotate_layer(c, "R", 2, 1)
        self.assertFalse(c.is_solved())
        rotate_layer(c, "R", 2, -1)
        self.assertTrue(c.is_solved())

    def test_copy_is_independent(self):
        c = CubeState.build(3)
        d = c.copy()
        rotate_layer(d, "F", 2, 1)
        self.assertNotEqual(c, d)
        self.assertTrue(c.is_solved())

    def test_check_invariants_detects_broken_state(self):
        c = CubeState.build(3)
        cubies = c.cubies()
        cubies[13] = {"U": "U"}  # interior (1,1,1)
        c.replace(cubies)
        with self.assertRaises(MalformedStateError):
            c.check_invariants()


if __name__ == "__main__":
    unittest.main()
