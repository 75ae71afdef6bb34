import random
import unittest

from rubik_nxn.core import CubeState, OutOfBoundsError
from rubik_nxn.core.grid import FACES, FACE_AXIS
from rubik_nxn.core.rotation import (
    RELABEL,
    canonical_turns,
    layer_positions,
    rotate_layer,
    rotate_position,
)


def _all_moves(n):
    for face in FACES:
        for layer in range(n):
            yield face, layer


class TestCanonicalTurns(unittest.TestCase):
    def test_reduces_into_range(self):
        self.assertEqual(canonical_turns(0), 0)
        self.assertEqual(canonical_turns(1), 1)
        self.assertEqual(canonical_turns(2), 2)
        self.assertEqual(canonical_turns(3), -1)
        self.assertEqual(canonical_turns(4), 0)
        self.assertEqual(canonical_turns(5), 1)
        self.assertEqual(canonical_turns(-1), -1)
        self.assertEqual(canonical_turns(-2), 2)
        self.assertEqual(canonical_turns(-3), 1)


class TestRelabelTable(unittest.TestCase):
    def test_known_entries(self):
        self.assertEqual(RELABEL[("U", "x", 1)], "F")
        self.assertEqual(RELABEL[("F", "x", 1)], "D")
        self.assertEqual(RELABEL[("R", "y", 1)], "B")
        self.assertEqual(RELABEL[("F", "y", 1)], "R")
        self.assertEqual(RELABEL[("R", "z", 1)], "U")

    def test_faces_on_axis_are_fixed(self):
        for face in FACES:
            for q in (1, 2, 3):
                self.assertEqual(RELABEL[(face, FACE_AXIS[face], q)], face)

    def test_half_turn_flips(self):
        self.assertEqual(RELABEL[("U", "x", 2)], "D")
        self.assertEqual(RELABEL[("L", "y", 2)], "R")
        self.assertEqual(RELABEL[("F", "z", 2)], "F")

    def test_each_step_is_a_permutation(self):
        for axis in ("x", "y", "z"):
            for q in (1, 2, 3):
                self.assertEqual({RELABEL[(f, axis, q)] for f in FACES}, set(FACES))


class TestRotatePosition(unittest.TestCase):
    def test_corner_cycles_about_y(self):
        self.assertEqual(rotate_position((2, 2, 2), 3, "y", 1), (2, 2, 0))
        self.assertEqual(rotate_position((2, 2, 0), 3, "y", 1), (0, 2, 0))

    def test_even_size_stays_on_grid(self):
        for n in (2, 4):
            cells = {(x, y, z) for x in range(n) for y in range(n) for z in range(n)}
            for axis in ("x", "y", "z"):
                for q in (1, 2, 3):
                    self.assertEqual({rotate_position(p, n, axis, q) for p in cells}, cells)

    def test_layer_positions_include_inner_slices(self):
        self.assertEqual(len(layer_positions(4, "x", 1)), 16)
        self.assertTrue(all(p[0] == 1 for p in layer_positions(4, "x", 1)))


class TestRotateLayer(unittest.TestCase):
    def test_up_outer_layer_3x3(self):
        c = CubeState.build(3)
        affected = rotate_layer(c, "U", 2, 1)
        self.assertEqual(len(affected), 9)

        # Las caras laterales de la capa superior pasan al vecino; U queda igual
        shifted = {"R": "F", "F": "L", "L": "B", "B": "R"}
        for (x, y, z), label, color in c.facelets():
            if y == 2 and label != "U":
                self.assertEqual(color, shifted[label])
            else:
                self.assertEqual(color, label)

        self.assertEqual(c.get((2, 2, 0)), {"U": "U", "B": "R", "R": "F"})
        c.check_invariants()

    def test_up_then_inverse_restores(self):
        c = CubeState.build(3)
        before = c.to_hashable()
        rotate_layer(c, "U", 2, 1)
        rotate_layer(c, "U", 2, -1)
        self.assertEqual(before, c.to_hashable())

    def test_single_cubie_relabels_without_moving(self):
        c = CubeState.build(1)
        affected = rotate_layer(c, "U", 0, 1)
        self.assertEqual(affected, [(0, 0, 0)])
        self.assertEqual(
            c.get((0, 0, 0)),
            {"U": "U", "D": "D", "B": "R", "R": "F", "F": "L", "L": "B"},
        )
        self.assertEqual(c.facelet_count(), 6)
        for face in FACES:
            rotate_layer(c, face, 0, -1)
            self.assertEqual(c.facelet_count(), 6)

    def test_inverse_round_trip_all_moves(self):
        for n in (1, 2, 3, 4):
            for face, layer in _all_moves(n):
                for turns in (1, -1, 2):
                    c = CubeState.build(n)
                    rotate_layer(c, "R", n - 1, 1)  # estado no trivial
                    before = c.to_hashable()
                    rotate_layer(c, face, layer, turns)
                    rotate_layer(c, face, layer, -turns)
                    self.assertEqual(before, c.to_hashable(), msg=f"n={n} {face} {layer} {turns}")

    def test_four_quarter_turns_identity(self):
        for n in (1, 2, 3, 5):
            for face, layer in _all_moves(n):
                c = CubeState.build(n)
                rotate_layer(c, "F", 0, 1)
                before = c.to_hashable()
                for _ in range(4):
                    rotate_layer(c, face, layer, 1)
                self.assertEqual(before, c.to_hashable(), msg=f"n={n} {face} {layer}")

    def test_half_turn_equals_two_quarters(self):
        for face, layer in _all_moves(3):
            c1 = CubeState.build(3)
            c2 = CubeState.build(3)
            rotate_layer(c1, face, layer, 2)
            rotate_layer(c2, face, layer, 1)
            rotate_layer(c2, face, layer, 1)
            self.assertEqual(c1.to_hashable(), c2.to_hashable())

    def test_opposite_faces_use_mirrored_sign(self):
        for n in (2, 3):
            for layer in range(n):
                for a, b in (("U", "D"), ("R", "L"), ("F", "B")):
                    c1 = CubeState.build(n)
                    c2 = CubeState.build(n)
                    rotate_layer(c1, a, layer, 1)
                    rotate_layer(c2, b, layer, -1)
                    self.assertEqual(c1.to_hashable(), c2.to_hashable())

    def test_boundary_invariant_and_conservation_random(self):
        rng = random.Random(7)
        for n in (1, 2, 3, 4, 6):
            c = CubeState.build(n)
            for _ in range(60):
                rotate_layer(c, rng.choice(FACES), rng.randrange(n), rng.choice((1, -1, 2)))
                c.check_invariants()
            self.assertEqual(c.facelet_count(), 6 * n * n)
            colors = [color for _, _, color in c.facelets()]
            for face in FACES:
                self.assertEqual(colors.count(face), n * n)

    def test_zero_turns_is_noop(self):
        c = CubeState.build(3)
        before = c.to_hashable()
        self.assertEqual(rotate_layer(c, "U", 2, 0), [])
        self.assertEqual(rotate_layer(c, "U", 2, 4), [])
        self.assertEqual(before, c.to_hashable())

    def test_layer_out_of_bounds_rejected_before_mutation(self):
        c = CubeState.build(3)
        before = c.to_hashable()
        with self.assertRaises(OutOfBoundsError):
            rotate_layer(c, "U", 3, 1)
        with self.assertRaises(OutOfBoundsError):
            rotate_layer(c, "L", -1, 1)
        self.assertEqual(before, c.to_hashable())

    def test_invalid_face(self):
        c = CubeState.build(3)
        with self.assertRaises(ValueError):
            rotate_layer(c, "M", 1, 1)


if __name__ == "__main__":
    unittest.main()
