import unittest
from collections import Counter

from rubik_nxn.core import CubeState, OutOfBoundsError
from rubik_nxn.core.rotation import rotate_layer
from rubik_nxn.logic.moves import Move
from rubik_nxn.render.bridge import (
    ease_in_out_cubic,
    facelet_views,
    frame_transforms,
    move_angle,
    plan_move,
    rotate_point,
)


def _round3(v):
    return tuple(round(c, 3) + 0.0 for c in v)


class TestFaceletViews(unittest.TestCase):
    def test_one_view_per_sticker(self):
        for n in (1, 2, 3):
            views = facelet_views(CubeState.build(n))
            self.assertEqual(len(views), 6 * n * n)
            self.assertEqual(len({v.key for v in views}), 6 * n * n)

    def test_indices_per_label(self):
        views = facelet_views(CubeState.build(3))
        for label in "UDLRFB":
            self.assertEqual(sorted(v.index for v in views if v.label == label), list(range(9)))

    def test_center_sits_on_normal(self):
        views = facelet_views(CubeState.build(1), spacing=1.0, offset=0.5)
        for v in views:
            self.assertEqual(v.center, tuple(0.5 * c for c in v.normal))


class TestPlanMove(unittest.TestCase):
    def test_affected_counts(self):
        c = CubeState.build(3)
        self.assertEqual(len(plan_move(c, Move("U", 2, 1)).affected), 21)
        self.assertEqual(len(plan_move(c, Move("U", 1, 1)).affected), 12)
        self.assertEqual(len(plan_move(c, Move("U", 2, 0)).affected), 0)

    def test_angles(self):
        self.assertEqual(move_angle(Move("U", 2, 1)), 90.0)
        self.assertEqual(move_angle(Move("D", 0, 1)), -90.0)
        self.assertEqual(move_angle(Move("U", 2, 2)), 180.0)
        self.assertEqual(move_angle(Move("L", 0, -1)), 90.0)

    def test_layer_center(self):
        plan = plan_move(CubeState.build(3), Move("R", 2, 1), spacing=1.0)
        self.assertEqual(plan.axis, "x")
        self.assertEqual(plan.layer_center, (1.0, 0.0, 0.0))

    def test_invalid_layer(self):
        with self.assertRaises(OutOfBoundsError):
            plan_move(CubeState.build(2), Move("F", 2, 1))

    def test_snapshot_is_not_affected_by_commit(self):
        c = CubeState.build(3)
        plan = plan_move(c, Move("F", 2, 1))
        before = [(v.label, v.color, v.position) for v in plan.affected]
        rotate_layer(c, "F", 2, 1)
        self.assertEqual([(v.label, v.color, v.position) for v in plan.affected], before)
        self.assertTrue(all(v.label == v.color for v in plan.affected))


class TestAnimation(unittest.TestCase):
    def test_easing(self):
        self.assertEqual(ease_in_out_cubic(0.0), 0.0)
        self.assertEqual(ease_in_out_cubic(1.0), 1.0)
        self.assertAlmostEqual(ease_in_out_cubic(0.5), 0.5)
        self.assertLess(ease_in_out_cubic(0.25), 0.25)
        self.assertGreater(ease_in_out_cubic(0.75), 0.75)

    def test_rotate_point(self):
        self.assertEqual(_round3(rotate_point((1.0, 0.0, 0.0), "y", 90)), (0.0, 0.0, -1.0))
        self.assertEqual(_round3(rotate_point((0.0, 1.0, 0.0), "x", 90)), (0.0, 0.0, 1.0))
        self.assertEqual(_round3(rotate_point((1.0, 0.0, 0.0), "z", 90)), (0.0, 1.0, 0.0))

    def test_start_frame_matches_snapshot(self):
        plan = plan_move(CubeState.build(3), Move("R", 2, 1))
        for v, center, normal in frame_transforms(plan, 0.0):
            self.assertEqual(_round3(center), _round3(v.center))
            self.assertEqual(_round3(normal), _round3(v.normal))

    def test_end_frame_matches_committed_state(self):
        for move in (Move("U", 2, 1), Move("D", 1, -1), Move("F", 0, 2), Move("L", 2, 1)):
            c = CubeState.build(3)
            rotate_layer(c, "R", 2, 1)
            plan = plan_move(c, move)
            animated = Counter(
                (v.color, _round3(center), _round3(normal))
                for v, center, normal in frame_transforms(plan, 1.0)
            )

            rotate_layer(c, move.face, move.layer, move.turns)
            axis_i = "xyz".index(plan.axis)
            committed = Counter(
                (v.color, _round3(v.center), _round3(v.normal))
                for v in facelet_views(c)
                if v.position[axis_i] == move.layer
            )
            self.assertEqual(animated, committed, msg=str(move))


if __name__ == "__main__":
    unittest.main()
