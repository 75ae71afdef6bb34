import dataclasses
import unittest

from rubik_nxn.core import OutOfBoundsError
from rubik_nxn.logic.moves import (
    Move,
    format_move,
    inverse_move,
    normalize_token,
    parse_sequence,
    parse_token,
)


class TestMove(unittest.TestCase):
    def test_turns_are_canonicalized(self):
        self.assertEqual(Move("U", 2, 3).turns, -1)
        self.assertEqual(Move("U", 2, -3).turns, 1)
        self.assertEqual(Move("U", 2, -2).turns, 2)
        self.assertEqual(Move("U", 2, 4).turns, 0)
        self.assertTrue(Move("U", 2, 4).is_noop)

    def test_is_immutable(self):
        m = Move("R", 1, 1)
        with self.assertRaises(dataclasses.FrozenInstanceError):
            m.turns = 2  # type: ignore[misc]

    def test_inverse(self):
        self.assertEqual(Move("F", 0, 1).inverse(), Move("F", 0, -1))
        self.assertEqual(Move("F", 0, 2).inverse(), Move("F", 0, 2))

    def test_rejects_bad_fields(self):
        with self.assertRaises(ValueError):
            Move("X", 0, 1)  # type: ignore[arg-type]
        with self.assertRaises(OutOfBoundsError):
            Move("U", -1, 1)
        with self.assertRaises(ValueError):
            Move("U", 0, 1.5)  # type: ignore[arg-type]


class TestNotation(unittest.TestCase):
    def test_normalize_token(self):
        self.assertEqual(normalize_token(" r "), "R")
        self.assertEqual(normalize_token("U’"), "U'")
        self.assertEqual(normalize_token("D2'"), "D2")
        self.assertEqual(normalize_token("f[01]2"), "F[1]2")
        self.assertEqual(normalize_token(""), "")

    def test_normalize_token_invalid(self):
        for bad in ("X", "U3", "U[", "U[a]", "U[]'", "R''"):
            with self.assertRaises(ValueError, msg=bad):
                normalize_token(bad)

    def test_parse_token_default_layer_is_outer(self):
        self.assertEqual(parse_token("U", 3), Move("U", 2, 1))
        self.assertEqual(parse_token("D'", 3), Move("D", 0, -1))
        self.assertEqual(parse_token("L2", 4), Move("L", 0, 2))

    def test_parse_token_explicit_layer(self):
        self.assertEqual(parse_token("U[1]'", 3), Move("U", 1, -1))
        with self.assertRaises(OutOfBoundsError):
            parse_token("U[3]", 3)
        with self.assertRaises(ValueError):
            parse_token("  ", 3)

    def test_format_move(self):
        self.assertEqual(format_move(Move("U", 2, 1), 3), "U")
        self.assertEqual(format_move(Move("U", 1, -1), 3), "U[1]'")
        self.assertEqual(format_move(Move("R", 0, 2), 3), "R[0]2")
        self.assertEqual(format_move(Move("B", 0, -1), 3), "B'")

    def test_inverse_move(self):
        self.assertEqual(inverse_move("R", 3), "R'")
        self.assertEqual(inverse_move("R'", 3), "R")
        self.assertEqual(inverse_move("R2", 3), "R2")
        self.assertEqual(inverse_move("F[1]", 3), "F[1]'")
        self.assertEqual(inverse_move("", 3), "")

    def test_parse_sequence(self):
        seq = parse_sequence("R U[1] R' U'", 3)
        self.assertEqual(
            seq,
            [Move("R", 2, 1), Move("U", 1, 1), Move("R", 2, -1), Move("U", 2, -1)],
        )
        self.assertEqual(parse_sequence("   ", 3), [])
        with self.assertRaises(ValueError):
            parse_sequence("R Q", 3)


if __name__ == "__main__":
    unittest.main()
