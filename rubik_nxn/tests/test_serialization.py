import json
import unittest

from rubik_nxn.core import CubeState, MalformedStateError
from rubik_nxn.core.rotation import rotate_layer
from rubik_nxn.logic.moves import Move
from rubik_nxn.logic.serialization import dumps_state, export_state, loads_state, parse_state


class TestExport(unittest.TestCase):
    def test_structure(self):
        c = CubeState.build(2)
        data = export_state(c, [Move("U", 1, 1), Move("L", 0, -1)])
        self.assertEqual(data["N"], 2)
        self.assertEqual(len(data["cubeState"]), 2)
        self.assertEqual(len(data["cubeState"][0][1]), 2)
        self.assertEqual(data["cubeState"][0][1][1]["stickers"], {"U": "U", "L": "L", "F": "F"})
        self.assertEqual(
            data["moveHistory"],
            [{"face": "U", "layer": 1, "turns": 1}, {"face": "L", "layer": 0, "turns": -1}],
        )

    def test_interior_cells_are_empty(self):
        data = export_state(CubeState.build(3), [])
        self.assertEqual(data["cubeState"][1][1][1], {"stickers": {}})

    def test_dumps_is_json(self):
        text = dumps_state(CubeState.build(1), [])
        self.assertEqual(json.loads(text)["N"], 1)


class TestImport(unittest.TestCase):
    def _scrambled(self):
        c = CubeState.build(3)
        rotate_layer(c, "R", 2, 1)
        rotate_layer(c, "U", 1, -1)
        history = [Move("R", 2, 1), Move("U", 1, -1)]
        return c, history

    def test_round_trip(self):
        c, history = self._scrambled()
        imported = loads_state(dumps_state(c, history))
        self.assertEqual(imported.n, 3)
        self.assertEqual(imported.state, c)
        self.assertEqual(imported.history, tuple(history))

    def test_defaults(self):
        imported = parse_state({"N": 4})
        self.assertEqual(imported.state, CubeState.build(4))
        self.assertEqual(imported.history, ())

    def test_invalid_size(self):
        for bad in ({}, {"N": 0}, {"N": 21}, {"N": "3"}, {"N": 2.5}, {"N": True}):
            with self.assertRaises(MalformedStateError, msg=repr(bad)):
                parse_state(bad)

    def test_not_an_object(self):
        with self.assertRaises(MalformedStateError):
            parse_state([1, 2, 3])
        with self.assertRaises(MalformedStateError):
            loads_state("[1, 2")

    def test_wrong_dimensions(self):
        data = export_state(CubeState.build(3), [])
        data["N"] = 2
        with self.assertRaises(MalformedStateError):
            parse_state(data)

        data = export_state(CubeState.build(3), [])
        data["cubeState"][2].pop()
        with self.assertRaises(MalformedStateError):
            parse_state(data)

    def test_boundary_rule_violation(self):
        data = export_state(CubeState.build(3), [])
        data["cubeState"][1][1][1]["stickers"] = {"U": "U"}
        with self.assertRaises(MalformedStateError):
            parse_state(data)

    def test_unknown_label_or_color(self):
        data = export_state(CubeState.build(2), [])
        data["cubeState"][0][0][0]["stickers"]["D"] = "X"
        with self.assertRaises(MalformedStateError):
            parse_state(data)

    def test_color_counts(self):
        data = export_state(CubeState.build(3), [])
        data["cubeState"][2][2][2]["stickers"]["U"] = "D"
        with self.assertRaises(MalformedStateError):
            parse_state(data)

    def test_bad_history(self):
        base = export_state(CubeState.build(3), [])
        for entry in (
            {"face": "U", "layer": 3, "turns": 1},
            {"face": "Q", "layer": 0, "turns": 1},
            {"face": "U", "layer": 0},
            {"face": "U", "layer": "0", "turns": 1},
            "U",
        ):
            data = dict(base, moveHistory=[entry])
            with self.assertRaises(MalformedStateError, msg=repr(entry)):
                parse_state(data)


if __name__ == "__main__":
    unittest.main()
