from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple

from rubik_nxn.core.cube_state import CubeState, Cubie
from rubik_nxn.core.errors import CubeError, MalformedStateError
from rubik_nxn.core.grid import FACES, expected_labels, validate_layer, validate_size
from rubik_nxn.logic.moves import Move


@dataclass(frozen=True)
class ImportedState:
    """Resultado validado de un import, listo para instalar."""

    n: int
    state: CubeState
    history: Tuple[Move, ...]


def move_to_dict(move: Move) -> Dict[str, Any]:
    return {"face": move.face, "layer": move.layer, "turns": move.turns}


def export_state(state: CubeState, history: Sequence[Move]) -> Dict[str, Any]:
    """Arma el registro exportable `{N, cubeState, moveHistory}`.

    `cubeState[x][y][z]` es `{"stickers": {etiqueta: color}}`.
    """
    n = state.n
    nested: List[List[List[Dict[str, Dict[str, str]]]]] = [
        [[{"stickers": {}} for _ in range(n)] for _ in range(n)] for _ in range(n)
    ]
    for (x, y, z), label, color in state.facelets():
        nested[x][y][z]["stickers"][label] = color
    return {
        "N": n,
        "cubeState": nested,
        "moveHistory": [move_to_dict(m) for m in history],
    }


def dumps_state(state: CubeState, history: Sequence[Move]) -> str:
    return json.dumps(export_state(state, history))


def _parse_size(obj: Dict[str, Any]) -> int:
    if "N" not in obj:
        raise MalformedStateError("Falta el campo N")
    try:
        return validate_size(obj["N"])
    except CubeError as exc:
        raise MalformedStateError(f"N inválido: {obj['N']!r}") from exc


def _parse_cubes(raw: Any, n: int) -> CubeState:
    if not isinstance(raw, list) or len(raw) != n:
        raise MalformedStateError(f"cubeState debe ser una grilla {n}x{n}x{n}")

    cubies: List[Cubie] = []
    counts: Dict[str, int] = {f: 0 for f in FACES}
    for x, plane in enumerate(raw):
        if not isinstance(plane, list) or len(plane) != n:
            raise MalformedStateError(f"cubeState[{x}] no tiene {n} filas")
        for y, row in enumerate(plane):
            if not isinstance(row, list) or len(row) != n:
                raise MalformedStateError(f"cubeState[{x}][{y}] no tiene {n} celdas")
            for z, cell in enumerate(row):
                stickers = cell.get("stickers") if isinstance(cell, dict) else None
                if not isinstance(stickers, dict):
                    raise MalformedStateError(f"Cubie ({x}, {y}, {z}) sin 'stickers'")

                cubie: Cubie = {}
                for label, color in stickers.items():
                    if label not in FACES or color not in FACES:
                        raise MalformedStateError(
                            f"Sticker inválido en ({x}, {y}, {z}): {label!r} -> {color!r}"
                        )
                    cubie[label] = color
                    counts[color] += 1

                if set(cubie) != set(expected_labels((x, y, z), n)):
                    raise MalformedStateError(
                        f"Cubie ({x}, {y}, {z}) no respeta la regla de borde: {sorted(cubie)}"
                    )
                cubies.append(cubie)

    for color, c in counts.items():
        if c != n * n:
            raise MalformedStateError(f"El color {color} aparece {c} veces (se esperaban {n * n})")

    return CubeState(n, cubies)


def _parse_history(raw: Any, n: int) -> Tuple[Move, ...]:
    if not isinstance(raw, list):
        raise MalformedStateError("moveHistory debe ser una lista")
    out: List[Move] = []
    for i, entry in enumerate(raw):
        if not isinstance(entry, dict) or not {"face", "layer", "turns"} <= set(entry):
            raise MalformedStateError(f"moveHistory[{i}] incompleto: {entry!r}")
        try:
            move = Move(entry["face"], entry["layer"], entry["turns"])
            validate_layer(move.layer, n)
        except (TypeError, ValueError) as exc:
            raise MalformedStateError(f"moveHistory[{i}] inválido: {exc}") from exc
        out.append(move)
    return tuple(out)


def parse_state(obj: Any) -> ImportedState:
    """Valida un registro exportado sin tocar ningún estado existente.

    `cubeState` ausente equivale a un cubo resuelto; `moveHistory` ausente, a
    un historial vacío.

    Raises:
        MalformedStateError: Si falta N, N está fuera de rango, o la grilla o el
            historial no son coherentes con N.
    """
    if not isinstance(obj, dict):
        raise MalformedStateError("El estado debe ser un objeto JSON")

    n = _parse_size(obj)

    raw_cubes = obj.get("cubeState")
    state = CubeState.build(n) if raw_cubes is None else _parse_cubes(raw_cubes, n)

    raw_history = obj.get("moveHistory")
    history = () if raw_history is None else _parse_history(raw_history, n)

    return ImportedState(n=n, state=state, history=history)


def loads_state(text: str) -> ImportedState:
    """Igual que `parse_state`, a partir de texto JSON."""
    try:
        obj = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedStateError(f"JSON inválido: {exc.msg}") from exc
    return parse_state(obj)
