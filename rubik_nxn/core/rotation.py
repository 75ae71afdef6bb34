from __future__ import annotations

from typing import Dict, List, Tuple

from rubik_nxn.core.cube_state import CubeState, Cubie
from rubik_nxn.core.grid import (
    AXIS_INDEX,
    FACE_AXIS,
    FACE_NORMAL,
    FACE_SIGN,
    FACES,
    Axis,
    Face,
    Vec3i,
    normal_to_face,
    validate_layer,
)


def canonical_turns(turns: int) -> int:
    """Reduce `turns` módulo 4 al rango [-2, 2] (3 -> -1, -3 -> 1, -2 -> 2)."""
    t = turns % 4
    if t > 2:
        t -= 4
    return t


def quarter_direction(face: Face, turns: int) -> int:
    """Sentido (+1/-1) de cada cuarto de vuelta alrededor del eje positivo.

    Se invierte cuando el signo de la cara (`FACE_SIGN`) no coincide con el
    signo de `turns`.
    """
    return FACE_SIGN[face] * (1 if turns > 0 else -1)


def _rot_x(v: Vec3i, turns: int) -> Vec3i:
    """Rota un vector 90°*turns alrededor de X (regla de la mano derecha)."""
    x, y, z = v
    turns %= 4
    if turns == 0:
        return (x, y, z)
    if turns == 1:
        return (x, -z, y)
    if turns == 2:
        return (x, -y, -z)
    return (x, z, -y)


def _rot_y(v: Vec3i, turns: int) -> Vec3i:
    """Rota un vector 90°*turns alrededor de Y (regla de la mano derecha)."""
    x, y, z = v
    turns %= 4
    if turns == 0:
        return (x, y, z)
    if turns == 1:
        return (z, y, -x)
    if turns == 2:
        return (-x, y, -z)
    return (-z, y, x)


def _rot_z(v: Vec3i, turns: int) -> Vec3i:
    """Rota un vector 90°*turns alrededor de Z (regla de la mano derecha)."""
    x, y, z = v
    turns %= 4
    if turns == 0:
        return (x, y, z)
    if turns == 1:
        return (-y, x, z)
    if turns == 2:
        return (-x, -y, z)
    return (y, -x, z)


def rotate_vector(v: Vec3i, axis: Axis, turns: int) -> Vec3i:
    """Rota un vector entero 90°*turns alrededor del eje indicado."""
    if axis == "x":
        return _rot_x(v, turns)
    if axis == "y":
        return _rot_y(v, turns)
    return _rot_z(v, turns)


def rotate_position(position: Vec3i, n: int, axis: Axis, turns: int) -> Vec3i:
    """Rota una posición de la grilla alrededor del eje central del cubo.

    Se trabaja en coordenadas centradas y duplicadas (`2p - (N-1)`) para que
    todo sea entero también cuando N es par.
    """
    off = n - 1
    cx, cy, cz = (2 * c - off for c in position)
    rx, ry, rz = rotate_vector((cx, cy, cz), axis, turns)
    return ((rx + off) // 2, (ry + off) // 2, (rz + off) // 2)


def layer_positions(n: int, axis: Axis, layer: int) -> List[Vec3i]:
    """Todas las posiciones cuya coordenada en `axis` vale `layer` (orden x, y, z)."""
    i = AXIS_INDEX[axis]
    out: List[Vec3i] = []
    for x in range(n):
        for y in range(n):
            for z in range(n):
                p = (x, y, z)
                if p[i] == layer:
                    out.append(p)
    return out


def _build_relabel_table() -> Dict[Tuple[Face, Axis, int], Face]:
    """Precalcula (etiqueta, eje, cuartos) -> etiqueta tras rotar la normal."""
    table: Dict[Tuple[Face, Axis, int], Face] = {}
    for face in FACES:
        for axis in ("x", "y", "z"):
            for quarter in (1, 2, 3):
                rotated = rotate_vector(FACE_NORMAL[face], axis, quarter)  # type: ignore[arg-type]
                table[(face, axis, quarter)] = normal_to_face(rotated)  # type: ignore[index]
    return table


RELABEL: Dict[Tuple[Face, Axis, int], Face] = _build_relabel_table()


def relabel(cubie: Cubie, axis: Axis, turns: int) -> Cubie:
    """Reasigna las etiquetas de un cubie rotado; los colores no cambian."""
    q = turns % 4
    if q == 0:
        return dict(cubie)
    return {RELABEL[(label, axis, q)]: color for label, color in cubie.items()}


def rotate_layer(state: CubeState, face: Face, layer: int, turns: int) -> List[Vec3i]:
    """Aplica un giro de capa al estado y confirma el resultado.

    Pasos:
        1. Canoniza `turns` a [-2, 2]; 0 no hace nada. Un medio giro se ejecuta
           como dos cuartos en el mismo sentido.
        2. Selecciona todas las posiciones de la capa (incluye capas internas).
        3. Permuta posiciones con la rotación de 90° del eje.
        4. Reetiqueta los stickers con la tabla `RELABEL`.
        5. Reemplaza el estado completo de una vez.

    Args:
        state: Estado a modificar.
        face: Cara del movimiento (define eje y sentido).
        layer: Coordenada absoluta de la capa sobre el eje, en [0, N-1].
        turns: Cuartos de vuelta con signo.

    Returns:
        Posiciones afectadas (vacío si `turns` es múltiplo de 4).

    Raises:
        ValueError: Si la cara no es válida.
        OutOfBoundsError: Si la capa está fuera de rango (antes de mutar nada).
    """
    if face not in FACE_AXIS:
        raise ValueError(f"Cara no soportada: {face!r}")
    axis = FACE_AXIS[face]
    validate_layer(layer, state.n)

    t = canonical_turns(turns)
    if t == 0:
        return []

    n = state.n
    coords = layer_positions(n, axis, layer)
    quarter = quarter_direction(face, t) % 4

    new = state.cubies()
    for _ in range(abs(t)):
        moved: Dict[Vec3i, Cubie] = {}
        for pos in coords:
            x, y, z = pos
            cubie = new[(x * n + y) * n + z]
            moved[rotate_position(pos, n, axis, quarter)] = relabel(cubie, axis, quarter)
        for (x, y, z), cubie in moved.items():
            new[(x * n + y) * n + z] = cubie

    state.replace(new)
    return coords
