from __future__ import annotations

from typing import Dict, List, Literal, Sequence, Tuple

from rubik_nxn.core.errors import InvalidSizeError, OutOfBoundsError

Face = Literal["U", "D", "L", "R", "F", "B"]
Axis = Literal["x", "y", "z"]
Color = str  # Letras: "W", "Y", "O", "R", "G", "B"
Vec3i = Tuple[int, int, int]

MIN_SIZE: int = 1
MAX_SIZE: int = 20
DEFAULT_SIZE: int = 3

FACES: List[Face] = ["U", "D", "L", "R", "F", "B"]

COLORS_SOLVED: Dict[Face, Color] = {
    "U": "W",
    "D": "Y",
    "L": "O",
    "R": "R",
    "F": "G",
    "B": "B",
}

# Normales por cara (x, y, z)
FACE_NORMAL: Dict[Face, Vec3i] = {
    "F": (0, 0, 1),
    "B": (0, 0, -1),
    "R": (1, 0, 0),
    "L": (-1, 0, 0),
    "U": (0, 1, 0),
    "D": (0, -1, 0),
}

FACE_AXIS: Dict[Face, Axis] = {
    "U": "y",
    "D": "y",
    "L": "x",
    "R": "x",
    "F": "z",
    "B": "z",
}

AXIS_INDEX: Dict[Axis, int] = {"x": 0, "y": 1, "z": 2}

# Orientación de cada cara respecto del eje global: "horario" se define mirando
# la cara desde afuera, y eso no coincide con la mano derecha en las tres caras
# del lado negativo.
FACE_SIGN: Dict[Face, int] = {
    "U": 1,
    "D": -1,
    "F": 1,
    "B": -1,
    "L": -1,
    "R": 1,
}


def validate_size(n: object) -> int:
    """Valida el tamaño de la grilla.

    Args:
        n: Tamaño propuesto.

    Returns:
        El mismo tamaño, como `int`.

    Raises:
        InvalidSizeError: Si `n` no es entero o está fuera de [MIN_SIZE, MAX_SIZE].
    """
    if isinstance(n, bool) or not isinstance(n, int):
        raise InvalidSizeError(f"Tamaño inválido: {n!r}")
    if n < MIN_SIZE or n > MAX_SIZE:
        raise InvalidSizeError(
            f"Tamaño fuera de rango: {n} (permitido {MIN_SIZE}..{MAX_SIZE})"
        )
    return n


def clamp_size(value: object, default: int = DEFAULT_SIZE) -> int:
    """Lleva una entrada de UI al rango soportado.

    Valores no numéricos se reemplazan por `default`.
    """
    try:
        n = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError):
        n = default
    return max(MIN_SIZE, min(MAX_SIZE, n))


def validate_position(position: Sequence[int], n: int) -> Vec3i:
    """Valida que una posición esté dentro de [0, N-1]³.

    Raises:
        OutOfBoundsError: Si la posición no tiene 3 coordenadas enteras en rango.
    """
    if len(position) != 3:
        raise OutOfBoundsError(f"Posición inválida: {position!r}")
    for v in position:
        if isinstance(v, bool) or not isinstance(v, int) or not 0 <= v < n:
            raise OutOfBoundsError(f"Posición fuera de la grilla N={n}: {tuple(position)}")
    x, y, z = position
    return (x, y, z)


def validate_layer(layer: object, n: int) -> int:
    """Valida una capa absoluta en [0, N-1].

    Raises:
        OutOfBoundsError: Si la capa no es entera o cae fuera del rango.
    """
    if isinstance(layer, bool) or not isinstance(layer, int) or not 0 <= layer < n:
        raise OutOfBoundsError(f"Capa fuera de rango para N={n}: {layer!r}")
    return layer


def expected_labels(position: Vec3i, n: int) -> Tuple[Face, ...]:
    """Caras que deben tener sticker en una posición según la regla de borde.

    Una celda lleva sticker con etiqueta L si y solo si está en el borde del cubo
    en la dirección de la normal de L. Para N=1 la única celda lleva las 6.

    Args:
        position: Posición (x, y, z) en la grilla.
        n: Tamaño del cubo.

    Returns:
        Etiquetas en el orden de `FACES`.
    """
    x, y, z = position
    last = n - 1
    out: List[Face] = []
    if y == last:
        out.append("U")
    if y == 0:
        out.append("D")
    if x == 0:
        out.append("L")
    if x == last:
        out.append("R")
    if z == last:
        out.append("F")
    if z == 0:
        out.append("B")
    return tuple(out)


def outer_layer(face: Face, n: int) -> int:
    """Capa exterior de una cara: N-1 para U/R/F y 0 para D/L/B."""
    if face in ("U", "R", "F"):
        return n - 1
    return 0


def normal_to_face(v: Sequence[float]) -> Face:
    """Devuelve la cara cuya normal tiene el mayor producto punto con `v`."""
    best: Face = "U"
    best_dot = float("-inf")
    for face in FACES:
        nx, ny, nz = FACE_NORMAL[face]
        d = v[0] * nx + v[1] * ny + v[2] * nz
        if d > best_dot:
            best_dot = d
            best = face
    return best
