from __future__ import annotations

import random
from typing import List, Optional

from rubik_nxn.core.grid import FACES, Face, validate_size
from rubik_nxn.logic.moves import Move

# Sesgo 3:1 hacia el sentido positivo; el scramble no genera medios giros.
TURN_CHOICES: List[int] = [1, 1, 1, -1]


def default_scramble_length(n: int, minimum: int = 10, maximum: int = 200) -> int:
    """Largo de scramble por defecto: 10 movimientos por capa, acotado a [10, 200]."""
    return max(minimum, min(maximum, n * 10))


def generate_scramble(count: int, n: int, seed: Optional[int] = None) -> List[Move]:
    """Genera una secuencia de mezcla (scramble) aleatoria para un cubo NxNxN.

    Cada movimiento elige:
    - una cara distinta de la del movimiento anterior (evita "U U'" seguidos),
    - una capa uniforme en [0, N-1] (incluye capas internas),
    - un cuarto de vuelta, positivo 3 de cada 4 veces.

    Args:
        count: Cantidad de movimientos a generar (0 devuelve una lista vacía).
        n: Tamaño del cubo.
        seed: Semilla opcional para obtener resultados reproducibles. Si es None,
            el scramble será distinto en cada ejecución.

    Returns:
        Lista de `Move` en el orden en que deben aplicarse.

    Raises:
        ValueError: Si `count` es negativo.
        InvalidSizeError: Si `n` está fuera de rango.
    """
    if count < 0:
        raise ValueError("count no puede ser negativo.")
    validate_size(n)
    if count == 0:
        return []

    rng = random.Random(seed)

    seq: List[Move] = []
    last_face: Optional[Face] = None

    for _ in range(count):
        # Evitar repetir la misma cara consecutiva
        candidates = [f for f in FACES if f != last_face]
        face = rng.choice(candidates)
        last_face = face

        seq.append(Move(face, rng.randrange(n), rng.choice(TURN_CHOICES)))

    return seq
