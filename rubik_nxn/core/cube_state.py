from __future__ import annotations

from typing import Dict, Iterator, List, Sequence, Tuple

from rubik_nxn.core.errors import MalformedStateError
from rubik_nxn.core.grid import (
    FACES,
    Face,
    Vec3i,
    expected_labels,
    validate_position,
    validate_size,
)

# cubie: etiqueta actual (dirección a la que apunta) -> color original (cara de origen)
Cubie = Dict[Face, Face]
CubeHash = Tuple[Tuple[Tuple[Face, Face], ...], ...]


class CubeState:
    """Estado lógico de un cubo NxNxN.

    Representación:
        - Arreglo plano de N³ cubies, indexado por `(x * N + y) * N + z`.
        - Cada cubie es un dict pequeño: etiqueta actual -> color original.
          La etiqueta cambia al rotar; el color nunca.

    El arreglo completo se reemplaza de una vez en `replace`, de modo que ningún
    lector observa un estado a medio rotar.
    """

    def __init__(self, n: int, cubies: List[Cubie]) -> None:
        """Crea el estado a partir de un arreglo ya armado (usar `build` para uno nuevo).

        Args:
            n: Tamaño del cubo.
            cubies: Arreglo plano de N³ cubies.

        Raises:
            InvalidSizeError: Si `n` está fuera de rango.
            MalformedStateError: Si el largo del arreglo no es N³.
        """
        self.n: int = validate_size(n)
        if len(cubies) != n ** 3:
            raise MalformedStateError(
                f"Se esperaban {n ** 3} cubies para N={n}, llegaron {len(cubies)}"
            )
        self._cubies: List[Cubie] = cubies

    @classmethod
    def build(cls, n: int) -> "CubeState":
        """Construye un cubo resuelto de tamaño N.

        Raises:
            InvalidSizeError: Si `n` está fuera de rango.
        """
        validate_size(n)
        cubies: List[Cubie] = []
        for x in range(n):
            for y in range(n):
                for z in range(n):
                    cubies.append({f: f for f in expected_labels((x, y, z), n)})
        return cls(n, cubies)

    # --------------------------
    # Acceso
    # --------------------------
    def index(self, position: Sequence[int]) -> int:
        """Índice plano de una posición (valida rango)."""
        x, y, z = validate_position(position, self.n)
        return (x * self.n + y) * self.n + z

    def get(self, position: Sequence[int]) -> Cubie:
        """Devuelve una copia del cubie en `position`.

        Raises:
            OutOfBoundsError: Si la posición está fuera de [0, N-1]³.
        """
        return dict(self._cubies[self.index(position)])

    def replace(self, assignment: List[Cubie]) -> None:
        """Reemplaza atómicamente todo el arreglo de cubies.

        Raises:
            MalformedStateError: Si el largo no es N³.
        """
        if len(assignment) != self.n ** 3:
            raise MalformedStateError(
                f"Asignación de largo {len(assignment)} incompatible con N={self.n}"
            )
        self._cubies = assignment

    def cubies(self) -> List[Cubie]:
        """Copia por valor del arreglo completo."""
        return [dict(c) for c in self._cubies]

    def positions(self) -> Iterator[Vec3i]:
        """Itera todas las posiciones en orden x, y, z (el mismo del arreglo)."""
        n = self.n
        for x in range(n):
            for y in range(n):
                for z in range(n):
                    yield (x, y, z)

    def facelets(self) -> Iterator[Tuple[Vec3i, Face, Face]]:
        """Itera (posición, etiqueta actual, color original) de cada sticker."""
        for pos, cubie in zip(self.positions(), self._cubies):
            for face in FACES:
                if face in cubie:
                    yield pos, face, cubie[face]

    def facelet_count(self) -> int:
        return sum(len(c) for c in self._cubies)

    def copy(self) -> "CubeState":
        return CubeState(self.n, self.cubies())

    # --------------------------
    # Consultas
    # --------------------------
    def to_hashable(self) -> CubeHash:
        """Estado inmutable y hasheable, útil para comparar estados."""
        return tuple(
            tuple((f, c[f]) for f in FACES if f in c) for c in self._cubies
        )

    def is_solved(self) -> bool:
        """Indica si cada cara muestra un único color (sin importar la orientación)."""
        seen: Dict[Face, Face] = {}
        for _, label, color in self.facelets():
            if seen.setdefault(label, color) != color:
                return False
        return True

    def check_invariants(self) -> None:
        """Verifica la regla de borde en todas las posiciones.

        Raises:
            MalformedStateError: Si algún cubie tiene stickers que no corresponden.
        """
        for pos, cubie in zip(self.positions(), self._cubies):
            want = set(expected_labels(pos, self.n))
            if set(cubie) != want:
                raise MalformedStateError(
                    f"Cubie {pos} tiene {sorted(cubie)} y debería tener {sorted(want)}"
                )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CubeState):
            return NotImplemented
        return self.n == other.n and self._cubies == other._cubies

    def __repr__(self) -> str:
        return f"CubeState(n={self.n}, facelets={self.facelet_count()})"
