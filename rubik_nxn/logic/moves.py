from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Set

from rubik_nxn.core.errors import OutOfBoundsError
from rubik_nxn.core.grid import FACES, Face, outer_layer, validate_layer
from rubik_nxn.core.rotation import canonical_turns

VALID_FACES: Set[str] = set(FACES)
SUFFIX_TURNS: Dict[str, int] = {"": 1, "'": -1, "2": 2}
TURNS_SUFFIX: Dict[int, str] = {0: "0", 1: "", -1: "'", 2: "2"}


@dataclass(frozen=True)
class Move:
    """Movimiento de una capa (objeto valor inmutable).

    Attributes:
        face: Cara que define eje y sentido ("U", "D", "L", "R", "F", "B").
        layer: Coordenada absoluta de la capa sobre el eje de la cara (0..N-1),
            no una distancia desde la cara.
        turns: Cuartos de vuelta con signo, canonizados a [-2, 2].
    """

    face: Face
    layer: int
    turns: int = 1

    def __post_init__(self) -> None:
        if self.face not in VALID_FACES:
            raise ValueError(f"Cara inválida: {self.face!r}")
        if isinstance(self.layer, bool) or not isinstance(self.layer, int):
            raise ValueError(f"Capa inválida: {self.layer!r}")
        if self.layer < 0:
            raise OutOfBoundsError(f"Capa fuera de rango: {self.layer}")
        if isinstance(self.turns, bool) or not isinstance(self.turns, int):
            raise ValueError(f"Giros inválidos: {self.turns!r}")
        object.__setattr__(self, "turns", canonical_turns(self.turns))

    def inverse(self) -> "Move":
        """Inverso algebraico: misma cara y capa, giros negados."""
        return Move(self.face, self.layer, -self.turns)

    @property
    def is_noop(self) -> bool:
        return self.turns == 0


def normalize_token(tok: str) -> str:
    """Normaliza un token de movimiento a un formato estándar.

    Reglas principales:
    - Elimina espacios y convierte comilla tipográfica (’ o ‘) a comilla simple (').
    - Acepta `<cara>[<capa>]<sufijo>` con capa opcional entre corchetes
      y sufijo "", "'" o "2". Ej: "R", "U'", "F[1]2".
    - Corrige el caso típico "D2'" -> "D2" (el inverso de un 180° es el mismo).

    Args:
        tok: Token de movimiento.

    Returns:
        Token normalizado (por ejemplo: "d[0]2'" -> "D[0]2").

    Raises:
        ValueError: Si la cara, la capa o el sufijo no son válidos.
    """
    tok = tok.strip().replace("’", "'").replace("‘", "'")
    if not tok:
        return ""

    base = tok[0].upper()
    if base not in VALID_FACES:
        raise ValueError(f"Movimiento inválido: {tok}")

    suf = tok[1:]
    layer = ""
    if suf.startswith("["):
        end = suf.find("]")
        digits = suf[1:end] if end > 0 else ""
        if not digits.isdigit():
            raise ValueError(f"Capa inválida en: {tok}")
        layer = f"[{int(digits)}]"
        suf = suf[end + 1:]

    # Corrección: "D2'" -> "D2"
    if suf == "2'":
        suf = "2"

    if suf not in SUFFIX_TURNS:
        raise ValueError(f"Sufijo inválido en: {tok}")

    return base + layer + suf


def parse_token(tok: str, n: int) -> Move:
    """Convierte un token en un `Move` para un cubo de tamaño N.

    Sin capa explícita se usa la capa exterior de la cara (como los botones de la UI).

    Raises:
        ValueError: Si el token es inválido o está vacío.
        OutOfBoundsError: Si la capa no existe en un cubo de tamaño N.
    """
    t = normalize_token(tok)
    if not t:
        raise ValueError("Token vacío")

    face: Face = t[0]  # type: ignore[assignment]
    suf = t[1:]
    layer = outer_layer(face, n)
    if suf.startswith("["):
        end = suf.index("]")
        layer = validate_layer(int(suf[1:end]), n)
        suf = suf[end + 1:]

    return Move(face, layer, SUFFIX_TURNS[suf])


def format_move(move: Move, n: int) -> str:
    """Escribe un `Move` en notación; omite la capa cuando es la exterior.

    Ejemplos (N=3): U capa 2, +1 -> "U"; U capa 1, -1 -> "U[1]'"; R capa 0, 2 -> "R[0]2".
    """
    out = move.face
    if move.layer != outer_layer(move.face, n):
        out += f"[{move.layer}]"
    return out + TURNS_SUFFIX[move.turns]


def inverse_move(tok: str, n: int) -> str:
    """Devuelve el token del movimiento inverso.

    Ejemplos:
        - "R"  -> "R'"
        - "R'" -> "R"
        - "R2" -> "R2"

    Si `tok` es un string vacío, retorna "".
    """
    if not normalize_token(tok):
        return ""
    return format_move(parse_token(tok, n).inverse(), n)


def parse_sequence(text: str, n: int) -> List[Move]:
    """Convierte una secuencia escrita como texto en una lista de movimientos.

    La entrada debe separar movimientos por espacios. Por ejemplo (N=3):
        "R U[1] R' U'" -> [Move("R", 2, 1), Move("U", 1, 1), Move("R", 2, -1), Move("U", 2, -1)]

    Raises:
        ValueError: Si algún token es inválido.
    """
    out: List[Move] = []
    for t in text.strip().split():
        if t.strip():
            out.append(parse_token(t, n))
    return out
