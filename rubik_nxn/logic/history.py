from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from rubik_nxn.logic.moves import Move


class MoveHistory:
    """Historial de movimientos con pilas de undo y redo.

    - `record` agrega al historial y, salvo que se pida lo contrario, vacía redo.
    - `pop_undo` saca el último movimiento y lo pasa a redo.
    - `pop_redo` saca el último movimiento deshecho (quien llama lo vuelve a aplicar
      y lo registra con `record(..., clear_redo=False)`).
    """

    def __init__(self) -> None:
        self._undo: List[Move] = []
        self._redo: List[Move] = []

    @property
    def moves(self) -> Tuple[Move, ...]:
        return tuple(self._undo)

    @property
    def redo_moves(self) -> Tuple[Move, ...]:
        return tuple(self._redo)

    def __len__(self) -> int:
        return len(self._undo)

    def record(self, move: Move, clear_redo: bool = True) -> None:
        """Agrega un movimiento confirmado al historial.

        Args:
            move: Movimiento aplicado.
            clear_redo: Si True (movimiento nuevo), invalida la pila de redo.
        """
        self._undo.append(move)
        if clear_redo:
            self._redo.clear()

    def pop_undo(self) -> Optional[Move]:
        if not self._undo:
            return None
        last = self._undo.pop()
        self._redo.append(last)
        return last

    def pop_redo(self) -> Optional[Move]:
        if not self._redo:
            return None
        return self._redo.pop()

    def clear(self) -> None:
        self._undo.clear()
        self._redo.clear()

    def replace(self, moves: Iterable[Move]) -> None:
        """Reemplaza el historial (por ejemplo, al importar); vacía redo."""
        self._undo = list(moves)
        self._redo = []
