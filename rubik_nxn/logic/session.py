from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence, Set

from rubik_nxn.config import DEFAULT_CONFIG, SimConfig
from rubik_nxn.core.cube_state import CubeState
from rubik_nxn.core.errors import EngineBusyError
from rubik_nxn.core.grid import (
    AXIS_INDEX,
    FACE_AXIS,
    Face,
    outer_layer,
    validate_layer,
    validate_position,
)
from rubik_nxn.core.rotation import rotate_layer
from rubik_nxn.logic.history import MoveHistory
from rubik_nxn.logic.move_queue import DoneCallback, MoveQueue, QueuedMove
from rubik_nxn.logic.moves import Move, parse_sequence
from rubik_nxn.logic.scramble import default_scramble_length, generate_scramble
from rubik_nxn.logic.serialization import dumps_state, export_state, loads_state, parse_state
from rubik_nxn.render.bridge import AnimationPlan, FaceletView, ImmediateAnimator, facelet_views, plan_move

_LOGGER = logging.getLogger(__name__)


class Animator(Protocol):
    def animate(self, plan: AnimationPlan, on_finished: Callable[[], None]) -> None:
        ...


class CubeSession:
    """Motor de un cubo NxNxN: estado, cola de movimientos e historial.

    Cada sesión es independiente (no hay estado global). Los movimientos pasan
    por una cola FIFO; el animador recibe un `AnimationPlan` por movimiento y
    avisa cuando terminó, recién ahí se confirma la rotación y se registra en
    el historial.

    Como en la UI de escritorio, undo/redo/scramble/solve se ignoran mientras hay
    movimientos en curso; build e import lanzan `EngineBusyError`.
    """

    def __init__(
        self,
        n: Optional[int] = None,
        config: SimConfig = DEFAULT_CONFIG,
        animator: Optional[Animator] = None,
    ) -> None:
        """Crea la sesión con un cubo resuelto.

        Args:
            n: Tamaño del cubo (por defecto `config.size`).
            config: Parámetros de animación y geometría.
            animator: Animador (por defecto uno inmediato, sin render).

        Raises:
            InvalidSizeError: Si `n` está fuera de rango.
        """
        self.config: SimConfig = config
        self.animator: Animator = animator if animator is not None else ImmediateAnimator()
        self.history: MoveHistory = MoveHistory()
        self._state: CubeState = CubeState.build(config.size if n is None else n)
        self._queue: MoveQueue = MoveQueue(self._execute, on_idle=self._notify_state)

        self._state_callbacks: Set[Callable[[], None]] = set()
        self._movement_callbacks: Set[Callable[[Move], None]] = set()

    # --------------------------
    # Estado / callbacks
    # --------------------------
    @property
    def n(self) -> int:
        return self._state.n

    @property
    def state(self) -> CubeState:
        return self._state

    @property
    def busy(self) -> bool:
        return self._queue.busy

    @property
    def queue(self) -> MoveQueue:
        return self._queue

    def is_solved(self) -> bool:
        return self._state.is_solved()

    def facelet_views(self) -> List[FaceletView]:
        return facelet_views(self._state, self.config.spacing, self.config.sticker_offset)

    def register_callback(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Registra un callback de cambio de estado; retorna la función para desuscribir."""

        def unsubscribe() -> None:
            self._state_callbacks.discard(callback)

        self._state_callbacks.add(callback)
        return unsubscribe

    def add_movement_callback(self, callback: Callable[[Move], None]) -> None:
        """Callback llamado con cada movimiento confirmado."""
        self._movement_callbacks.add(callback)

    def remove_movement_callback(self, callback: Callable[[Move], None]) -> None:
        self._movement_callbacks.discard(callback)

    def _notify_state(self) -> None:
        for cb in list(self._state_callbacks):
            cb()

    # --------------------------
    # Build / reset
    # --------------------------
    def build(self, n: int) -> None:
        """Reconstruye el cubo resuelto de tamaño N y vacía el historial.

        Raises:
            InvalidSizeError: Si `n` está fuera de rango (el cubo actual no cambia).
            EngineBusyError: Si hay movimientos en curso.
        """
        self._ensure_idle("reconstruir")
        state = CubeState.build(n)
        self._state = state
        self.history.clear()
        _LOGGER.info("Cubo construido: N=%d", n)
        self._notify_state()

    def reset(self) -> None:
        self.build(self.n)

    # --------------------------
    # Movimientos
    # --------------------------
    def submit(self, move: Move, record: bool = True) -> QueuedMove:
        """Encola un movimiento (se valida en el acto).

        Raises:
            OutOfBoundsError: Si la capa no existe para el N actual.
        """
        validate_layer(move.layer, self.n)
        return self._queue.submit(move, record=record)

    def move(self, face: Face, turns: int = 1, layer: Optional[int] = None) -> QueuedMove:
        """Mueve una capa; sin `layer` se usa la capa exterior de la cara."""
        if layer is None:
            layer = outer_layer(face, self.n)
        return self.submit(Move(face, layer, turns))

    def move_from_selection(self, position: Sequence[int], label: Face, turns: int = 1) -> QueuedMove:
        """Movimiento a partir de un sticker elegido (capa de picking).

        El eje sale de la etiqueta y la capa, de la coordenada de la posición
        sobre ese eje.
        """
        pos = validate_position(position, self.n)
        if label not in FACE_AXIS:
            raise ValueError(f"Cara inválida: {label!r}")
        layer = pos[AXIS_INDEX[FACE_AXIS[label]]]
        return self.move(label, turns, layer)

    def apply_sequence(self, text: str) -> List[Move]:
        """Encola una secuencia en notación ("R U[1] R' U'"); se valida completa antes."""
        moves = parse_sequence(text, self.n)
        for m in moves:
            self.submit(m)
        return moves

    # --------------------------
    # Historial
    # --------------------------
    def undo(self) -> bool:
        """Revierte el último movimiento (si existe historial y no hay animación).

        Con movimientos animándose o en cola no hace nada y retorna False, igual
        que `redo`: la pila todavía no refleja los giros pendientes.
        """
        if self._refuse_if_busy("undo"):
            return False
        last = self.history.pop_undo()
        if last is None:
            return False
        self._queue.submit(last.inverse(), record=False)
        return True

    def redo(self) -> bool:
        """Re-aplica el último movimiento deshecho (si existe redo y no hay animación).

        El movimiento se registra sin vaciar el resto de la pila de redo.
        """
        if self._refuse_if_busy("redo"):
            return False
        mv = self.history.pop_redo()
        if mv is None:
            return False
        self._queue.submit(mv, record=True, redo=True)
        return True

    def scramble(self, count: Optional[int] = None, seed: Optional[int] = None) -> List[Move]:
        """Mezcla el cubo con `count` movimientos aleatorios, todos registrados.

        Returns:
            Movimientos encolados (vacío si había animación en curso).
        """
        if self._refuse_if_busy("scramble"):
            return []
        if count is None:
            count = default_scramble_length(self.n, self.config.scramble_min, self.config.scramble_max)
        moves = generate_scramble(count, self.n, seed)
        _LOGGER.debug("Scramble de %d movimientos", len(moves))
        for m in moves:
            self._queue.submit(m, record=True)
        return moves

    def solve(self) -> bool:
        """Reproduce el inverso exacto del historial y luego lo vacía.

        No es un solver: solo vuelve al estado resuelto si todos los movimientos
        desde el último build/import quedaron registrados.
        """
        if self._refuse_if_busy("solve"):
            return False
        if not len(self.history):
            return False
        inverse_seq = [m.inverse() for m in reversed(self.history.moves)]
        _LOGGER.debug("Solve: %d movimientos inversos", len(inverse_seq))
        for m in inverse_seq:
            self._queue.submit(m, record=False)
        self._queue.call_when_done(self.history.clear)
        return True

    # --------------------------
    # Export / import
    # --------------------------
    def export_state(self) -> Dict[str, Any]:
        return export_state(self._state, self.history.moves)

    def export_json(self) -> str:
        return dumps_state(self._state, self.history.moves)

    def import_state(self, obj: Any) -> None:
        """Instala un estado exportado.

        Todo se valida antes de tocar nada: si falla, el cubo actual queda intacto.

        Raises:
            MalformedStateError: Si el registro es inválido.
            EngineBusyError: Si hay movimientos en curso.
        """
        self._ensure_idle("importar")
        imported = parse_state(obj)
        self._install(imported.state, imported.history)

    def import_json(self, text: str) -> None:
        self._ensure_idle("importar")
        imported = loads_state(text)
        self._install(imported.state, imported.history)

    def _install(self, state: CubeState, history: Sequence[Move]) -> None:
        self._state = state
        self.history.replace(history)
        _LOGGER.info("Estado importado: N=%d, %d movimientos", state.n, len(history))
        self._notify_state()

    # --------------------------
    # Ejecución (llamada por la cola)
    # --------------------------
    def _execute(self, task: QueuedMove, done: DoneCallback) -> None:
        move = task.move
        assert move is not None

        if move.is_noop:
            try:
                self._commit(task)
            finally:
                done()
            return

        plan = plan_move(
            self._state,
            move,
            self.config.animation_ms,
            self.config.spacing,
            self.config.sticker_offset,
        )

        def finished() -> None:
            # La cola se libera aunque falle un callback
            try:
                self._commit(task)
            finally:
                done()

        self.animator.animate(plan, finished)

    def _commit(self, task: QueuedMove) -> None:
        move = task.move
        assert move is not None
        rotate_layer(self._state, move.face, move.layer, move.turns)
        if task.record:
            self.history.record(move, clear_redo=not task.redo)
        _LOGGER.debug("Movimiento aplicado: %s (record=%s)", move, task.record)

        for cb in list(self._movement_callbacks):
            cb(move)
        self._notify_state()

    # --------------------------
    # Helpers
    # --------------------------
    def _refuse_if_busy(self, op: str) -> bool:
        if self._queue.busy:
            _LOGGER.debug("%s ignorado: hay movimientos en curso", op)
            return True
        return False

    def _ensure_idle(self, op: str) -> None:
        if self._queue.busy:
            raise EngineBusyError(f"No se puede {op} con movimientos en curso")
