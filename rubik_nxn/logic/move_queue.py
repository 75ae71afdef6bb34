from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from itertools import count
from typing import Callable, Deque, List, Literal, Optional

from rubik_nxn.logic.moves import Move

_LOGGER = logging.getLogger(__name__)

Status = Literal["queued", "animating", "committed"]
DoneCallback = Callable[[], None]


@dataclass(eq=False)
class QueuedMove:
    """Tarea de la cola: un movimiento (o una barrera si `move` es None)."""

    move: Optional[Move]
    record: bool = True
    redo: bool = False
    on_committed: Optional[Callable[["QueuedMove"], None]] = None
    status: Status = "queued"
    seq: int = field(default=0)


ExecuteCallback = Callable[[QueuedMove, DoneCallback], None]


class MoveQueue:
    """Cola FIFO de movimientos con un único consumidor.

    `submit` encola; el bucle `_pump` toma la siguiente tarea solo cuando no hay
    otra en estado "animating" y se la entrega a `execute`, que debe invocar el
    callback `done` cuando la animación terminó y el estado quedó confirmado.
    `done` puede llamarse en el acto (animador inmediato) o más tarde (timer de Qt).
    """

    def __init__(
        self,
        execute: ExecuteCallback,
        on_idle: Optional[Callable[[], None]] = None,
    ) -> None:
        """Crea la cola.

        Args:
            execute: Ejecuta una tarea (rotación + animación + commit) y llama `done`.
            on_idle: Callback opcional cuando la cola se vacía tras procesar trabajo.
        """
        self._execute = execute
        self._on_idle = on_idle
        self._pending: Deque[QueuedMove] = deque()
        self._current: Optional[QueuedMove] = None
        self._pumping: bool = False
        self._worked: bool = False
        self._seq = count(1)

    # --------------------------
    # Estado
    # --------------------------
    @property
    def busy(self) -> bool:
        """True si hay un movimiento animándose o tareas pendientes."""
        return self._current is not None or bool(self._pending)

    @property
    def current(self) -> Optional[QueuedMove]:
        return self._current

    @property
    def pending(self) -> List[QueuedMove]:
        return list(self._pending)

    # --------------------------
    # API
    # --------------------------
    def submit(
        self,
        move: Move,
        record: bool = True,
        redo: bool = False,
        on_committed: Optional[Callable[[QueuedMove], None]] = None,
    ) -> QueuedMove:
        """Encola un movimiento y arranca el consumidor si está libre."""
        task = QueuedMove(move, record, redo, on_committed, seq=next(self._seq))
        self._pending.append(task)
        _LOGGER.debug("Encolado #%d %s (record=%s)", task.seq, move, record)
        self._pump()
        return task

    def call_when_done(self, callback: Callable[[], None]) -> QueuedMove:
        """Encola una barrera: `callback` corre cuando todo lo anterior se confirmó."""
        task = QueuedMove(None, record=False, on_committed=lambda _t: callback(), seq=next(self._seq))
        self._pending.append(task)
        self._pump()
        return task

    def clear_pending(self) -> int:
        """Descarta las tareas aún no iniciadas; la actual termina igual."""
        dropped = len(self._pending)
        self._pending.clear()
        return dropped

    # --------------------------
    # Consumidor
    # --------------------------
    def _pump(self) -> None:
        if self._pumping:
            return
        self._pumping = True
        try:
            while self._current is None and self._pending:
                task = self._pending.popleft()
                self._worked = True

                if task.move is None:
                    task.status = "committed"
                    if task.on_committed is not None:
                        task.on_committed(task)
                    continue

                task.status = "animating"
                self._current = task
                try:
                    self._execute(task, lambda t=task: self._finish(t))
                except Exception:
                    if self._current is task:
                        self._current = None
                    raise
        finally:
            self._pumping = False

        if not self.busy and self._worked:
            self._worked = False
            if self._on_idle is not None:
                self._on_idle()

    def _finish(self, task: QueuedMove) -> None:
        if task is not self._current:
            raise RuntimeError(f"Se confirmó una tarea que no estaba animando: #{task.seq}")
        task.status = "committed"
        self._current = None
        _LOGGER.debug("Confirmado #%d %s", task.seq, task.move)
        if task.on_committed is not None:
            task.on_committed(task)
        self._pump()
