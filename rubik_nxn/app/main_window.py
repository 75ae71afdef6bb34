from __future__ import annotations

import logging
from typing import Callable, List, Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QCloseEvent, QKeyEvent
from PySide6.QtWidgets import (
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QMainWindow,
    QMessageBox,
    QPlainTextEdit,
    QPushButton,
    QSlider,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from rubik_nxn.config import DEFAULT_CONFIG, SimConfig
from rubik_nxn.core.errors import CubeError, EngineBusyError
from rubik_nxn.core.grid import MAX_SIZE, MIN_SIZE, Face
from rubik_nxn.logic.moves import format_move
from rubik_nxn.logic.scramble import default_scramble_length
from rubik_nxn.logic.session import CubeSession
from rubik_nxn.render.cube_gl_widget import CubeGLWidget

_LOGGER = logging.getLogger(__name__)

BUTTON_FACES: List[Face] = ["U", "R", "F", "D", "L", "B"]
KEY_FACES = {
    Qt.Key_U: "U",
    Qt.Key_D: "D",
    Qt.Key_L: "L",
    Qt.Key_R: "R",
    Qt.Key_F: "F",
    Qt.Key_B: "B",
}


class MainWindow(QMainWindow):
    """Ventana principal de la aplicación (UI) para el simulador NxNxN.

    Esta clase coordina:
    - La sesión del cubo (`CubeSession`: estado, cola e historial)
    - La visualización y animación 3D (`CubeGLWidget`)
    - Controles: tamaño, movimientos, undo/redo, scramble, solve, export/import
    """

    def __init__(self, config: SimConfig = DEFAULT_CONFIG) -> None:
        """Inicializa la ventana principal, crea la UI y conecta señales."""
        super().__init__()
        self.setWindowTitle("Rubik NxNxN - PySide6")

        # --- Sesión + render ---
        self.session: CubeSession = CubeSession(config=config)
        self.gl_widget: CubeGLWidget = CubeGLWidget(self.session, self)

        # --- UI ---
        root = QWidget()
        root_layout = QHBoxLayout(root)
        root_layout.addWidget(self.gl_widget, 1)

        panel = QWidget()
        panel_layout = QVBoxLayout(panel)
        panel.setFixedWidth(340)

        self.lbl_state = QLabel("")
        panel_layout.addWidget(self.lbl_state)

        # Tamaño
        row_size = QHBoxLayout()
        self.spin_size = QSpinBox()
        self.spin_size.setRange(MIN_SIZE, MAX_SIZE)
        self.spin_size.setValue(self.session.n)
        self.btn_build = QPushButton("Construir")
        row_size.addWidget(QLabel("N"), 0)
        row_size.addWidget(self.spin_size, 1)
        row_size.addWidget(self.btn_build, 1)
        panel_layout.addLayout(row_size)

        # Botones principales
        row_main = QHBoxLayout()
        self.btn_reset = QPushButton("Reset")
        self.btn_undo = QPushButton("Undo")
        self.btn_redo = QPushButton("Redo")
        row_main.addWidget(self.btn_reset)
        row_main.addWidget(self.btn_undo)
        row_main.addWidget(self.btn_redo)
        panel_layout.addLayout(row_main)

        # Movimientos (capa -1 = exterior de la cara)
        row_layer = QHBoxLayout()
        self.spin_layer = QSpinBox()
        self.spin_layer.setRange(-1, self.session.n - 1)
        self.spin_layer.setSpecialValueText("exterior")
        self.spin_layer.setValue(-1)
        row_layer.addWidget(QLabel("Capa"), 0)
        row_layer.addWidget(self.spin_layer, 1)
        panel_layout.addLayout(row_layer)

        grid_moves = QGridLayout()
        self.move_buttons: List[QPushButton] = []
        for row, face in enumerate(BUTTON_FACES):
            for col, (suffix, turns) in enumerate((("", 1), ("'", -1), ("2", 2))):
                btn = QPushButton(face + suffix)
                btn.clicked.connect(self._make_move_handler(face, turns))
                grid_moves.addWidget(btn, row // 2, (row % 2) * 3 + col)
                self.move_buttons.append(btn)
        panel_layout.addLayout(grid_moves)

        # Scramble
        panel_layout.addWidget(QLabel("Scramble (mezclar)"))
        row_scr = QHBoxLayout()
        self.spin_scramble = QSpinBox()
        self.spin_scramble.setRange(1, config.scramble_max)
        self.spin_scramble.setValue(default_scramble_length(self.session.n, config.scramble_min, config.scramble_max))
        self.btn_scramble = QPushButton("Scramble")
        row_scr.addWidget(self.spin_scramble, 1)
        row_scr.addWidget(self.btn_scramble, 1)
        panel_layout.addLayout(row_scr)

        # Solve (inverso del historial)
        self.btn_solve = QPushButton("Solve (deshacer todo)")
        panel_layout.addWidget(self.btn_solve)

        # Aplicar secuencia
        panel_layout.addWidget(QLabel("Aplicar secuencia (ej: R U[1] R' U')"))
        self.txt_seq = QLineEdit()
        self.txt_seq.setPlaceholderText("Ej: R U R' U'")
        panel_layout.addWidget(self.txt_seq)
        self.btn_apply = QPushButton("Aplicar")
        panel_layout.addWidget(self.btn_apply)

        # Velocidad
        row_speed = QHBoxLayout()
        self.slider_speed = QSlider(Qt.Horizontal)
        self.slider_speed.setRange(0, 1000)
        self.slider_speed.setValue(config.animation_ms)
        self.lbl_speed = QLabel(f"{config.animation_ms} ms")
        row_speed.addWidget(QLabel("Animación"), 0)
        row_speed.addWidget(self.slider_speed, 1)
        row_speed.addWidget(self.lbl_speed, 0)
        panel_layout.addLayout(row_speed)

        # Historial (movimientos)
        panel_layout.addWidget(QLabel("Historial de movimientos"))
        self.list_history = QListWidget()
        panel_layout.addWidget(self.list_history, 1)

        # Export / import
        panel_layout.addWidget(QLabel("Estado (JSON)"))
        self.txt_state = QPlainTextEdit()
        self.txt_state.setMaximumHeight(90)
        panel_layout.addWidget(self.txt_state)
        row_io = QHBoxLayout()
        self.btn_export = QPushButton("Exportar")
        self.btn_import = QPushButton("Importar")
        row_io.addWidget(self.btn_export)
        row_io.addWidget(self.btn_import)
        panel_layout.addLayout(row_io)

        root_layout.addWidget(panel)
        self.setCentralWidget(root)

        # --- Conexiones ---
        self.btn_build.clicked.connect(self.on_build)
        self.btn_reset.clicked.connect(self.on_reset)
        self.btn_undo.clicked.connect(self.on_undo)
        self.btn_redo.clicked.connect(self.on_redo)
        self.btn_scramble.clicked.connect(self.on_scramble)
        self.btn_solve.clicked.connect(self.on_solve)
        self.btn_apply.clicked.connect(self.on_apply_sequence)
        self.btn_export.clicked.connect(self.on_export)
        self.btn_import.clicked.connect(self.on_import)
        self.slider_speed.valueChanged.connect(self.on_speed_changed)

        # Cambios de estado desde la sesión (commit de cada movimiento, build, import)
        self._unsubscribe = self.session.register_callback(self._refresh)

        # Atajos
        self.btn_undo.setShortcut("Ctrl+Z")
        self.btn_redo.setShortcut("Ctrl+Y")
        self.btn_reset.setShortcut("Ctrl+R")

        self._refresh()

    # -------------------
    # Helpers UI
    # -------------------
    def _refresh(self) -> None:
        """Sincroniza label de estado, historial y botones con la sesión."""
        self.lbl_state.setText(
            f"N={self.session.n} · "
            + ("Estado: resuelto ✅" if self.session.is_solved() else "Estado: mezclado 🔄")
        )

        n = self.session.n
        self.list_history.clear()
        for i, mv in enumerate(self.session.history.moves, start=1):
            self.list_history.addItem(f"{i}. {format_move(mv, n)}")
        self.list_history.scrollToBottom()

        self._set_controls_enabled(not self.session.busy)

    def _set_controls_enabled(self, enabled: bool) -> None:
        """Habilita o deshabilita los controles que no deben usarse durante una animación.

        Los botones de movimiento quedan activos: la cola serializa los giros.
        """
        self.btn_build.setEnabled(enabled)
        self.spin_size.setEnabled(enabled)
        self.btn_reset.setEnabled(enabled)
        self.btn_undo.setEnabled(enabled and len(self.session.history) > 0)
        self.btn_redo.setEnabled(enabled and len(self.session.history.redo_moves) > 0)
        self.btn_scramble.setEnabled(enabled)
        self.spin_scramble.setEnabled(enabled)
        self.btn_solve.setEnabled(enabled and len(self.session.history) > 0)
        self.btn_import.setEnabled(enabled)

    def _warn(self, title: str, exc: Exception) -> None:
        _LOGGER.warning("%s: %s", title, exc)
        QMessageBox.warning(self, title, str(exc))

    def _make_move_handler(self, face: Face, turns: int) -> Callable[[], None]:
        def handler() -> None:
            self.on_face_move(face, turns)

        return handler

    def _selected_layer(self) -> Optional[int]:
        value = self.spin_layer.value()
        return None if value < 0 else value

    # -------------------
    # Acciones
    # -------------------
    def on_build(self) -> None:
        """Construye un cubo nuevo con el N elegido (vacía el historial)."""
        n = self.session.config.with_size(self.spin_size.value()).size
        try:
            self.session.build(n)
        except (CubeError, EngineBusyError) as exc:
            self._warn("No se pudo construir", exc)
            return
        self._on_size_changed()

    def _on_size_changed(self) -> None:
        n = self.session.n
        self.spin_size.setValue(n)
        self.spin_layer.setRange(-1, n - 1)
        self.spin_layer.setValue(-1)
        cfg = self.session.config
        self.spin_scramble.setValue(default_scramble_length(n, cfg.scramble_min, cfg.scramble_max))

    def on_reset(self) -> None:
        """Vuelve al cubo resuelto del mismo tamaño."""
        try:
            self.session.reset()
        except EngineBusyError as exc:
            self._warn("No se pudo resetear", exc)

    def on_face_move(self, face: Face, turns: int) -> None:
        try:
            self.session.move(face, turns, self._selected_layer())
        except CubeError as exc:
            self._warn("Movimiento inválido", exc)

    def on_undo(self) -> None:
        """Revierte el último movimiento (si existe historial y no hay animación)."""
        self.session.undo()

    def on_redo(self) -> None:
        """Re-aplica el último movimiento deshecho (si existe redo y no hay animación)."""
        self.session.redo()

    def on_scramble(self) -> None:
        """Mezcla el cubo aplicando una secuencia aleatoria de N movimientos."""
        self.session.scramble(int(self.spin_scramble.value()))
        self._refresh()

    def on_solve(self) -> None:
        """Reproduce el inverso del historial hasta volver al estado inicial."""
        self.session.solve()
        self._refresh()

    def on_apply_sequence(self) -> None:
        """Aplica una secuencia ingresada por el usuario (ej: 'R U R' U'')."""
        seq = self.txt_seq.text().strip()
        if not seq:
            return
        try:
            self.session.apply_sequence(seq)
        except ValueError as exc:
            self._warn("Secuencia inválida", exc)
            return
        self._refresh()

    def on_speed_changed(self, value: int) -> None:
        self.session.config = self.session.config.with_animation_ms(value)
        self.lbl_speed.setText(f"{value} ms")

    def on_export(self) -> None:
        self.txt_state.setPlainText(self.session.export_json())

    def on_import(self) -> None:
        """Importa el estado pegado en el cuadro de texto; si falla, el cubo no cambia."""
        try:
            self.session.import_json(self.txt_state.toPlainText())
        except (CubeError, EngineBusyError) as exc:
            self._warn("No se pudo importar", exc)
            return
        self._on_size_changed()

    # -------------------
    # Teclado
    # -------------------
    def keyPressEvent(self, event: QKeyEvent) -> None:
        """U/D/L/R/F/B giran la capa exterior; con Shift, en sentido inverso."""
        if self.txt_seq.hasFocus() or self.txt_state.hasFocus():
            super().keyPressEvent(event)
            return

        face = KEY_FACES.get(event.key())
        if face is not None and not (event.modifiers() & Qt.ControlModifier):
            turns = -1 if event.modifiers() & Qt.ShiftModifier else 1
            self.on_face_move(face, turns)  # type: ignore[arg-type]
            event.accept()
            return

        super().keyPressEvent(event)

    def closeEvent(self, event: QCloseEvent) -> None:
        """Evento de cierre de ventana: se desuscribe de la sesión."""
        self._unsubscribe()
        self.gl_widget.shutdown()
        event.accept()
