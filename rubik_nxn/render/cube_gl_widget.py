from __future__ import annotations

import math
from typing import Callable, Dict, List, Optional

from PySide6.QtCore import QElapsedTimer, QPoint, QTimer, Qt
from PySide6.QtGui import QMouseEvent, QWheelEvent
from PySide6.QtOpenGLWidgets import QOpenGLWidget

from OpenGL.GL import (
    glBegin,
    glClear,
    glClearColor,
    glColor3f,
    glDisable,
    glEnable,
    glEnd,
    glFlush,
    glLoadIdentity,
    glMatrixMode,
    glReadPixels,
    glRotatef,
    glTranslatef,
    glVertex3f,
    glViewport,
    GL_BLEND,
    GL_COLOR_BUFFER_BIT,
    GL_DEPTH_BUFFER_BIT,
    GL_DEPTH_TEST,
    GL_DITHER,
    GL_MODELVIEW,
    GL_PROJECTION,
    GL_QUADS,
    GL_RGB,
    GL_UNSIGNED_BYTE,
)
from OpenGL.GLU import gluPerspective

from rubik_nxn.core.grid import AXIS_INDEX, COLORS_SOLVED, Axis
from rubik_nxn.logic.moves import Move
from rubik_nxn.logic.session import CubeSession
from rubik_nxn.render.bridge import (
    AnimationPlan,
    FaceletKey,
    FaceletView,
    Vec3f,
    ease_in_out_cubic,
    rotate_point,
)

# Cara que representa cada eje con sentido positivo (FACE_SIGN = +1)
AXIS_FACE = {"x": "R", "y": "U", "z": "F"}


class CubeGLWidget(QOpenGLWidget):
    """Widget OpenGL para renderizar e interactuar con un cubo NxNxN.

    Características:
    - Render OpenGL clásico (sin shaders), un quad por sticker.
    - Picking por color (funciona con HiDPI).
    - Highlight del sticker seleccionado.
    - Drag “camera-aware” que decide eje, capa y sentido del movimiento.
    - Shift+click gira la capa del sticker elegido un cuarto de vuelta.
    - Es el animador de la sesión: interpola a partir del `AnimationPlan` con
      un QTimer y avisa al terminar para que la sesión confirme el giro.
    """

    def __init__(self, session: CubeSession, parent=None) -> None:
        """Crea el widget y lo registra como animador de `session`.

        Args:
            session: Sesión del cubo (estado + cola de movimientos).
            parent: Widget padre (Qt), opcional.
        """
        super().__init__(parent)
        self.session: CubeSession = session
        self.session.animator = self

        # Cámara / orbit
        self.yaw: float = 35.0
        self.pitch: float = -20.0
        self.distance: float = self._default_distance(session.n)

        self._last_mouse_pos: QPoint = QPoint()
        self._orbiting: bool = False

        # Stickers (foto completa del estado confirmado)
        self.views: List[FaceletView] = session.facelet_views()
        self._n: int = session.n

        # Selección
        self.selected: Optional[FaceletKey] = None

        # Drag
        self._dragging_left: bool = False
        self._drag_start: QPoint = QPoint()
        self._drag_hit: Optional[FaceletView] = None
        self._drag_threshold: int = 14

        # Animación
        self._anim_plan: Optional[AnimationPlan] = None
        self._anim_keys: frozenset = frozenset()
        self._anim_angle: float = 0.0
        self._anim_done: Optional[Callable[[], None]] = None
        self._anim_clock: QElapsedTimer = QElapsedTimer()
        self._anim_timer: QTimer = QTimer(self)
        self._anim_timer.setInterval(16)  # ~60fps
        self._anim_timer.timeout.connect(self._on_anim_tick)

        self._unsubscribe = session.register_callback(self._on_state_changed)
        self.setFocusPolicy(Qt.ClickFocus)

    @staticmethod
    def _default_distance(n: int) -> float:
        return 3.0 + 2.4 * n

    @property
    def animating(self) -> bool:
        return self._anim_plan is not None

    def _on_state_changed(self) -> None:
        """La sesión confirmó un giro o reconstruyó el cubo: se rehace la vista."""
        self.views = self.session.facelet_views()
        if self.session.n != self._n:
            self._n = self.session.n
            self.distance = self._default_distance(self._n)
            self.selected = None
        self.update()

    # --------------------------
    # OpenGL lifecycle
    # --------------------------
    def initializeGL(self) -> None:
        """Inicializa parámetros OpenGL (clear color y depth test)."""
        glClearColor(0.10, 0.10, 0.12, 1.0)
        glEnable(GL_DEPTH_TEST)

    def resizeGL(self, w: int, h: int) -> None:
        """Ajusta viewport y proyección cuando cambia el tamaño del widget."""
        if h == 0:
            h = 1

        dpr = self.devicePixelRatioF()
        fb_w = int(w * dpr)
        fb_h = int(h * dpr)

        glViewport(0, 0, fb_w, fb_h)

        glMatrixMode(GL_PROJECTION)
        glLoadIdentity()
        aspect = fb_w / float(fb_h)
        gluPerspective(45.0, aspect, 0.1, 200.0)

        glMatrixMode(GL_MODELVIEW)
        glLoadIdentity()

    def paintGL(self) -> None:
        """Dibuja el frame actual del cubo (stickers + animación)."""
        glClear(GL_COLOR_BUFFER_BIT | GL_DEPTH_BUFFER_BIT)
        self._apply_camera()
        self._draw_stickers()

    def _apply_camera(self) -> None:
        """Aplica la transformación de cámara (orbit) al modelo."""
        glMatrixMode(GL_MODELVIEW)
        glLoadIdentity()
        glTranslatef(0.0, 0.0, -self.distance)
        glRotatef(self.pitch, 1.0, 0.0, 0.0)
        glRotatef(self.yaw, 0.0, 1.0, 0.0)

    # --------------------------
    # Animación (contrato de animador de la sesión)
    # --------------------------
    def animate(self, plan: AnimationPlan, on_finished: Callable[[], None]) -> None:
        """Comienza a animar `plan`; `on_finished` se llama una sola vez al terminar."""
        self._anim_plan = plan
        self._anim_keys = plan.keys
        self._anim_angle = 0.0
        self._anim_done = on_finished

        if plan.duration_ms <= 0 or not plan.affected:
            self._finish_move_animation()
            return

        self._anim_clock.start()
        self._anim_timer.start()

    def _on_anim_tick(self) -> None:
        """Tick del timer: avanza la animación hasta completar el ángulo objetivo."""
        plan = self._anim_plan
        if plan is None:
            self._anim_timer.stop()
            return

        t = self._anim_clock.elapsed() / float(plan.duration_ms)
        if t >= 1.0:
            self._finish_move_animation()
            return

        self._anim_angle = plan.angle * ease_in_out_cubic(t)
        self.update()

    def _finish_move_animation(self) -> None:
        """Finaliza la animación y devuelve el control a la sesión (que confirma el giro)."""
        self._anim_timer.stop()
        done = self._anim_done

        self._anim_plan = None
        self._anim_keys = frozenset()
        self._anim_angle = 0.0
        self._anim_done = None

        if done is not None:
            done()
        self.update()

    # --------------------------
    # Interacción
    # --------------------------
    def mousePressEvent(self, event: QMouseEvent) -> None:
        """Botón derecho orbita; izquierdo selecciona / arrastra; Shift+izquierdo gira la capa."""
        if event.button() == Qt.RightButton:
            self._orbiting = True
            self._last_mouse_pos = event.pos()
            event.accept()
            return

        if event.button() == Qt.LeftButton:
            hit = self.pick_sticker(event.pos().x(), event.pos().y())
            self.selected = hit.key if hit else None
            self._dragging_left = True
            self._drag_start = event.pos()
            self._drag_hit = hit

            if hit and (event.modifiers() & Qt.ShiftModifier):
                self._dragging_left = False
                self._drag_hit = None
                self._submit(lambda: self.session.move_from_selection(hit.position, hit.label, 1))
            elif hit:
                self._show_message(f"Seleccionado: {hit.label}{hit.index} en {hit.position}", 2000)
            else:
                self._show_message("Sin selección.", 2000)

            self.update()
            event.accept()
            return

        super().mousePressEvent(event)

    def mouseMoveEvent(self, event: QMouseEvent) -> None:
        """Orbit (derecho) o drag (izquierdo) para mover capas."""
        if self._orbiting:
            dx = event.position().x() - self._last_mouse_pos.x()
            dy = event.position().y() - self._last_mouse_pos.y()
            self._last_mouse_pos = event.pos()

            sens = 0.4
            self.yaw += dx * sens
            self.pitch += dy * sens
            self.pitch = max(-89.0, min(89.0, self.pitch))

            self.update()
            event.accept()
            return

        if self._dragging_left and (event.buttons() & Qt.LeftButton):
            if not self._drag_hit or self.animating:
                return

            dx = event.position().x() - self._drag_start.x()
            dy = event.position().y() - self._drag_start.y()

            if abs(dx) < self._drag_threshold and abs(dy) < self._drag_threshold:
                return

            move = self._decide_move_from_drag(self._drag_hit, dx, dy)
            if move is not None:
                self._submit(lambda: self.session.submit(move))

            self._dragging_left = False
            self._drag_hit = None
            return

        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event: QMouseEvent) -> None:
        """Finaliza orbit o drag al soltar botones."""
        if event.button() == Qt.RightButton and self._orbiting:
            self._orbiting = False
            event.accept()
            return

        if event.button() == Qt.LeftButton and self._dragging_left:
            self._dragging_left = False
            self._drag_hit = None
            event.accept()
            return

        super().mouseReleaseEvent(event)

    def wheelEvent(self, event: QWheelEvent) -> None:
        """Zoom in/out con la rueda del mouse."""
        delta = event.angleDelta().y() / 120.0
        self.distance -= delta * 0.3 * max(1, self._n // 3)
        self.distance = max(1.5 + self._n, min(8.0 * self._n + 10.0, self.distance))
        self.update()
        event.accept()

    def _submit(self, action: Callable[[], object]) -> None:
        try:
            action()
        except ValueError as exc:
            self._show_message(str(exc), 3000)

    def _show_message(self, msg: str, ms: int) -> None:
        w = self.window()
        if hasattr(w, "statusBar") and w.statusBar():
            w.statusBar().showMessage(msg, ms)

    # --------------------------
    # Picking (color picking)
    # --------------------------
    def pick_sticker(self, x: int, y: int) -> Optional[FaceletView]:
        """Detecta qué sticker se encuentra bajo el cursor usando color picking.

        Returns:
            La vista del sticker elegido, o None si no hay ninguno (o hay animación).
        """
        if self.animating:
            return None

        dpr = self.devicePixelRatioF()
        gl_x = int(x * dpr)
        gl_y = int((self.height() - y - 1) * dpr)

        self.makeCurrent()

        glDisable(GL_DITHER)
        glDisable(GL_BLEND)

        # pass picking
        glClearColor(0.0, 0.0, 0.0, 1.0)
        glClear(GL_COLOR_BUFFER_BIT | GL_DEPTH_BUFFER_BIT)

        self._apply_camera()
        mapping = self._draw_all_stickers_pick()

        glFlush()

        pixel = glReadPixels(gl_x, gl_y, 1, 1, GL_RGB, GL_UNSIGNED_BYTE)

        # restaurar clear color “normal”
        glClearColor(0.10, 0.10, 0.12, 1.0)
        self.doneCurrent()

        if pixel is None:
            return None

        if isinstance(pixel, (bytes, bytearray)):
            r, g, b = pixel[0], pixel[1], pixel[2]
        else:
            try:
                flat = pixel.reshape(-1) if hasattr(pixel, "reshape") else pixel
                r, g, b = int(flat[0]), int(flat[1]), int(flat[2])
            except (IndexError, TypeError, ValueError):
                return None

        pick_id = r + (g << 8) + (b << 16)
        return mapping.get(pick_id)

    def _encode_id_color(self, pick_id: int) -> Vec3f:
        """Codifica un ID entero a un color RGB (0..1) para picking."""
        r = (pick_id & 0xFF) / 255.0
        g = ((pick_id >> 8) & 0xFF) / 255.0
        b = ((pick_id >> 16) & 0xFF) / 255.0
        return (r, g, b)

    # --------------------------
    # Render helpers
    # --------------------------
    def _sticker_quad(self, view: FaceletView, scale: float, lift: float = 0.0) -> List[Vec3f]:
        """Los 4 vértices del quad de un sticker, perpendicular a su normal.

        Args:
            view: Sticker a dibujar.
            scale: Lado del quad relativo al cubie.
            lift: Desplazamiento extra sobre la normal (negativo = hacia adentro).
        """
        i = next(k for k in range(3) if view.normal[k] != 0)
        j, k = [a for a in range(3) if a != i]
        half = self.session.config.spacing * scale / 2.0

        base = [view.center[a] + view.normal[a] * lift for a in range(3)]
        quad: List[Vec3f] = []
        for sj, sk in ((-1, -1), (1, -1), (1, 1), (-1, 1)):
            v = list(base)
            v[j] += sj * half
            v[k] += sk * half
            quad.append((v[0], v[1], v[2]))

        if view.key in self._anim_keys and self._anim_plan is not None:
            quad = [self._rot_about_layer(v, self._anim_plan) for v in quad]
        return quad

    def _rot_about_layer(self, p: Vec3f, plan: AnimationPlan) -> Vec3f:
        lx, ly, lz = plan.layer_center
        rx, ry, rz = rotate_point((p[0] - lx, p[1] - ly, p[2] - lz), plan.axis, self._anim_angle)
        return (rx + lx, ry + ly, rz + lz)

    def _draw_stickers(self) -> None:
        """Dibuja todos los stickers con su base de “plástico” y el highlight."""
        scale = self.session.config.sticker_scale
        plastic = (0.05, 0.05, 0.06)

        glBegin(GL_QUADS)
        for view in self.views:
            if self.selected is not None and self.selected == view.key:
                glColor3f(0.10, 0.95, 0.85)  # calipso
                for v in self._sticker_quad(view, min(1.0, scale + 0.08), lift=0.004):
                    glVertex3f(*v)

            glColor3f(*plastic)
            for v in self._sticker_quad(view, 1.0, lift=-0.005):
                glVertex3f(*v)

            glColor3f(*self._color_rgb(COLORS_SOLVED[view.color]))
            for v in self._sticker_quad(view, scale, lift=0.008):
                glVertex3f(*v)
        glEnd()

    def _draw_all_stickers_pick(self) -> Dict[int, FaceletView]:
        """Dibuja todos los stickers con colores codificados y retorna el mapa ID->sticker."""
        mapping: Dict[int, FaceletView] = {}

        glBegin(GL_QUADS)
        for pick_id, view in enumerate(self.views, start=1):
            mapping[pick_id] = view
            glColor3f(*self._encode_id_color(pick_id))
            for v in self._sticker_quad(view, 1.0):  # área pick un poco más grande
                glVertex3f(*v)
        glEnd()
        return mapping

    # --------------------------
    # Drag => movimiento (camera-aware)
    # --------------------------
    def _decide_move_from_drag(self, view: FaceletView, dx: float, dy: float) -> Optional[Move]:
        """Decide un movimiento a partir de un drag sobre un sticker, considerando la cámara.

        Args:
            view: Sticker donde empezó el drag.
            dx: Delta X del drag en pantalla.
            dy: Delta Y del drag en pantalla.

        Returns:
            El movimiento (cara R/U/F del eje, capa del sticker, sentido del drag)
            o None si no se puede decidir.
        """

        def cross(a: Vec3f, b: Vec3f) -> Vec3f:
            return (
                a[1] * b[2] - a[2] * b[1],
                a[2] * b[0] - a[0] * b[2],
                a[0] * b[1] - a[1] * b[0],
            )

        def dot(a: Vec3f, b: Vec3f) -> float:
            return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]

        def sub(a: Vec3f, b: Vec3f) -> Vec3f:
            return (a[0] - b[0], a[1] - b[1], a[2] - b[2])

        def scale(v: Vec3f, s: float) -> Vec3f:
            return (v[0] * s, v[1] * s, v[2] * s)

        n: Vec3f = (float(view.normal[0]), float(view.normal[1]), float(view.normal[2]))
        p = view.center

        # drag en pantalla => mundo
        d_world: Vec3f = (dx, -dy, 0.0)

        # mundo -> cubo (inversa de la cámara)
        yaw = math.radians(self.yaw)
        pitch = math.radians(self.pitch)

        cx = math.cos(-pitch)
        sx = math.sin(-pitch)
        x0, y0, z0 = d_world
        d1: Vec3f = (x0, cx * y0 - sx * z0, sx * y0 + cx * z0)

        cy = math.cos(-yaw)
        sy = math.sin(-yaw)
        x1, y1, z1 = d1
        d_cube: Vec3f = (cy * x1 + sy * z1, y1, -sy * x1 + cy * z1)

        # proyectar al plano de la cara
        d_plane = sub(d_cube, scale(n, dot(d_cube, n)))
        if math.sqrt(dot(d_plane, d_plane)) < 1e-6:
            return None

        axis_v = cross(n, d_plane)
        ax = [abs(axis_v[0]), abs(axis_v[1]), abs(axis_v[2])]
        i = ax.index(max(ax))
        axis: Axis = "xyz"[i]  # type: ignore[assignment]
        axis_sign = 1 if axis_v[i] > 0 else -1

        axis_unit = [0.0, 0.0, 0.0]
        axis_unit[i] = float(axis_sign)
        v = cross((axis_unit[0], axis_unit[1], axis_unit[2]), p)
        rot_about_axis_unit = 1 if dot(v, d_plane) > 0 else -1
        rot_about_pos = rot_about_axis_unit * axis_sign

        layer = view.position[AXIS_INDEX[axis]]
        return Move(AXIS_FACE[axis], layer, rot_about_pos)  # type: ignore[arg-type]

    # --------------------------
    # Color map
    # --------------------------
    def _color_rgb(self, c: str) -> Vec3f:
        """Convierte el símbolo de color del modelo a RGB (gris si no existe)."""
        palette: Dict[str, Vec3f] = {
            "W": (1.0, 1.0, 1.0),
            "Y": (1.0, 1.0, 0.0),
            "O": (1.0, 0.5, 0.0),
            "R": (1.0, 0.0, 0.0),
            "G": (0.0, 0.85, 0.0),
            "B": (0.0, 0.35, 1.0),
        }
        return palette.get(c, (0.8, 0.8, 0.8))

    def shutdown(self) -> None:
        """Se desuscribe de la sesión (al cerrar la ventana)."""
        self._anim_timer.stop()
        self._unsubscribe()
