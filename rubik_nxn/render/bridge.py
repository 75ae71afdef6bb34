from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, List, Tuple

from rubik_nxn.core.cube_state import CubeState
from rubik_nxn.core.grid import (
    AXIS_INDEX,
    FACE_AXIS,
    FACE_NORMAL,
    FACE_SIGN,
    FACES,
    Axis,
    Face,
    Vec3i,
    validate_layer,
)
from rubik_nxn.logic.moves import Move

Vec3f = Tuple[float, float, float]
FaceletKey = Tuple[Face, int]  # (etiqueta, índice dentro de la etiqueta)


@dataclass(frozen=True)
class FaceletView:
    """Lo que el render ve de un sticker: identidad estable, color y geometría.

    Attributes:
        label: Cara hacia la que apunta el sticker ahora.
        index: Índice único dentro de `label` (orden x, y, z de la grilla).
        color: Cara de origen del sticker (define su color, nunca cambia).
        position: Posición del cubie en la grilla.
        center: Centro del sticker en coordenadas de mundo.
        normal: Normal hacia afuera.
    """

    label: Face
    index: int
    color: Face
    position: Vec3i
    center: Vec3f
    normal: Vec3i

    @property
    def key(self) -> FaceletKey:
        return (self.label, self.index)


@dataclass(frozen=True)
class AnimationPlan:
    """Contrato de animación de un movimiento.

    Contiene una foto de los stickers afectados tomada antes de rotar; el render
    interpola solo a partir de esta foto y nunca toca `CubeState`.
    """

    move: Move
    axis: Axis
    layer: int
    angle: float  # grados totales alrededor del eje positivo
    layer_center: Vec3f
    affected: Tuple[FaceletView, ...]
    duration_ms: int

    @property
    def keys(self) -> FrozenSet[FaceletKey]:
        return frozenset(v.key for v in self.affected)


def cubie_center(position: Vec3i, n: int, spacing: float) -> Vec3f:
    """Centro de un cubie en mundo, con el cubo centrado en el origen."""
    half = (n - 1) / 2.0
    x, y, z = position
    return ((x - half) * spacing, (y - half) * spacing, (z - half) * spacing)


def facelet_views(state: CubeState, spacing: float = 1.02, offset: float = 0.51) -> List[FaceletView]:
    """Reconstruye la vista completa de todos los stickers del cubo.

    Args:
        state: Estado lógico.
        spacing: Distancia entre centros de cubies.
        offset: Distancia del centro del cubie al sticker, sobre la normal.

    Returns:
        Lista con exactamente un `FaceletView` por sticker (6·N² en total).
    """
    counters: Dict[Face, int] = {f: 0 for f in FACES}
    out: List[FaceletView] = []
    for pos, label, color in state.facelets():
        cx, cy, cz = cubie_center(pos, state.n, spacing)
        nx, ny, nz = FACE_NORMAL[label]
        out.append(
            FaceletView(
                label=label,
                index=counters[label],
                color=color,
                position=pos,
                center=(cx + nx * offset, cy + ny * offset, cz + nz * offset),
                normal=(nx, ny, nz),
            )
        )
        counters[label] += 1
    return out


def move_angle(move: Move) -> float:
    """Ángulo total (grados) que la lógica rota la capa, alrededor del eje positivo."""
    return FACE_SIGN[move.face] * move.turns * 90.0


def plan_move(
    state: CubeState,
    move: Move,
    duration_ms: int = 250,
    spacing: float = 1.02,
    offset: float = 0.51,
) -> AnimationPlan:
    """Arma el plan de animación de `move` con la foto previa al giro.

    Raises:
        OutOfBoundsError: Si la capa no existe para este N.
    """
    validate_layer(move.layer, state.n)
    axis = FACE_AXIS[move.face]
    i = AXIS_INDEX[axis]

    affected: Tuple[FaceletView, ...] = ()
    if not move.is_noop:
        affected = tuple(
            v for v in facelet_views(state, spacing, offset) if v.position[i] == move.layer
        )

    center = [0.0, 0.0, 0.0]
    center[i] = (move.layer - (state.n - 1) / 2.0) * spacing

    return AnimationPlan(
        move=move,
        axis=axis,
        layer=move.layer,
        angle=move_angle(move),
        layer_center=(center[0], center[1], center[2]),
        affected=affected,
        duration_ms=duration_ms,
    )


def ease_in_out_cubic(t: float) -> float:
    if t < 0.5:
        return 4 * t * t * t
    return 1 - math.pow(-2 * t + 2, 3) / 2


def rotate_point(p: Vec3f, axis: Axis, angle_deg: float) -> Vec3f:
    """Rota un punto alrededor de un eje por un ángulo en grados.

    Args:
        p: Punto (x, y, z).
        axis: Eje de rotación ('x', 'y', 'z').
        angle_deg: Ángulo en grados.

    Returns:
        Punto rotado (x, y, z).
    """
    x, y, z = p
    a = math.radians(angle_deg)
    c = math.cos(a)
    s = math.sin(a)

    if axis == "x":
        return (x, y * c - z * s, y * s + z * c)
    if axis == "y":
        return (x * c + z * s, y, -x * s + z * c)
    if axis == "z":
        return (x * c - y * s, x * s + y * c, z)
    return p


def frame_transforms(plan: AnimationPlan, t: float) -> List[Tuple[FaceletView, Vec3f, Vec3f]]:
    """Transformaciones interpoladas de los stickers afectados en el instante `t`.

    Args:
        plan: Plan del movimiento en curso.
        t: Progreso lineal en [0, 1] (se aplica easing cúbico).

    Returns:
        Lista de (vista original, centro rotado, normal rotada).
    """
    t = max(0.0, min(1.0, t))
    angle = plan.angle * ease_in_out_cubic(t)
    lx, ly, lz = plan.layer_center

    out: List[Tuple[FaceletView, Vec3f, Vec3f]] = []
    for v in plan.affected:
        px, py, pz = v.center
        rx, ry, rz = rotate_point((px - lx, py - ly, pz - lz), plan.axis, angle)
        n = rotate_point((float(v.normal[0]), float(v.normal[1]), float(v.normal[2])), plan.axis, angle)
        out.append((v, (rx + lx, ry + ly, rz + lz), n))
    return out


class ImmediateAnimator:
    """Animador sin render: termina cada movimiento en el acto (tests y modo headless)."""

    def animate(self, plan: AnimationPlan, on_finished: Callable[[], None]) -> None:
        on_finished()
