from __future__ import annotations

from dataclasses import dataclass, replace

from rubik_nxn.core.grid import DEFAULT_SIZE, clamp_size


@dataclass(frozen=True)
class SimConfig:
    """Parámetros del simulador.

    Attributes:
        size: Tamaño inicial del cubo (N).
        animation_ms: Duración de cada movimiento animado.
        spacing: Distancia entre centros de cubies (deja una pequeña separación).
        sticker_offset: Distancia del centro del cubie al sticker.
        sticker_scale: Tamaño del sticker relativo a la cara del cubie.
        scramble_min: Largo mínimo del scramble por defecto.
        scramble_max: Largo máximo del scramble por defecto.
    """

    size: int = DEFAULT_SIZE
    animation_ms: int = 250
    spacing: float = 1.02
    sticker_offset: float = 0.51
    sticker_scale: float = 0.9
    scramble_min: int = 10
    scramble_max: int = 200

    def with_size(self, value: object) -> "SimConfig":
        """Copia con el tamaño llevado al rango soportado."""
        return replace(self, size=clamp_size(value, self.size))

    def with_animation_ms(self, ms: int) -> "SimConfig":
        return replace(self, animation_ms=max(0, int(ms)))


DEFAULT_CONFIG = SimConfig()
