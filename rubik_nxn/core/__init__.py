from rubik_nxn.core.cube_state import CubeState, Cubie
from rubik_nxn.core.errors import (
    CubeError,
    EngineBusyError,
    InvalidSizeError,
    MalformedStateError,
    OutOfBoundsError,
)
from rubik_nxn.core.rotation import canonical_turns, rotate_layer

__all__ = [
    "CubeState",
    "Cubie",
    "CubeError",
    "EngineBusyError",
    "InvalidSizeError",
    "MalformedStateError",
    "OutOfBoundsError",
    "canonical_turns",
    "rotate_layer",
]
