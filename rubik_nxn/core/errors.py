from __future__ import annotations


class CubeError(ValueError):
    """Error base de validación del motor del cubo.

    Todas las subclases representan fallas locales de validación: se lanzan antes
    de mutar cualquier estado y el llamador puede reintentar con datos corregidos.
    """


class InvalidSizeError(CubeError):
    """El tamaño N está fuera del rango soportado."""


class OutOfBoundsError(CubeError):
    """Una posición o capa cae fuera de [0, N-1]."""


class MalformedStateError(CubeError):
    """Un estado importado no tiene los campos requeridos o no es coherente con N."""


class EngineBusyError(RuntimeError):
    """Se intentó reconstruir o importar mientras un movimiento está en curso."""
