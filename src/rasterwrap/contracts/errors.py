# src/rasterwrap/contracts/errors.py
from __future__ import annotations

"""
Taxonomía de errores del dominio raster.

Todas son fallas locales y síncronas: abortan la operación en curso, sin
reintentos ni resultados parciales. Heredan además de la excepción estándar
más cercana para que el código cliente pueda capturar ValueError/KeyError/...
"""


class RasterError(Exception):
    """Raíz de los errores de rasterwrap."""


class ShapeMismatchError(RasterError, ValueError):
    """Entradas de merge (o un RasterSet) con tamaño/escala/nº de bandas incoherente."""


class BandNotFoundError(RasterError, KeyError):
    """Ninguna banda lleva el nombre buscado."""

    def __str__(self) -> str:
        # KeyError envuelve el mensaje en comillas
        return str(self.args[0]) if self.args else ""


class DuplicateBandNameError(BandNotFoundError):
    """Varias bandas llevan el mismo nombre: la búsqueda es ambigua."""


class OutOfRangeError(RasterError, IndexError):
    """Índice de píxel (o escritura de tile) fuera de los límites del raster."""


class PreconditionError(RasterError, ValueError):
    """Precondición violada: merge vacío, escala nula, tamaños negativos..."""


class RasterIOError(RasterError, RuntimeError):
    """Falla opaca de RasterStore/FormatResolver (apertura, driver, escritura)."""


__all__ = [
    "RasterError", "ShapeMismatchError", "BandNotFoundError", "DuplicateBandNameError",
    "OutOfRangeError", "PreconditionError", "RasterIOError",
]
