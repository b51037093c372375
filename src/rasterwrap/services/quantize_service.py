# src/rasterwrap/services/quantize_service.py
from __future__ import annotations

"""
Cuantización float -> byte y normalización [0,1] de una banda.

  • raster_to_bytes(): reescala lineal min -> 0, max -> 255 (floor), para
    previews 8 bits. Conserva min/max originales como procedencia
    (INITIAL_MIN / INITIAL_MAX) para invertir aproximadamente el mapeo.
  • normalize(): reescala en sitio a [0,1].

Caso degenerado (max == min, banda constante): no es error. La cuantización
devuelve ceros y la normalización no toca la banda.
"""

from dataclasses import dataclass
from typing import Dict, Tuple

import numpy as np

from ..contracts.raster import format_decimal

INITIAL_MIN = "INITIAL_MIN"
INITIAL_MAX = "INITIAL_MAX"


@dataclass(frozen=True)
class QuantizedBand:
    data: np.ndarray  # uint8, mismo largo que la banda de entrada
    initial_min: float
    initial_max: float

    def provenance(self) -> Dict[str, str]:
        """Metadata de banda que acompaña al byte exportado."""
        return {INITIAL_MIN: format_decimal(self.initial_min), INITIAL_MAX: format_decimal(self.initial_max)}


def _minmax(band: np.ndarray) -> Tuple[float, float]:
    return float(np.min(band)), float(np.max(band))


def raster_to_bytes(band: np.ndarray) -> QuantizedBand:
    """min(band) -> 0, max(band) -> 255; entrada finita y sin NaN."""
    arr = np.asarray(band)
    if arr.size == 0:
        return QuantizedBand(np.zeros(0, dtype=np.uint8), 0.0, 0.0)
    lo, hi = _minmax(arr)
    diff = hi - lo
    if diff == 0:
        return QuantizedBand(np.zeros(arr.shape, dtype=np.uint8), lo, hi)
    coef = 255.0 / diff
    scaled = np.floor(coef * (arr.astype(np.float64) - lo))
    return QuantizedBand(np.clip(scaled, 0, 255).astype(np.uint8), lo, hi)


def normalize(band: np.ndarray) -> np.ndarray:
    """Normaliza en sitio a [0,1] y devuelve el mismo buffer."""
    if band.size == 0:
        return band
    lo, hi = _minmax(band)
    diff = hi - lo
    if diff == 0:
        return band
    band -= lo
    band /= diff
    return band


__all__ = ["QuantizedBand", "raster_to_bytes", "normalize", "INITIAL_MIN", "INITIAL_MAX"]
