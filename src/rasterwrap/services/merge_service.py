# src/rasterwrap/services/merge_service.py
from __future__ import annotations

"""
Merge de tiles co-registrados en un mosaico único.

Reglas:
  - Todos los tiles comparten escala (tolerancia épsilon), width, height y
    nº de bandas; cualquier diferencia aborta con ShapeMismatchError.
  - Se acotan los ORÍGENES de los tiles (no sus huellas completas); como
    todos tienen el mismo tamaño, origen extremo + un tile acota el mosaico.
  - Los sesgos +0.5 (tamaño) y +0.1 (offsets) se conservan literalmente para
    reproducir el mismo layout que las herramientas existentes.
  - Donde dos tiles se solapan gana el último (sin blending).
"""

import logging
import math
from dataclasses import dataclass
from typing import Sequence, Tuple

from ..contracts.errors import OutOfRangeError, PreconditionError, ShapeMismatchError
from ..contracts.geo import Point, same
from ..contracts.raster import RasterSet, band_metadata_copy

logger = logging.getLogger(__name__)

SIZE_BIAS = 0.5
OFFSET_BIAS = 0.1


@dataclass(frozen=True)
class TilePlacement:
    index: int
    xoff: int
    yoff: int


@dataclass(frozen=True)
class MosaicLayout:
    upper_left: Point
    lower_right: Point
    scale_x: float
    scale_y: float
    width: int
    height: int
    band_count: int
    placements: Tuple[TilePlacement, ...]


# ----------------------
# Utilidades internas
# ----------------------

def _check_compatible(files: Sequence[RasterSet]) -> None:
    ref = files[0]
    if ref.scale_x == 0.0 or ref.scale_y == 0.0:
        raise PreconditionError(f"escala nula en el tile 0: ({ref.scale_x}, {ref.scale_y})")
    for i, f in enumerate(files):
        if (math.copysign(1.0, f.scale_x) != math.copysign(1.0, ref.scale_x)
                or math.copysign(1.0, f.scale_y) != math.copysign(1.0, ref.scale_y)):
            raise ShapeMismatchError(f"tile {i}: signo de escala distinto del tile 0")
        if not (same(ref.scale_x, f.scale_x) and same(ref.scale_y, f.scale_y)
                and ref.width == f.width and ref.height == f.height
                and ref.band_count == f.band_count):
            raise ShapeMismatchError(
                f"tile {i}: {f.band_count}x{f.width}x{f.height} @ ({f.scale_x}, {f.scale_y}) "
                f"no coincide con {ref.band_count}x{ref.width}x{ref.height} @ ({ref.scale_x}, {ref.scale_y})"
            )
        f.check()


def _axis_span(origins: Sequence[float], scale: float, size: int) -> Tuple[float, float]:
    # Norte-arriba (dx>0, dy<0): x arranca en el mínimo, y en el máximo.
    lo, hi = min(origins), max(origins)
    if scale > 0:
        return lo, hi + scale * size
    return hi, lo + scale * size


def _offset(origin: float, start: float, scale: float) -> int:
    return int(math.floor((origin - start) / scale + OFFSET_BIAS))


# ----------------------
# API pública
# ----------------------

def mosaic_layout(files: Sequence[RasterSet]) -> MosaicLayout:
    """Calcula esquinas, tamaño del mosaico y offset de cada tile (sin copiar píxeles)."""
    if not files:
        raise PreconditionError("merge requiere al menos un raster")
    _check_compatible(files)
    ref = files[0]
    sx_scale, sy_scale = ref.scale_x, ref.scale_y

    ulx, lrx = _axis_span([f.utm_pose_x for f in files], sx_scale, ref.width)
    uly, lry = _axis_span([f.utm_pose_y for f in files], sy_scale, ref.height)
    sx = int(math.floor((lrx - ulx) / sx_scale + SIZE_BIAS))
    sy = int(math.floor((lry - uly) / sy_scale + SIZE_BIAS))

    placements = []
    for i, f in enumerate(files):
        xoff = _offset(f.utm_pose_x, ulx, sx_scale)
        yoff = _offset(f.utm_pose_y, uly, sy_scale)
        if xoff < 0 or yoff < 0 or xoff + f.width > sx or yoff + f.height > sy:
            raise OutOfRangeError(
                f"tile {i} en offset ({xoff}, {yoff}) de tamaño {f.width}x{f.height} "
                f"cae fuera del mosaico {sx}x{sy}"
            )
        placements.append(TilePlacement(i, xoff, yoff))

    return MosaicLayout(
        upper_left=Point(ulx, uly),
        lower_right=Point(lrx, lry),
        scale_x=sx_scale,
        scale_y=sy_scale,
        width=sx,
        height=sy,
        band_count=ref.band_count,
        placements=tuple(placements),
    )


def merge(files: Sequence[RasterSet], no_data: float = 0.0) -> RasterSet:
    """Une `files` en un RasterSet nuevo; todo-o-nada."""
    layout = mosaic_layout(files)
    ref = files[0]
    logger.debug(
        "merge: %d tiles -> %dx%d (ul=%s, lr=%s)",
        len(files), layout.width, layout.height, layout.upper_left, layout.lower_right,
    )

    result = RasterSet()
    result.copy_meta_only(ref)
    result.set_transform(layout.upper_left.x, layout.upper_left.y, layout.scale_x, layout.scale_y)
    result.resize(layout.band_count, layout.width, layout.height, no_data)
    result.band_metadata = band_metadata_copy(ref.band_metadata)

    w, h = ref.width, ref.height
    for p in layout.placements:
        tile = files[p.index]
        for b in range(layout.band_count):
            # fila r del tile -> offset xoff + (yoff + r) * sx del mosaico
            dst = result.band_view(b)
            dst[p.yoff:p.yoff + h, p.xoff:p.xoff + w] = tile.band_view(b)
    return result


__all__ = ["merge", "mosaic_layout", "MosaicLayout", "TilePlacement", "SIZE_BIAS", "OFFSET_BIAS"]
