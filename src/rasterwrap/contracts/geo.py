# src/rasterwrap/contracts/geo.py

from __future__ import annotations
import math
import sys
from dataclasses import dataclass
from typing import NamedTuple, Tuple

from .errors import PreconditionError

GDALTransform = Tuple[float, float, float, float, float, float]

class Point(NamedTuple):
    x: float; y: float

class Bounds(NamedTuple):
    minx: float; miny: float; maxx: float; maxy: float

# ---------- Proyección (puro dominio, sin GDAL) ----------
_UTM_NORTH_BASE = 32600  # WGS84 / UTM zona N
_UTM_SOUTH_BASE = 32700  # WGS84 / UTM zona S

@dataclass(frozen=True)
class UTMRef:
    """Identidad de proyección WGS84/UTM. zone == 0 -> sin proyección."""
    zone: int = 0
    north: bool = True

    @property
    def is_set(self) -> bool:
        return self.zone != 0

    def to_epsg(self) -> int:
        """EPSG de WGS84/UTM (326zz norte, 327zz sur). No valida el rango de zona."""
        if not self.is_set:
            raise ValueError("UTMRef vacío: zona 0 no tiene EPSG.")
        base = _UTM_NORTH_BASE if self.north else _UTM_SOUTH_BASE
        return base + int(self.zone)

    @staticmethod
    def from_epsg(code: int | None) -> "UTMRef":
        """Inversa de to_epsg(); cualquier código que no sea WGS84/UTM -> UTMRef()."""
        if code is None:
            return UTMRef()
        code = int(code)
        if _UTM_NORTH_BASE < code <= _UTM_NORTH_BASE + 60:
            return UTMRef(code - _UTM_NORTH_BASE, True)
        if _UTM_SOUTH_BASE < code <= _UTM_SOUTH_BASE + 60:
            return UTMRef(code - _UTM_SOUTH_BASE, False)
        return UTMRef()

# ---------- GeoTransform (afín a GDAL pero sin dependencia) ----------
@dataclass(frozen=True)
class GeoTransform:
    """
    Coeficientes (x0, dx, rx, y0, ry, dy) en el orden de GDAL:
        X = x0 + col*dx + row*rx
        Y = y0 + col*ry + row*dy
    Ninguna operación de rasterwrap pone rx/ry distintos de 0 ("north up").
    """
    x0: float = 0.0
    dx: float = 1.0
    rx: float = 0.0
    y0: float = 0.0
    ry: float = 0.0
    dy: float = 1.0

    @staticmethod
    def from_origin(x0: float, y0: float, dx: float = 1.0, dy: float = 1.0) -> "GeoTransform":
        return GeoTransform(float(x0), float(dx), 0.0, float(y0), 0.0, float(dy))

    @staticmethod
    def from_gdal(gt: GDALTransform) -> "GeoTransform":
        x0, dx, rx, y0, ry, dy = (float(v) for v in gt)
        return GeoTransform(x0, dx, rx, y0, ry, dy)

    def as_gdal(self) -> GDALTransform:
        return (self.x0, self.dx, self.rx, self.y0, self.ry, self.dy)

    @property
    def is_north_up(self) -> bool:
        return self.rx == 0.0 and self.ry == 0.0

    def require_invertible(self) -> None:
        if self.dx == 0.0 or self.dy == 0.0:
            raise PreconditionError(f"GeoTransform no invertible (dx={self.dx}, dy={self.dy}).")

    def pixel_to_world(self, col: float, row: float) -> Point:
        return pixel_to_world(col, row, self.as_gdal())

    def world_to_pixel(self, x: float, y: float) -> Point:
        self.require_invertible()
        return Point((x - self.x0) / self.dx, (y - self.y0) / self.dy)

    def bounds(self, width: int, height: int) -> Bounds:
        return geotransform_bounds(self.as_gdal(), width, height)

def geotransform_bounds(gt: GDALTransform, width: int, height: int) -> Bounds:
    x0, px, rx, y0, ry, py = gt
    x_w = x0 + width * px + height * rx
    y_w = y0 + width * ry + height * py
    minx, maxx = (x0, x_w) if x0 <= x_w else (x_w, x0)
    miny, maxy = (y_w, y0) if y_w <= y0 else (y0, y_w)
    return Bounds(minx, miny, maxx, maxy)

def pixel_to_world(col: float, row: float, gt: GDALTransform) -> Point:
    x0, px, rx, y0, ry, py = gt
    x = x0 + col * px + row * rx
    y = y0 + col * ry + row * py
    return Point(x, y)

def round_half_away(v: float) -> int:
    """Redondeo "escolar" (0.5 -> 1, -0.5 -> -1); round() de Python es bancario."""
    return int(math.copysign(math.floor(abs(v) + 0.5), v))

def same(a: float, b: float) -> bool:
    """Igualdad con tolerancia de épsilon de máquina (coeficientes que vienen de disco)."""
    return abs(a - b) < sys.float_info.epsilon

def pretty_transform(gt: GeoTransform, ndigits: int = 3) -> str:
    return (f"GeoTransform(x0={gt.x0:.{ndigits}f}, dx={gt.dx:.{ndigits}f}, "
            f"y0={gt.y0:.{ndigits}f}, dy={gt.dy:.{ndigits}f})")

__all__ = [
    "GDALTransform","Point","Bounds","UTMRef","GeoTransform","geotransform_bounds",
    "pixel_to_world","round_half_away","same","pretty_transform",
]
