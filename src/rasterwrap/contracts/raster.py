# src/rasterwrap/contracts/raster.py
from __future__ import annotations

"""
RasterSet: raster multibanda georreferenciado, completo en memoria.

Una sola entidad plana que reúne lo que en GDAL sería dataset + bandas:
  • tamaño (width, height) y bandas float32 planas (row-major, origen arriba-izq.)
  • metadata por banda (nombre bajo NAME) y metadata del dataset
  • GeoTransform norte-arriba y proyección WGS84/UTM (zona 0 = sin proyección)
  • origen "custom": marco secundario desplazado respecto del proyectado,
    espejado en la metadata del dataset para que sobreviva a un save/load.

No hay sincronización interna: una instancia debe ser tocada por un solo
hilo a la vez.
"""

from typing import Dict, List, Mapping, Optional

import numpy as np

from .errors import (
    BandNotFoundError, DuplicateBandNameError, OutOfRangeError, PreconditionError, ShapeMismatchError,
)
from .geo import GeoTransform, Point, UTMRef, round_half_away

BAND_DTYPE = np.float32

# Claves persistidas por rasterwrap
NAME_KEY = "NAME"
CUSTOM_X_ORIGIN = "CUSTOM_X_ORIGIN"
CUSTOM_Y_ORIGIN = "CUSTOM_Y_ORIGIN"
CUSTOM_Z_ORIGIN = "CUSTOM_Z_ORIGIN"

Metadata = Dict[str, str]


def format_decimal(v: float) -> str:
    """Forma decimal fija de 6 dígitos (equivalente a "%f")."""
    return f"{float(v):f}"


class RasterSet:
    """Raster multibanda en memoria con transformaciones pixel/UTM/custom."""

    def __init__(self) -> None:
        self.width: int = 0
        self.height: int = 0
        self.bands: List[np.ndarray] = []
        self.band_metadata: List[Metadata] = []
        self.metadata: Metadata = {}
        self.transform: GeoTransform = GeoTransform()
        self.utm_zone: int = 0
        self.utm_north: bool = True
        self._custom_x_origin = 0.0
        self._custom_y_origin = 0.0
        self._custom_z_origin = 0.0
        self.set_transform(0.0, 0.0)
        self.set_projection(0)
        self.set_custom_origin(0.0, 0.0, 0.0)

    # ----------------------
    # Copias
    # ----------------------
    def copy(self) -> "RasterSet":
        """Copia profunda: buffers independientes."""
        out = RasterSet()
        out.copy_meta_only(self)
        out.width = self.width
        out.height = self.height
        out.bands = [b.copy() for b in self.bands]
        out.band_metadata = [dict(m) for m in self.band_metadata]
        return out

    def __copy__(self) -> "RasterSet":
        return self.copy()

    def __deepcopy__(self, memo) -> "RasterSet":
        return self.copy()

    def copy_meta_only(self, other: "RasterSet") -> None:
        """Copia proyección, transform, metadata del dataset y origen custom (no bandas ni tamaño)."""
        self.utm_zone = other.utm_zone
        self.utm_north = other.utm_north
        self.transform = other.transform
        self.metadata = dict(other.metadata)
        self.set_custom_origin(other.custom_x_origin, other.custom_y_origin, other.custom_z_origin)

    def copy_meta(
        self,
        other: "RasterSet",
        *,
        band_count: Optional[int] = None,
        width: Optional[int] = None,
        height: Optional[int] = None,
    ) -> None:
        """copy_meta_only() + resize().

        - copy_meta(other): misma forma que `other`
        - copy_meta(other, band_count=n): otro número de bandas, mismo width/height
        - copy_meta(other, width=w, height=h): mismo número de bandas, otro tamaño
        """
        if (width is None) != (height is None):
            raise PreconditionError("copy_meta: width y height se sobre-escriben juntos")
        self.copy_meta_only(other)
        n = len(other.bands) if band_count is None else band_count
        w = other.width if width is None else width
        h = other.height if height is None else height
        self.resize(n, w, h)

    # ----------------------
    # Mutadores
    # ----------------------
    def set_transform(self, x0: float, y0: float, dx: float = 1.0, dy: float = 1.0) -> None:
        """Fija (x0, dx, 0, y0, 0, dy); las rotaciones quedan siempre en 0."""
        self.transform = GeoTransform.from_origin(x0, y0, dx, dy)

    def set_projection(self, zone: int, north: bool = True) -> None:
        """Proyección WGS84/UTM. No valida el rango de la zona."""
        self.utm_zone = int(zone)
        self.utm_north = bool(north)

    def resize(self, band_count: int, width: int, height: int, fill: float = 0.0) -> None:
        """Re-aloca todas las bandas (destruye el contenido previo)."""
        if band_count < 0 or width < 0 or height < 0:
            raise PreconditionError(f"resize con tamaños negativos: n={band_count}, w={width}, h={height}")
        self.width = int(width)
        self.height = int(height)
        size = self.width * self.height
        self.bands = [np.full(size, fill, dtype=BAND_DTYPE) for _ in range(int(band_count))]
        self.band_metadata = [{} for _ in range(int(band_count))]

    def set_custom_origin(self, x: float, y: float, z: float = 0.0) -> None:
        """Fija el origen custom y lo espeja en la metadata del dataset."""
        self._custom_x_origin = float(x)
        self._custom_y_origin = float(y)
        self._custom_z_origin = float(z)
        self.metadata[CUSTOM_X_ORIGIN] = format_decimal(self._custom_x_origin)
        self.metadata[CUSTOM_Y_ORIGIN] = format_decimal(self._custom_y_origin)
        self.metadata[CUSTOM_Z_ORIGIN] = format_decimal(self._custom_z_origin)

    def check(self) -> None:
        """Verifica los invariantes de forma; ShapeMismatchError si no se cumplen."""
        if len(self.bands) != len(self.band_metadata):
            raise ShapeMismatchError(
                f"{len(self.bands)} bandas pero {len(self.band_metadata)} metadata de banda")
        size = self.width * self.height
        for i, band in enumerate(self.bands):
            if band.ndim != 1 or band.size != size:
                raise ShapeMismatchError(f"banda {i}: {band.size} elementos, se esperaban {size}")

    # ----------------------
    # Accesores
    # ----------------------
    @property
    def band_count(self) -> int:
        return len(self.bands)

    @property
    def scale_x(self) -> float:
        """Ancho de píxel; negativo si el origen está a la derecha."""
        return self.transform.dx

    @property
    def scale_y(self) -> float:
        """Alto de píxel; negativo si el origen está arriba (norte-arriba)."""
        return self.transform.dy

    @property
    def utm_pose_x(self) -> float:
        return self.transform.x0

    @property
    def utm_pose_y(self) -> float:
        return self.transform.y0

    @property
    def projection(self) -> UTMRef:
        return UTMRef(self.utm_zone, self.utm_north)

    @property
    def custom_x_origin(self) -> float:
        return self._custom_x_origin

    @property
    def custom_y_origin(self) -> float:
        return self._custom_y_origin

    @property
    def custom_z_origin(self) -> float:
        return self._custom_z_origin

    def get_meta(self, key: str, default: str = "") -> str:
        return self.metadata.get(key, default)

    def get_band_meta(self, band_id: int, key: str, default: str = "") -> str:
        return self.band_metadata[band_id].get(key, default)

    def band_view(self, band_id: int) -> np.ndarray:
        """Vista (height, width) de la banda, sin copia."""
        return self.bands[band_id].reshape(self.height, self.width)

    # ----------------------
    # Bandas con nombre
    # ----------------------
    def set_band_name(self, band_id: int, name: str) -> None:
        self.band_metadata[band_id][NAME_KEY] = name

    def get_band_name(self, band_id: int) -> str:
        return self.band_metadata[band_id].get(NAME_KEY, "")

    def get_band_id(self, name: str) -> int:
        """Índice de la banda cuyo NAME es exactamente `name`."""
        found = [i for i, bm in enumerate(self.band_metadata) if bm.get(NAME_KEY) == name]
        if not found:
            raise BandNotFoundError(f"banda no encontrada: {name}")
        if len(found) > 1:
            raise DuplicateBandNameError(f"nombre de banda ambiguo: {name} (bandas {found})")
        return found[0]

    def get_band(self, name: str) -> np.ndarray:
        return self.bands[self.get_band_id(name)]

    def band_names(self) -> List[str]:
        return [self.get_band_name(i) for i in range(len(self.band_metadata))]

    # ----------------------
    # Conversión de coordenadas
    # ----------------------
    def pixel_to_projected(self, col: float, row: float) -> Point:
        return Point(col * self.scale_x + self.utm_pose_x, row * self.scale_y + self.utm_pose_y)

    def projected_to_pixel(self, x: float, y: float) -> Point:
        return self.transform.world_to_pixel(x, y)

    def pixel_to_custom(self, col: float, row: float) -> Point:
        p = self.pixel_to_projected(col, row)
        return Point(p.x - self.custom_x_origin, p.y - self.custom_y_origin)

    def custom_to_pixel(self, x: float, y: float) -> Point:
        return self.projected_to_pixel(x + self.custom_x_origin, y + self.custom_y_origin)

    def custom_to_projected(self, x: float, y: float) -> Point:
        return Point(x + self.custom_x_origin, y + self.custom_y_origin)

    def projected_to_custom(self, x: float, y: float) -> Point:
        return Point(x - self.custom_x_origin, y - self.custom_y_origin)

    def index_pix(self, x: float, y: float) -> int:
        """Índice lineal del píxel más cercano; OutOfRangeError fuera del raster."""
        col = round_half_away(x)
        row = round_half_away(y)
        if col < 0 or row < 0 or col >= self.width or row >= self.height:
            raise OutOfRangeError(f"píxel ({col}, {row}) fuera de [0,{self.width})x[0,{self.height})")
        return col + row * self.width

    def index_projected(self, x: float, y: float) -> int:
        return self.index_pix(*self.projected_to_pixel(x, y))

    def index_custom(self, x: float, y: float) -> int:
        return self.index_pix(*self.custom_to_pixel(x, y))

    # ----------------------
    # Igualdad / repr
    # ----------------------
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RasterSet):
            return NotImplemented
        return (
            self.width == other.width
            and self.height == other.height
            and self.scale_x == other.scale_x
            and self.scale_y == other.scale_y
            and self.utm_pose_x == other.utm_pose_x
            and self.utm_pose_y == other.utm_pose_y
            and self.metadata == other.metadata
            and len(self.bands) == len(other.bands)
            and all(np.array_equal(a, b) for a, b in zip(self.bands, other.bands))
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"RasterSet[{self.width},{self.height}]"


def band_metadata_copy(src: List[Mapping[str, str]]) -> List[Metadata]:
    return [dict(m) for m in src]


__all__ = [
    "RasterSet", "BAND_DTYPE", "NAME_KEY", "CUSTOM_X_ORIGIN", "CUSTOM_Y_ORIGIN", "CUSTOM_Z_ORIGIN",
    "Metadata", "format_decimal", "band_metadata_copy",
]
