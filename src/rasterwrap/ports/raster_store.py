# src/rasterwrap/ports/raster_store.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping, Protocol, Tuple, runtime_checkable

import numpy as np

from ..contracts.geo import GDALTransform

URI = str
Options = Mapping[str, str]

@dataclass(frozen=True)
class RasterFields:
    """
    Campos que cruzan el puerto (sin GDAL ni rasterio).
    - bands: buffers planos row-major de largo width*height (float32, o uint8 en export)
    - transform: 6 coeficientes en orden GDAL
    - utm_zone == 0 -> sin proyección
    """
    width: int
    height: int
    bands: Tuple[np.ndarray, ...] = ()
    band_metadata: Tuple[Dict[str, str], ...] = ()
    metadata: Dict[str, str] = field(default_factory=dict)
    transform: GDALTransform = (0.0, 1.0, 0.0, 0.0, 0.0, 1.0)
    utm_zone: int = 0
    utm_north: bool = True

    @property
    def count(self) -> int:
        return len(self.bands)

@runtime_checkable
class RasterStorePort(Protocol):
    """
    Lectura/escritura de datasets completos (GeoTIFF, PNG, JPEG...).
    Reglas: fallas como RasterIOError ("open error", "unsupported layout",
    "driver unavailable", "write error").
    """
    def load(self, uri: URI) -> RasterFields: ...
    def save(self, uri: URI, driver: str, fields: RasterFields, options: Options) -> None: ...

__all__ = ["RasterStorePort", "RasterFields", "URI", "Options"]
