# src/rasterwrap/adapters/rasterio_store.py
from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, FrozenSet, Mapping, Optional

import numpy as np
import rasterio
import rasterio.shutil
from rasterio.crs import CRS
from rasterio.errors import CRSError, RasterioError, RasterioIOError
from rasterio.transform import Affine

from ..contracts.errors import RasterIOError
from ..contracts.geo import GDALTransform, UTMRef
from ..ports.raster_store import RasterFields, RasterStorePort

logger = logging.getLogger(__name__)

BAND_DTYPE = np.dtype("float32")
# Drivers con Create(); el resto se escribe vía GTiff temporal + CreateCopy
_DIRECT_DRIVERS = frozenset({"GTiff"})
_TMP_SUFFIX = ".rasterwrap.tmp.tif"


@lru_cache(maxsize=1)
def register_drivers() -> FrozenSet[str]:
    """Registro de drivers GDAL (una sola vez por proceso); devuelve sus nombres cortos."""
    with rasterio.Env() as env:
        names = frozenset(env.drivers().keys())
    logger.debug("drivers GDAL registrados: %d", len(names))
    return names


def _affine_to_gt(a: Affine) -> GDALTransform:
    return (a.c, a.a, a.b, a.f, a.d, a.e)


def _gt_to_affine(gt: GDALTransform) -> Affine:
    return Affine.from_gdal(*gt)


def _crs_to_utm(crs_obj: Optional[CRS], uri: str) -> UTMRef:
    """CRS rasterio -> UTMRef; cualquier cosa que no sea WGS84/UTM -> zona 0."""
    if not crs_obj:
        return UTMRef()
    try:
        epsg = crs_obj.to_epsg()
    except CRSError:
        epsg = None
    ref = UTMRef.from_epsg(epsg)
    if not ref.is_set:
        logger.warning("%s: CRS no WGS84/UTM (%s), se ignora la proyección", uri, crs_obj)
    return ref


def _utm_to_crs(zone: int, north: bool) -> Optional[CRS]:
    ref = UTMRef(zone, north)
    if not ref.is_set:
        return None
    return CRS.from_epsg(ref.to_epsg())


def _creation_options(options: Mapping[str, str]) -> Dict[str, str]:
    return {str(k).upper(): str(v) for k, v in options.items()}


@dataclass(frozen=True)
class RasterioRasterStore(RasterStorePort):
    """RasterStore sobre rasterio (GDAL).

    - load(): todas las bandas como float32 planas + metadata de dataset y banda.
    - save(): GTiff directo; PNG/JPEG/GIF/... vía GTiff temporal junto al destino
      y copia con el driver pedido (no todos los drivers soportan Create).
    """

    def __post_init__(self) -> None:
        register_drivers()

    # --------------- lectura ---------------
    def load(self, uri: str) -> RasterFields:
        try:
            with rasterio.open(uri) as ds:
                if ds.driver != "GTiff":
                    logger.warning("%s: se esperaba GTiff y se obtuvo %s", uri, ds.driver)
                if ds.count == 0:
                    raise RasterIOError(f"unsupported layout: {uri} no tiene bandas")
                gt = _affine_to_gt(ds.transform)
                if gt[2] != 0.0 or gt[4] != 0.0:
                    raise RasterIOError(f"unsupported layout: {uri} tiene rotación ({gt})")
                if any(np.dtype(dt) != BAND_DTYPE for dt in ds.dtypes):
                    logger.warning("%s: bandas %s, se convierten a float32", uri, ds.dtypes)
                utm = _crs_to_utm(ds.crs, uri)
                bands = tuple(
                    ds.read(i, out_dtype=BAND_DTYPE).reshape(-1) for i in range(1, ds.count + 1)
                )
                band_meta = tuple(dict(ds.tags(i)) for i in range(1, ds.count + 1))
                return RasterFields(
                    width=ds.width,
                    height=ds.height,
                    bands=bands,
                    band_metadata=band_meta,
                    metadata=dict(ds.tags()),
                    transform=gt,
                    utm_zone=utm.zone,
                    utm_north=utm.north,
                )
        except RasterioIOError as e:
            raise RasterIOError(f"open error: {uri}: {e}") from e
        except RasterioError as e:
            raise RasterIOError(f"unsupported layout: {uri}: {e}") from e

    # --------------- escritura ---------------
    def _write_gtiff(self, uri: str, fields: RasterFields, options: Mapping[str, str]) -> None:
        dtype = fields.bands[0].dtype if fields.bands else BAND_DTYPE
        profile = {
            "driver": "GTiff",
            "width": fields.width,
            "height": fields.height,
            "count": fields.count,
            "dtype": dtype,
            "transform": _gt_to_affine(fields.transform),
            "crs": _utm_to_crs(fields.utm_zone, fields.utm_north),
        }
        profile.update(_creation_options(options))
        with rasterio.open(uri, "w", **profile) as dst:
            if fields.metadata:
                dst.update_tags(**fields.metadata)
            for i, band in enumerate(fields.bands, start=1):
                dst.write(np.asarray(band, dtype=dtype).reshape(fields.height, fields.width), i)
                if i - 1 < len(fields.band_metadata) and fields.band_metadata[i - 1]:
                    dst.update_tags(i, **fields.band_metadata[i - 1])

    def save(self, uri: str, driver: str, fields: RasterFields, options: Mapping[str, str]) -> None:
        if driver not in register_drivers():
            raise RasterIOError(f"driver unavailable: {driver}")
        d = os.path.dirname(uri)
        if d and not os.path.exists(d):
            os.makedirs(d, exist_ok=True)
        try:
            if driver in _DIRECT_DRIVERS:
                self._write_gtiff(uri, fields, options)
                return
            # GTiff temporal local al destino: rename/copy no cruzan discos
            fd, tmp = tempfile.mkstemp(suffix=_TMP_SUFFIX, dir=d or None)
            os.close(fd)
            try:
                self._write_gtiff(tmp, fields, {})
                rasterio.shutil.copy(tmp, uri, driver=driver, **_creation_options(options))
            finally:
                for p in (tmp, tmp + ".aux.xml"):
                    if os.path.exists(p):
                        os.remove(p)
        except (RasterioError, CRSError) as e:
            raise RasterIOError(f"write error: {uri} ({driver}): {e}") from e
        logger.debug("guardado %s (%s, %d bandas, opciones=%s)", uri, driver, fields.count, dict(options))


__all__ = ["RasterioRasterStore", "register_drivers"]
