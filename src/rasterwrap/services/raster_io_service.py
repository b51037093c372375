# src/rasterwrap/services/raster_io_service.py
from __future__ import annotations

"""
Servicio de I/O de RasterSet, contracts-first: sin dependencias duras fuera de *ports*.

Casos cubiertos:
  • load / load_many: RasterStore -> RasterSet (origen custom re-leído de la metadata)
  • save: RasterSet -> RasterStore, driver deducido por FormatResolver y bundle
    de compresión de Settings por defecto
  • export8u: banda float -> preview Byte (PNG/JPEG/GIF/...) con procedencia
    INITIAL_MIN / INITIAL_MAX
  • merge_files: carga N tiles, los une y guarda el mosaico

Nota: el servicio no maneja archivos temporales ni drivers; eso vive en el
      adapter de RasterStore.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Mapping, Optional

from ..config import Settings, get_settings
from ..contracts.errors import OutOfRangeError, RasterIOError
from ..contracts.raster import (
    CUSTOM_X_ORIGIN, CUSTOM_Y_ORIGIN, CUSTOM_Z_ORIGIN, NAME_KEY, RasterSet,
)
from ..ports.format_resolver import FormatResolverPort
from ..ports.raster_store import RasterFields, RasterStorePort
from .merge_service import merge
from .quantize_service import raster_to_bytes

logger = logging.getLogger(__name__)


# ----------------------
# Conversión RasterSet <-> RasterFields
# ----------------------

def _parse_origin(raster: RasterSet, key: str, uri: str) -> float:
    raw = raster.get_meta(key, "0")
    try:
        return float(raw)
    except ValueError as e:
        raise RasterIOError(f"{uri}: metadata {key}={raw!r} no es decimal") from e


def raster_from_fields(fields: RasterFields, uri: str = "<memoria>") -> RasterSet:
    r = RasterSet()
    r.resize(fields.count, fields.width, fields.height)
    r.set_projection(fields.utm_zone, fields.utm_north)
    x0, dx, _, y0, _, dy = fields.transform
    r.set_transform(x0, y0, dx, dy)
    for i, band in enumerate(fields.bands):
        if band.size != r.width * r.height:
            raise RasterIOError(f"unsupported layout: {uri} banda {i} con {band.size} elementos")
        r.bands[i][:] = band.reshape(-1)
    for i, meta in enumerate(fields.band_metadata[: fields.count]):
        r.band_metadata[i] = dict(meta)
    r.metadata = dict(fields.metadata)
    r.set_custom_origin(
        _parse_origin(r, CUSTOM_X_ORIGIN, uri),
        _parse_origin(r, CUSTOM_Y_ORIGIN, uri),
        _parse_origin(r, CUSTOM_Z_ORIGIN, uri),
    )
    r.check()
    return r


def raster_to_fields(raster: RasterSet) -> RasterFields:
    raster.check()
    return RasterFields(
        width=raster.width,
        height=raster.height,
        bands=tuple(raster.bands),
        band_metadata=tuple(dict(m) for m in raster.band_metadata),
        metadata=dict(raster.metadata),
        transform=raster.transform.as_gdal(),
        utm_zone=raster.utm_zone,
        utm_north=raster.utm_north,
    )


# ----------------------
# Servicio
# ----------------------

@dataclass
class RasterIOService:
    store: RasterStorePort
    resolver: FormatResolverPort
    settings: Settings = field(default_factory=get_settings)

    # ---------- Helpers ----------
    def _driver_for(self, uri: str, driver: Optional[str]) -> str:
        return driver or self.resolver.resolve(uri)

    # ---------- Casos de uso ----------
    def load(self, uri: str) -> RasterSet:
        r = raster_from_fields(self.store.load(str(uri)), str(uri))
        logger.debug("cargado %s: %r, %d bandas", uri, r, r.band_count)
        return r

    def load_many(self, uris: Iterable[str]) -> List[RasterSet]:
        return [self.load(u) for u in uris]

    def save(
        self,
        raster: RasterSet,
        uri: str,
        *,
        driver: Optional[str] = None,
        options: Optional[Mapping[str, str]] = None,
    ) -> str:
        """Guarda `raster`; options=None -> bundle por defecto del driver, {} -> ninguna."""
        drv = self._driver_for(str(uri), driver)
        opts = self.settings.save_options(drv) if options is None else dict(options)
        self.store.save(str(uri), drv, raster_to_fields(raster), opts)
        return str(uri)

    def export8u(self, raster: RasterSet, uri: str, band: int, *, driver: Optional[str] = None) -> str:
        """Exporta la banda `band` (0..n-1) como Byte con procedencia min/max."""
        if not 0 <= band < raster.band_count:
            raise OutOfRangeError(f"banda {band} fuera de [0,{raster.band_count})")
        raster.check()
        drv = self._driver_for(str(uri), driver)
        q = raster_to_bytes(raster.bands[band])
        band_meta = {NAME_KEY: raster.get_band_name(band)}
        band_meta.update(q.provenance())
        fields = RasterFields(
            width=raster.width,
            height=raster.height,
            bands=(q.data,),
            band_metadata=(band_meta,),
            metadata=dict(raster.metadata),
            transform=raster.transform.as_gdal(),
            utm_zone=raster.utm_zone,
            utm_north=raster.utm_north,
        )
        opts = {"QUALITY": str(self.settings.jpeg_quality)} if drv == "JPEG" else {}
        self.store.save(str(uri), drv, fields, opts)
        logger.info("export8u %s banda %d -> %s (min=%s, max=%s)", drv, band, uri, q.initial_min, q.initial_max)
        return str(uri)

    def merge_files(
        self,
        uris: Iterable[str],
        out_uri: str,
        *,
        no_data: Optional[float] = None,
        options: Optional[Mapping[str, str]] = None,
    ) -> RasterSet:
        files = self.load_many(uris)
        fill = self.settings.no_data if no_data is None else no_data
        result = merge(files, fill)
        self.save(result, out_uri, options=options)
        logger.info("merge de %d tiles -> %s %r", len(files), out_uri, result)
        return result


__all__ = ["RasterIOService", "raster_from_fields", "raster_to_fields"]
