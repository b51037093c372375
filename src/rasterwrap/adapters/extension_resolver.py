# src/rasterwrap/adapters/extension_resolver.py
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import PurePath
from types import MappingProxyType
from typing import Mapping

from ..config import DRIVER_REMAPS
from ..contracts.errors import RasterIOError
from ..ports.format_resolver import FormatResolverPort


@dataclass(frozen=True)
class ExtensionFormatResolver(FormatResolverPort):
    """Driver a partir de la extensión en mayúsculas (JPEG, PNG, GTiff, GIF...).

    Remapeos: JPG -> JPEG, TIF -> GTiff; el resto queda tal cual
    (ver http://www.gdal.org/formats_list.html).
    """
    remaps: Mapping[str, str] = field(default_factory=lambda: MappingProxyType(dict(DRIVER_REMAPS)))

    def resolve(self, uri: str) -> str:
        suffix = PurePath(str(uri)).suffix
        ext = suffix[1:].upper()
        if not ext:
            raise RasterIOError(f"no se puede deducir el driver sin extensión: {uri}")
        return self.remaps.get(ext, ext)


__all__ = ["ExtensionFormatResolver"]
