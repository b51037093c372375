# src/rasterwrap/ports/format_resolver.py
from __future__ import annotations

from typing import Protocol, runtime_checkable

URI = str

@runtime_checkable
class FormatResolverPort(Protocol):
    """
    Resuelve el driver (nombre corto GDAL) a partir de la ruta.
    """
    def resolve(self, uri: URI) -> str: ...

__all__ = ["FormatResolverPort", "URI"]
