# src/rasterwrap/config.py
from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Bundle de compresión ofrecido al RasterStore al guardar GeoTIFF (deflate más rápido)
COMPRESS_BUNDLE: Mapping[str, str] = MappingProxyType({
    "COMPRESS": "DEFLATE",
    "PREDICTOR": "1",
    "ZLEVEL": "1",
})
# Remapeos fijos extensión -> driver
DRIVER_REMAPS: Mapping[str, str] = MappingProxyType({
    "JPG": "JPEG",
    "TIF": "GTiff",
})

class Settings(BaseSettings):
    """
    Config unificada del proyecto. No toca disco.
    Debe ser construida y provista por composition/di.py (CLI/adapters).
    """
    model_config = SettingsConfigDict(
        env_prefix="RASTERWRAP_",
        env_nested_delimiter="__",
        extra="forbid",
        frozen=True,
    )

    # --- escritura ---
    compress_options: Dict[str, str] = Field(default_factory=lambda: dict(COMPRESS_BUNDLE))
    jpeg_quality: int = Field(95, ge=1, le=100)

    # --- dominio ---
    no_data: float = 0.0  # relleno del mosaico donde no cae ningún tile
    driver_remaps: Dict[str, str] = Field(default_factory=lambda: dict(DRIVER_REMAPS))

    # --- logging ---
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    # ----------------------------
    # Normalizadores / validadores
    # ----------------------------
    @field_validator("compress_options", "driver_remaps", mode="before")
    @classmethod
    def _upper_keys(cls, d: Mapping[str, object]) -> Dict[str, str]:
        return {str(k).strip().upper(): str(v) for k, v in dict(d).items()}

    @field_validator("log_level", mode="before")
    @classmethod
    def _valid_level(cls, v: str) -> str:
        v2 = str(v).strip().upper()
        if not isinstance(logging.getLevelName(v2), int):
            raise ValueError(f"log_level inválido: {v}")
        return v2

    # ----------------------------
    # Helpers puros (sin side-effects)
    # ----------------------------
    def level(self) -> int:
        return logging.getLevelName(self.log_level)

    def save_options(self, driver: str) -> Dict[str, str]:
        """Opciones por defecto para `driver` (compresión solo aplica a GTiff)."""
        if driver.upper() == "GTIFF":
            return dict(self.compress_options)
        if driver.upper() == "JPEG":
            return {"QUALITY": str(self.jpeg_quality)}
        return {}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Instancia cacheada. Úsala SOLO desde composition/di.py o CLI.
    Prohibido usarla en contracts/ (dominio). Para tests, recuerda limpiar:
        get_settings.cache_clear()
    """
    return Settings()
