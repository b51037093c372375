from __future__ import annotations
from pathlib import Path
from typing import Optional
import yaml

from ..adapters.extension_resolver import ExtensionFormatResolver
from ..adapters.rasterio_store import RasterioRasterStore
from ..config import Settings, get_settings
from ..services.raster_io_service import RasterIOService

def load_settings_from_yaml(path: Path) -> Settings:
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: se esperaba un mapeo YAML en la raíz")
    return Settings(**data)

def build_settings(config_path: Optional[Path] = None) -> Settings:
    """YAML explícito si se entrega; si no, env (RASTERWRAP_*) + defaults."""
    if config_path is None:
        return get_settings()
    return load_settings_from_yaml(Path(config_path).resolve())

def build_io_service(settings: Optional[Settings] = None) -> RasterIOService:
    st = settings or get_settings()
    return RasterIOService(
        store=RasterioRasterStore(),
        resolver=ExtensionFormatResolver(remaps=dict(st.driver_remaps)),
        settings=st,
    )
