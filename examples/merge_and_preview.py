# =============================
# FILE: examples/merge_and_preview.py
# =============================
"""
Uso mínimo: une tiles GeoTIFF detrás del RasterStore y exporta un preview PNG.
Los servicios no tocan rasterio directamente; todo pasa por composition/di.py.
"""
from pathlib import Path
from rasterwrap.composition.di import build_io_service


if __name__ == "__main__":
    root = Path("/ruta/a/tiles").resolve()
    svc = build_io_service()

    tiles = sorted(str(p) for p in root.glob("*.tif"))
    mosaic = svc.merge_files(tiles, str(root / "mosaic.tif"))
    print("Mosaico:", repr(mosaic), mosaic.band_count, "bandas")

    for i, name in enumerate(mosaic.band_names()):
        out = root / f"preview_{i}.png"
        svc.export8u(mosaic, str(out), i)
        print(" -", i, name or "-", "->", out)

    # índice lineal del píxel bajo una coordenada UTM (centro del mosaico)
    cx = mosaic.utm_pose_x + mosaic.scale_x * mosaic.width / 2
    cy = mosaic.utm_pose_y + mosaic.scale_y * mosaic.height / 2
    print("Píxel central:", mosaic.index_projected(cx, cy))
