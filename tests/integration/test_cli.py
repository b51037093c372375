# tests/integration/test_cli.py
import pytest
from pathlib import Path

rasterio = pytest.importorskip("rasterio")

from rasterwrap.cli import main
from rasterwrap.composition.di import build_io_service
from tests.factories import make_raster

pytestmark = pytest.mark.integration

def _tiles(tmp_path: Path):
    svc = build_io_service()
    paths = []
    for i, x0 in enumerate((0.0, 2.0)):
        r = make_raster(2, 2, x0=x0, y0=10.0, py=-1.0, value=float(i + 1))
        r.set_band_name(0, "dem")
        p = tmp_path / f"t{i}.tif"
        svc.save(r, str(p))
        paths.append(str(p))
    return paths

def test_merge_export_info(tmp_path: Path, capsys):
    tiles = _tiles(tmp_path)
    mosaic = tmp_path / "mosaic.tif"
    assert main(["merge", *tiles, "-o", str(mosaic), "--no-data", "-1"]) == 0
    m = build_io_service().load(str(mosaic))
    assert (m.width, m.height) == (4, 2)
    assert m.band_view(0)[0].tolist() == [1.0, 1.0, 2.0, 2.0]

    preview = tmp_path / "preview.png"
    assert main(["export8u", str(mosaic), "0", str(preview)]) == 0
    assert preview.exists()

    capsys.readouterr()
    assert main(["info", str(mosaic)]) == 0
    out = capsys.readouterr().out
    assert "RasterSet[4,2]: 1 bandas" in out
    assert "banda 0: dem" in out

def test_merge_mismatch_returns_error(tmp_path: Path):
    tiles = _tiles(tmp_path)
    svc = build_io_service()
    odd = tmp_path / "odd.tif"
    svc.save(make_raster(3, 2, x0=4.0, y0=10.0, py=-1.0), str(odd))
    assert main(["merge", *tiles, str(odd), "-o", str(tmp_path / "m.tif")]) == 1
    assert not (tmp_path / "m.tif").exists()

def test_log_file(tmp_path: Path):
    tiles = _tiles(tmp_path)
    log = tmp_path / "logs" / "run.log"
    assert main(["--log-file", str(log), "-v", "merge", *tiles, "-o", str(tmp_path / "m.tif")]) == 0
    assert "merge de 2 tiles" in log.read_text(encoding="utf-8")
