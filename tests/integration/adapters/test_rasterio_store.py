# tests/integration/adapters/test_rasterio_store.py
import numpy as np
import pytest
from pathlib import Path

rasterio = pytest.importorskip("rasterio")

from rasterio.transform import from_origin
from rasterwrap.adapters.extension_resolver import ExtensionFormatResolver
from rasterwrap.adapters.rasterio_store import RasterioRasterStore, register_drivers
from rasterwrap.config import Settings
from rasterwrap.contracts.errors import RasterIOError
from rasterwrap.ports.raster_store import RasterFields
from rasterwrap.services.raster_io_service import RasterIOService
from tests.factories import make_ramp

pytestmark = pytest.mark.integration

@pytest.fixture
def svc():
    return RasterIOService(store=RasterioRasterStore(), resolver=ExtensionFormatResolver(), settings=Settings())

def test_drivers_registered_once():
    names = register_drivers()
    assert "GTiff" in names
    assert register_drivers() is names

def test_gtiff_roundtrip(tmp_path: Path, svc):
    r = make_ramp(w=4, h=3, x0=377000.0, y0=4830000.0, px=0.5, py=-0.5, bands=2)
    r.set_projection(31, north=True)
    r.set_band_name(0, "red")
    r.set_band_name(1, "nir")
    r.set_custom_origin(377000.0, 4829000.0, 12.5)
    out = tmp_path / "sub" / "r.tif"
    svc.save(r, str(out))

    back = svc.load(str(out))
    assert (back.width, back.height, back.band_count) == (4, 3, 2)
    assert back.transform == r.transform
    assert (back.utm_zone, back.utm_north) == (31, True)
    assert back.band_names() == ["red", "nir"]
    assert (back.custom_x_origin, back.custom_y_origin, back.custom_z_origin) == (377000.0, 4829000.0, 12.5)
    for a, b in zip(back.bands, r.bands):
        assert np.array_equal(a, b)

    with rasterio.open(out) as ds:
        assert ds.crs.to_epsg() == 32631
        assert ds.dtypes[0] == "float32"
        assert (ds.compression.name if ds.compression else "").upper() == "DEFLATE"

def test_southern_hemisphere(tmp_path: Path, svc):
    r = make_ramp(w=2, h=2)
    r.set_projection(19, north=False)
    svc.save(r, str(tmp_path / "s.tif"))
    back = svc.load(str(tmp_path / "s.tif"))
    assert (back.utm_zone, back.utm_north) == (19, False)

def test_export_png_preview(tmp_path: Path, svc):
    r = make_ramp(w=4, h=2)
    out = tmp_path / "prev.png"
    svc.export8u(r, str(out), 0)
    assert out.exists()
    assert not list(tmp_path.glob("*.tmp.tif*"))
    with rasterio.open(out) as ds:
        assert ds.driver == "PNG"
        assert ds.dtypes[0] == "uint8"
        data = ds.read(1)
    assert data[0, 0] == 0
    assert data[1, 3] == 255

def test_load_missing_file(tmp_path: Path):
    with pytest.raises(RasterIOError, match="open error"):
        RasterioRasterStore().load(str(tmp_path / "nope.tif"))

def test_unknown_driver(tmp_path: Path):
    f = RasterFields(width=1, height=1, bands=(np.zeros(1, dtype=np.float32),), band_metadata=({},))
    with pytest.raises(RasterIOError, match="driver unavailable"):
        RasterioRasterStore().save(str(tmp_path / "x.zzz"), "NOPE", f, {})

def test_non_float_input_is_cast(tmp_path: Path):
    path = tmp_path / "u8.tif"
    with rasterio.open(
        path, "w", driver="GTiff", width=2, height=1, count=1, dtype="uint8",
        transform=from_origin(0, 2, 1, 1),
    ) as dst:
        dst.write(np.array([[3, 250]], dtype=np.uint8), 1)
    fields = RasterioRasterStore().load(str(path))
    assert fields.bands[0].dtype == np.float32
    assert fields.bands[0].tolist() == [3.0, 250.0]
    assert fields.utm_zone == 0
