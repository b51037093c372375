import numpy as np
import pytest
from rasterwrap.contracts.errors import PreconditionError, ShapeMismatchError
from rasterwrap.services.merge_service import merge, mosaic_layout
from tests.factories import make_raster, make_ramp

def test_two_tiles_side_by_side():
    a = make_raster(2, 2, x0=0.0, y0=0.0, value=1.0)
    b = make_raster(2, 2, x0=2.0, y0=0.0, value=1.0)
    m = merge([a, b])
    assert (m.width, m.height, m.band_count) == (4, 2, 1)
    assert m.transform.as_gdal() == (0.0, 1.0, 0.0, 0.0, 0.0, 1.0)
    assert np.all(m.bands[0] == 1.0)

def test_pixels_land_at_offsets():
    a = make_ramp(w=2, h=2, x0=0.0)
    b = make_ramp(w=2, h=2, x0=2.0, offset=10.0)
    m = merge([a, b])
    assert m.band_view(0).tolist() == [[0, 1, 10, 11], [2, 3, 12, 13]]

def test_north_up_tiles_stack_vertically():
    top = make_ramp(w=2, h=2, x0=0.0, y0=4.0, py=-1.0)
    bottom = make_ramp(w=2, h=2, x0=0.0, y0=2.0, py=-1.0, offset=10.0)
    layout = mosaic_layout([bottom, top])
    assert (layout.width, layout.height) == (2, 4)
    assert layout.upper_left == (0.0, 4.0)
    assert [(p.xoff, p.yoff) for p in layout.placements] == [(0, 2), (0, 0)]
    m = merge([bottom, top])
    assert m.utm_pose_y == 4.0
    assert m.band_view(0)[:, 0].tolist() == [0, 2, 10, 12]

def test_gap_filled_with_no_data():
    a = make_raster(1, 1, x0=0.0, value=5.0)
    b = make_raster(1, 1, x0=2.0, value=5.0)
    m = merge([a, b], no_data=-1.0)
    assert m.bands[0].tolist() == [5.0, -1.0, 5.0]

def test_epsilon_origin_still_snaps():
    a = make_raster(2, 2, x0=0.0)
    b = make_raster(2, 2, x0=2.0 - 1e-12)
    layout = mosaic_layout([a, b])
    assert layout.width == 4
    assert [p.xoff for p in layout.placements] == [0, 2]

def test_last_tile_wins_on_overlap():
    a = make_raster(2, 2, value=1.0)
    b = make_raster(2, 2, value=2.0)
    m = merge([a, b])
    assert np.all(m.bands[0] == 2.0)

def test_metadata_from_first_tile():
    a = make_raster(2, 2)
    a.set_band_name(0, "dem")
    a.set_projection(30)
    a.set_custom_origin(1.0, 2.0)
    b = make_raster(2, 2, x0=2.0)
    m = merge([a, b])
    assert m.get_band_name(0) == "dem"
    assert m.utm_zone == 30
    assert (m.custom_x_origin, m.custom_y_origin) == (1.0, 2.0)
    m.band_metadata[0]["NAME"] = "x"
    assert a.get_band_name(0) == "dem"

def test_inputs_untouched():
    a = make_ramp(w=2, h=2)
    before = a.copy()
    merge([a, make_ramp(w=2, h=2, x0=2.0)])
    assert a == before

def test_empty_input():
    with pytest.raises(PreconditionError):
        merge([])

@pytest.mark.parametrize("other", [
    make_raster(2, 2, x0=2.0, bands=2),
    make_raster(3, 2, x0=2.0),
    make_raster(2, 2, x0=2.0, px=2.0),
    make_raster(2, 2, x0=2.0, py=-1.0),
])
def test_incompatible_tiles(other):
    with pytest.raises(ShapeMismatchError):
        merge([make_raster(2, 2), other])

def test_zero_scale_is_precondition():
    with pytest.raises(PreconditionError):
        merge([make_raster(2, 2, px=0.0)])
