import numpy as np
import pytest
from rasterwrap.services.quantize_service import INITIAL_MAX, INITIAL_MIN, normalize, raster_to_bytes

def test_linear_rescale_floor():
    q = raster_to_bytes(np.array([0.0, 5.0, 10.0], dtype=np.float32))
    assert q.data.dtype == np.uint8
    assert q.data.tolist() == [0, 127, 255]
    assert (q.initial_min, q.initial_max) == (0.0, 10.0)

def test_negative_range():
    q = raster_to_bytes(np.array([-2.0, -1.0, 0.0], dtype=np.float32))
    assert q.data.tolist() == [0, 127, 255]

def test_constant_band_gives_zeros():
    q = raster_to_bytes(np.full(6, 3.5, dtype=np.float32))
    assert q.data.tolist() == [0] * 6
    assert q.initial_min == q.initial_max == 3.5

def test_empty_band():
    q = raster_to_bytes(np.zeros(0, dtype=np.float32))
    assert q.data.size == 0

def test_provenance_keys():
    q = raster_to_bytes(np.array([1.0, 3.0], dtype=np.float32))
    assert q.provenance() == {INITIAL_MIN: "1.000000", INITIAL_MAX: "3.000000"}

def test_normalize_in_place():
    band = np.array([2.0, 4.0, 6.0], dtype=np.float32)
    out = normalize(band)
    assert out is band
    assert band.tolist() == pytest.approx([0.0, 0.5, 1.0])

def test_normalize_constant_untouched():
    band = np.full(4, 9.0, dtype=np.float32)
    normalize(band)
    assert np.all(band == 9.0)
