import numpy as np
from rasterwrap.contracts.raster import RasterSet

def make_raster(w=2, h=2, x0=0.0, y0=0.0, px=1.0, py=1.0, bands=1, value=0.0):
    r = RasterSet()
    r.set_transform(x0, y0, px, py)
    r.resize(bands, w, h, value)
    return r

def make_ramp(w=4, h=3, x0=0.0, y0=0.0, px=1.0, py=1.0, bands=1, offset=0.0):
    """Bandas con valores 0..w*h-1 (+offset, +100*banda) para rastrear píxeles."""
    r = make_raster(w, h, x0, y0, px, py, bands)
    for b in range(bands):
        r.bands[b][:] = np.arange(w * h, dtype=np.float32) + offset + 100.0 * b
    return r

def make_named(names=("red", "green", "blue"), w=2, h=2):
    r = make_raster(w, h, bands=len(names))
    for i, n in enumerate(names):
        r.set_band_name(i, n)
    return r
