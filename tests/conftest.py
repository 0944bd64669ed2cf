"""
Pytest fixtures: small synthetic rasters.
"""
import numpy as np
import pytest

from enhancer import Raster


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def uniform3():
    """3x3 raster of (100, 150, 200, 255)."""
    return Raster.filled(3, 3, (100, 150, 200, 255))


@pytest.fixture
def outlier5():
    """Single white pixel in the middle of a black 5x5 field."""
    arr = np.zeros((5, 5, 4), dtype=np.uint8)
    arr[..., 3] = 255
    arr[2, 2, :3] = 255
    return Raster(arr)


@pytest.fixture
def noisy(rng):
    """32x24 random RGB with random alpha."""
    arr = rng.integers(0, 256, size=(24, 32, 4), dtype=np.uint8)
    return Raster(arr)


@pytest.fixture
def photo(rng):
    """96x64 smooth gradients plus mild noise, roughly photo-like."""
    h, w = 64, 96
    yy, xx = np.mgrid[0:h, 0:w].astype(np.float32)
    r = 40 + 180 * xx / w
    g = 60 + 120 * yy / h
    b = 128 + 60 * np.sin(xx / 7.0) * np.cos(yy / 5.0)
    rgb = np.stack([r, g, b], axis=-1) + rng.normal(0, 6, size=(h, w, 3))
    arr = np.empty((h, w, 4), dtype=np.uint8)
    arr[..., :3] = np.clip(np.rint(rgb), 0, 255).astype(np.uint8)
    arr[..., 3] = 255
    return Raster(arr)
