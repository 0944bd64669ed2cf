from __future__ import annotations

import logging

import cv2
import numpy as np

from .errors import DimensionError, RangeError
from .params import check_range
from .raster import Raster

logger = logging.getLogger(__name__)

IDENTITY_KERNEL = np.array([[0.0, 0.0, 0.0],
                            [0.0, 1.0, 0.0],
                            [0.0, 0.0, 0.0]])


def build_sharpen_kernel(strength: float) -> np.ndarray:
    """3x3 sharpen kernel: center 1 + 4s, orthogonal neighbors -s, diagonals 0.

    Weights sum to 1 for any s, so a uniform field is a fixed point.
    strength == 0 gives the identity kernel exactly.
    """
    s = check_range("sharpen", strength)
    if s == 0.0:
        return IDENTITY_KERNEL.copy()
    return np.array([[0.0, -s, 0.0],
                     [-s, 1.0 + 4.0 * s, -s],
                     [0.0, -s, 0.0]])


def apply_kernel(raster: Raster, kernel: np.ndarray) -> Raster:
    """Convolve the RGB channels with a 3x3 kernel; alpha is copied verbatim.

    Border policy: edge replication (out-of-bounds neighbors take the value of
    the nearest in-bounds pixel). Results are rounded and clamped to [0, 255].
    """
    kernel = np.asarray(kernel, dtype=np.float64)
    if kernel.shape != (3, 3):
        raise DimensionError(f"Kernel must be 3x3, got {kernel.shape}", shape=kernel.shape)
    if not np.all(np.isfinite(kernel)):
        raise RangeError("Kernel weights must be finite", {"kernel": kernel.tolist()})

    if np.array_equal(kernel, IDENTITY_KERNEL):
        return raster

    # filter2D correlates; flip so asymmetric kernels convolve too
    flipped = np.ascontiguousarray(kernel[::-1, ::-1]).astype(np.float32)
    rgb = raster.rgb.astype(np.float32)
    out = cv2.filter2D(rgb, -1, flipped, borderType=cv2.BORDER_REPLICATE)
    out = np.clip(np.rint(out), 0, 255).astype(np.uint8)
    logger.debug("Applied 3x3 kernel to %dx%d raster", raster.width, raster.height)
    return raster.with_rgb(out)
