from __future__ import annotations

import logging

import cv2
import numpy as np
from skimage.metrics import peak_signal_noise_ratio

from .errors import DimensionError, EncodeError
from .params import check_range
from .raster import Raster

logger = logging.getLogger(__name__)

JPEG_EXT = ".jpg"


def encode(raster: Raster, quality_percent: float) -> bytes:
    """JPEG-encode the color channels at the given quality (1..100).

    JPEG carries no alpha, so the alpha channel is dropped. Failures are
    raised as EncodeError and not retried.
    """
    quality = int(round(check_range("quality", quality_percent)))
    try:
        ok, buf = cv2.imencode(JPEG_EXT, raster.to_bgr(), [cv2.IMWRITE_JPEG_QUALITY, quality])
    except cv2.error as e:
        raise EncodeError(f"JPEG encoder rejected {raster.width}x{raster.height} raster", reason=str(e)) from e
    if not ok:
        raise EncodeError(f"JPEG encoder rejected {raster.width}x{raster.height} raster", reason="imencode returned False")
    data = buf.tobytes()
    logger.debug("Encoded %dx%d raster at quality %d -> %d bytes", raster.width, raster.height, quality, len(data))
    return data


def decode(data: bytes) -> Raster:
    """Decode an encoded image (JPEG or any OpenCV-readable format) to RGBA."""
    arr = np.frombuffer(data, dtype=np.uint8)
    img = cv2.imdecode(arr, cv2.IMREAD_UNCHANGED) if arr.size else None
    if img is None:
        raise EncodeError("Could not decode image bytes", reason=f"{len(data)} bytes")
    return Raster.from_bgr(img)


def psnr(reference: Raster, candidate: Raster) -> float:
    """Peak signal-to-noise ratio over RGB (dB); inf for identical rasters."""
    if reference.shape != candidate.shape:
        raise DimensionError(
            f"Cannot compare {reference.width}x{reference.height} with {candidate.width}x{candidate.height}",
            shape=(reference.shape, candidate.shape),
        )
    if np.array_equal(reference.rgb, candidate.rgb):
        return float("inf")
    return float(peak_signal_noise_ratio(reference.rgb, candidate.rgb, data_range=255))
