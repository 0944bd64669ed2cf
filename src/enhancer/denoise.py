"""
Denoise stage: per-channel 3x3 median, blended with the original pixel.

Border policy is edge replication: each neighbor coordinate is clamped
independently to [0, w-1] x [0, h-1], so a pixel on the right edge reuses its
own column instead of reading the first pixel of the next row. Clamped
duplicates are kept, so every neighborhood holds exactly 9 samples and the
median is the 5th smallest value.

The output is computed in bands of rows. Every band reads the same read-only
padded copy of the input and writes a disjoint slice of a fresh buffer, which
is what makes the threaded path safe. A CancelToken is checked before each
band; a cancelled run raises and its buffer is dropped.
"""
from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Tuple

import logging
import threading

import numpy as np

from .errors import CancelledError
from .params import check_range
from .raster import Raster

logger = logging.getLogger(__name__)

NEIGHBORHOOD = 3
MEDIAN_INDEX = (NEIGHBORHOOD * NEIGHBORHOOD) // 2  # 4 -> 5th smallest of 9


class CancelToken:
    """Cooperative cancellation flag shared between a caller and a running stage."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, row: Optional[int] = None) -> None:
        if self._event.is_set():
            raise CancelledError(row=row)


def split_bands(height: int, rows_per_band: int) -> List[Tuple[int, int]]:
    """Disjoint [start, stop) row ranges covering 0..height."""
    if rows_per_band < 1:
        raise ValueError("rows_per_band must be >= 1")
    return [(y0, min(y0 + rows_per_band, height)) for y0 in range(0, height, rows_per_band)]


def median3x3(padded: np.ndarray, y0: int, y1: int, width: int) -> np.ndarray:
    """Median of the 3x3 neighborhoods of output rows [y0, y1).

    `padded` is the RGB input with one replicated pixel on every side, so
    output row y reads padded rows y..y+2.
    """
    samples = np.stack(
        [padded[y0 + dy:y1 + dy, dx:dx + width] for dy in range(NEIGHBORHOOD) for dx in range(NEIGHBORHOOD)],
        axis=0,
    )
    # selection, not a full sort
    return np.partition(samples, MEDIAN_INDEX, axis=0)[MEDIAN_INDEX]


def apply_denoise(
    raster: Raster,
    strength_percent: float,
    *,
    workers: int = 1,
    rows_per_band: int = 64,
    cancel: Optional[CancelToken] = None,
) -> Raster:
    """Blend each RGB value toward its 3x3 median: c' = c*(1-s) + median*s."""
    strength = check_range("denoise", strength_percent)
    if strength == 0.0:
        return raster

    s = np.float32(strength / 100.0)
    height, width = raster.shape
    src = raster.rgb
    padded = np.pad(src, ((1, 1), (1, 1), (0, 0)), mode="edge")
    padded.setflags(write=False)

    out = np.empty_like(raster.pixels)
    out[..., 3] = raster.alpha

    def _band(y0: int, y1: int) -> None:
        if cancel is not None:
            cancel.raise_if_cancelled(row=y0)
        med = median3x3(padded, y0, y1, width).astype(np.float32)
        center = src[y0:y1].astype(np.float32)
        blended = center * (1 - s) + med * s
        out[y0:y1, :, :3] = np.clip(np.rint(blended), 0, 255).astype(np.uint8)

    bands = split_bands(height, rows_per_band)
    if workers <= 1 or len(bands) == 1:
        for y0, y1 in bands:
            _band(y0, y1)
    else:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(_band, y0, y1) for y0, y1 in bands]
            try:
                for future in futures:
                    future.result()
            except BaseException:
                for future in futures:
                    future.cancel()
                raise

    logger.debug("Denoise %g%% on %dx%d raster in %d band(s)", strength, width, height, len(bands))
    return Raster(out)


class MedianDenoiser:
    """3x3 median denoise stage (strength in %, 0 = off)."""

    def __init__(self, strength: float = 0.0, workers: int = 1, rows_per_band: int = 64) -> None:
        if workers < 1:
            raise ValueError("workers must be >= 1")
        if rows_per_band < 1:
            raise ValueError("rows_per_band must be >= 1")
        self.strength = check_range("denoise", strength)
        self.workers = int(workers)
        self.rows_per_band = int(rows_per_band)

    def run(self, raster: Raster, cancel: Optional[CancelToken] = None) -> Raster:
        return apply_denoise(
            raster,
            self.strength,
            workers=self.workers,
            rows_per_band=self.rows_per_band,
            cancel=cancel,
        )
