from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple

import cv2
import numpy as np

from .errors import DimensionError

CHANNELS = 4  # R, G, B, A


@dataclass(frozen=True, eq=False)
class Raster:
    """RGBA uint8 image, shape (height, width, 4), row stride width*4.

    `pixels` is a read-only view of the array passed in (no copy; use
    `from_array` to copy); stages build a new Raster instead of writing into
    an existing one.
    """

    pixels: np.ndarray

    def __post_init__(self) -> None:
        px = self.pixels
        if px.ndim != 3 or px.shape[2] != CHANNELS or px.dtype != np.uint8:
            raise DimensionError(
                f"Raster needs a (H, W, 4) uint8 array, got {px.shape} {px.dtype}",
                shape=px.shape,
            )
        if px.shape[0] == 0 or px.shape[1] == 0:
            raise DimensionError(f"Raster has zero size: {px.shape[1]}x{px.shape[0]}", shape=px.shape)
        # freeze a view so the caller's array stays writable
        view = px.view()
        view.setflags(write=False)
        object.__setattr__(self, "pixels", view)

    # constructors

    @classmethod
    def from_array(cls, arr: np.ndarray) -> "Raster":
        """Copy a gray (H, W), RGB (H, W, 3) or RGBA (H, W, 4) uint8 array."""
        arr = np.asarray(arr)
        if arr.dtype != np.uint8:
            raise DimensionError(f"Expected uint8 pixels, got {arr.dtype}", shape=arr.shape)
        if arr.ndim == 2:
            arr = np.repeat(arr[..., None], 3, axis=2)
        if arr.ndim != 3 or arr.shape[2] not in (3, 4):
            raise DimensionError(f"Unsupported pixel layout {arr.shape}", shape=arr.shape)
        if arr.shape[2] == 3:
            alpha = np.full(arr.shape[:2] + (1,), 255, dtype=np.uint8)
            arr = np.concatenate([arr, alpha], axis=2)
        return cls(np.ascontiguousarray(arr).copy())

    @classmethod
    def from_bgr(cls, img: np.ndarray) -> "Raster":
        """OpenCV channel order (gray, BGR or BGRA) -> RGBA."""
        if img.ndim == 2:
            return cls.from_array(img)
        if img.ndim == 3 and img.shape[2] == 3:
            return cls.from_array(cv2.cvtColor(img, cv2.COLOR_BGR2RGB))
        if img.ndim == 3 and img.shape[2] == 4:
            return cls.from_array(cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA))
        raise DimensionError(f"Unsupported pixel layout {img.shape}", shape=img.shape)

    @classmethod
    def from_bytes(cls, buf: bytes, width: int, height: int) -> "Raster":
        """Flat RGBA buffer, row-major, stride width*4."""
        expected = width * height * CHANNELS
        if width <= 0 or height <= 0 or len(buf) != expected:
            raise DimensionError(
                f"Buffer of {len(buf)} bytes does not match {width}x{height} RGBA ({expected} bytes)",
                shape=(height, width, CHANNELS),
            )
        arr = np.frombuffer(buf, dtype=np.uint8).reshape(height, width, CHANNELS)
        return cls(arr.copy())

    @classmethod
    def filled(cls, width: int, height: int, rgba: Tuple[int, int, int, int]) -> "Raster":
        if width <= 0 or height <= 0:
            raise DimensionError(f"Raster has zero size: {width}x{height}", shape=(height, width, CHANNELS))
        arr = np.empty((height, width, CHANNELS), dtype=np.uint8)
        arr[...] = rgba
        return cls(arr)

    # accessors

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def shape(self) -> Tuple[int, int]:
        return self.height, self.width

    @property
    def stride(self) -> int:
        return self.width * CHANNELS

    @property
    def rgb(self) -> np.ndarray:
        return self.pixels[..., :3]

    @property
    def alpha(self) -> np.ndarray:
        return self.pixels[..., 3]

    def with_rgb(self, rgb: np.ndarray) -> "Raster":
        """New raster with the given color channels and this raster's alpha."""
        if rgb.shape != self.rgb.shape:
            raise DimensionError(f"RGB shape {rgb.shape} != {self.rgb.shape}", shape=rgb.shape)
        out = np.empty_like(self.pixels)
        out[..., :3] = rgb
        out[..., 3] = self.alpha
        return Raster(out)

    def to_bytes(self) -> bytes:
        return self.pixels.tobytes()

    def to_bgr(self) -> np.ndarray:
        return cv2.cvtColor(np.ascontiguousarray(self.rgb), cv2.COLOR_RGB2BGR)

    def same_pixels(self, other: "Raster") -> bool:
        return np.array_equal(self.pixels, other.pixels)
