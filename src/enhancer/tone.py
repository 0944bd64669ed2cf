from __future__ import annotations
from typing import Optional

import logging
import math

import cv2
import numpy as np

from .params import EnhancementParams
from .raster import Raster

logger = logging.getLogger(__name__)

# ITU-R BT.601 luma weights (R, G, B)
LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float32)


def gaussian_ksize(radius: float) -> int:
    """Odd kernel footprint covering +/- 3 sigma."""
    return 2 * int(math.ceil(3.0 * radius)) + 1


def adjust_brightness(rgb: np.ndarray, brightness: float) -> np.ndarray:
    return np.clip(rgb * np.float32(brightness / 100.0), 0, 255)


def adjust_contrast(rgb: np.ndarray, contrast: float) -> np.ndarray:
    return np.clip((rgb - 128.0) * np.float32(contrast / 100.0) + 128.0, 0, 255)


def adjust_saturation(rgb: np.ndarray, saturation: float) -> np.ndarray:
    gray = (rgb @ LUMA_WEIGHTS)[..., None]
    return np.clip(gray + (rgb - gray) * np.float32(saturation / 100.0), 0, 255)


def gaussian_blur(rgb: np.ndarray, radius: float) -> np.ndarray:
    k = gaussian_ksize(radius)
    return cv2.GaussianBlur(rgb, (k, k), sigmaX=radius, sigmaY=radius,
                            borderType=cv2.BORDER_REPLICATE)


def apply_tone(
    raster: Raster,
    brightness: float = 100.0,
    contrast: float = 100.0,
    saturation: float = 100.0,
    blur_radius: float = 0.0,
) -> Raster:
    """brightness -> contrast -> saturation -> blur on RGB; alpha untouched.

    Each step reads the previous step's (clamped) output. A step at its
    identity value is skipped, so the all-identity call returns the input.
    """
    steps = []
    if brightness != 100.0:
        steps.append(lambda c: adjust_brightness(c, brightness))
    if contrast != 100.0:
        steps.append(lambda c: adjust_contrast(c, contrast))
    if saturation != 100.0:
        steps.append(lambda c: adjust_saturation(c, saturation))
    if blur_radius > 0.0:
        steps.append(lambda c: gaussian_blur(c, blur_radius))
    if not steps:
        return raster

    work = raster.rgb.astype(np.float32)
    for step in steps:
        work = step(work)
    out = np.clip(np.rint(work), 0, 255).astype(np.uint8)
    return raster.with_rgb(out)


class ToneAdjuster:
    """Tone stage with fixed settings (brightness/contrast/saturation in %, blur in px)."""

    def __init__(
        self,
        brightness: float = 100.0,
        contrast: float = 100.0,
        saturation: float = 100.0,
        blur_radius: float = 0.0,
    ) -> None:
        if min(brightness, contrast, saturation, blur_radius) < 0:
            raise ValueError("tone settings must be >= 0")
        self.brightness = float(brightness)
        self.contrast = float(contrast)
        self.saturation = float(saturation)
        self.blur_radius = float(blur_radius)

    @classmethod
    def from_params(cls, params: EnhancementParams, blur_scale: Optional[float] = None) -> "ToneAdjuster":
        # blur_scale shrinks the radius along with a downsampled preview raster
        blur = params.blur * (blur_scale if blur_scale is not None else 1.0)
        return cls(params.brightness, params.contrast, params.saturation, blur)

    def run(self, raster: Raster) -> Raster:
        logger.debug(
            "Tone: brightness=%g contrast=%g saturation=%g blur=%g",
            self.brightness, self.contrast, self.saturation, self.blur_radius,
        )
        return apply_tone(raster, self.brightness, self.contrast, self.saturation, self.blur_radius)
