from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

import logging
import os

import cv2
import numpy as np

from .raster import Raster


IMAGE_EXTENSIONS: Tuple[str, ...] = (".png", ".jpg", ".jpeg", ".bmp", ".tif", ".tiff", ".webp")
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


# Config dataclasses

@dataclass
class PipelineConfig:
    workers: int = 1                 # denoise threads (row bands run in parallel when > 1)
    rows_per_band: int = 64          # rows per denoise band; cancellation is checked per band
    preview_max_side: int = 1024     # longer side of the downsampled preview raster
    strict_params: bool = False      # True -> out-of-range params raise instead of clamping
    save_dir: Optional[str] = None
    show: bool = False

    def __post_init__(self) -> None:
        if self.workers < 1:
            raise ValueError("workers must be >= 1")
        if self.rows_per_band < 1:
            raise ValueError("rows_per_band must be >= 1")
        if self.preview_max_side < 1:
            raise ValueError("preview_max_side must be >= 1")


def setup_logging(level: str | int = "INFO") -> None:
    """Install a stream handler on the root logger (CLI use only)."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logging.basicConfig(level=level, format=LOG_FORMAT)


# I/O & filesystem helpers

def ensure_dir(path: str | os.PathLike) -> None:
    Path(path).mkdir(parents=True, exist_ok=True)


def load_image_rgba(path: str | os.PathLike) -> Raster:
    """Load any OpenCV-readable image as an RGBA raster. Raises on failure."""
    img = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if img is None:
        raise FileNotFoundError(f"Could not read image: {path}")
    return Raster.from_bgr(_to_uint8(img))


def save_bytes(data: bytes, path: str | os.PathLike) -> Path:
    out = Path(path)
    if out.parent != Path("."):
        ensure_dir(out.parent)
    out.write_bytes(data)
    return out


def list_images(
    dir_path: str | os.PathLike,
    extensions: Tuple[str, ...] = IMAGE_EXTENSIONS,
) -> List[str]:
    p = Path(dir_path)
    return [
        str(fp) for fp in sorted(p.iterdir())
        if fp.is_file() and fp.suffix.lower() in extensions
    ]


def _to_uint8(img: np.ndarray) -> np.ndarray:
    # 16-bit PNG/TIFF -> 8-bit; float images are assumed to be in [0, 1]
    if img.dtype == np.uint8:
        return img
    if img.dtype == np.uint16:
        return np.round(img / 257.0).astype(np.uint8)
    return np.clip(np.round(img.astype(np.float64) * 255.0), 0, 255).astype(np.uint8)
