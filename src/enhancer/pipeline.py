"""
Pipeline orchestrator: tone -> sharpen -> denoise, then JPEG export.

The stage order is part of the contract: swapping sharpen and denoise gives a
different image.

One pipeline serves both preview and export. The preview path runs the same
stages on a downsampled copy of the raster (blur radius scaled with it).
"""
from __future__ import annotations
from dataclasses import dataclass
from time import perf_counter
from typing import List, Optional, Tuple

import logging
import os

import cv2

from .denoise import CancelToken, MedianDenoiser
from .encode import encode
from .helpers import PipelineConfig, ensure_dir, list_images, load_image_rgba, save_bytes
from .kernel import apply_kernel, build_sharpen_kernel
from .params import EnhancementParams, validate
from .raster import Raster
from .tone import ToneAdjuster

logger = logging.getLogger(__name__)

STAGE_ORDER: Tuple[str, ...] = ("tone", "sharpen", "denoise")
DEFAULT_EXPORT_NAME = "enhanced-image.jpg"


@dataclass
class ExportResult:
    raster: Raster      # enhanced full-resolution raster
    data: bytes         # JPEG bytes
    quality: int
    filename: str = DEFAULT_EXPORT_NAME


def downsample(raster: Raster, max_side: int) -> Tuple[Raster, float]:
    """Area-resample so the longer side is <= max_side. Returns (raster, scale)."""
    longest = max(raster.width, raster.height)
    if longest <= max_side:
        return raster, 1.0
    scale = max_side / float(longest)
    size = (max(1, round(raster.width * scale)), max(1, round(raster.height * scale)))
    small = cv2.resize(raster.pixels, size, interpolation=cv2.INTER_AREA)
    return Raster(small), scale


def _run_stages(
    raster: Raster,
    params: EnhancementParams,
    config: PipelineConfig,
    cancel: Optional[CancelToken],
    blur_scale: float = 1.0,
) -> Raster:
    stages = {
        "tone": ToneAdjuster.from_params(params, blur_scale=blur_scale).run,
        "sharpen": lambda r: apply_kernel(r, build_sharpen_kernel(params.sharpen)),
        "denoise": lambda r: MedianDenoiser(
            params.denoise, workers=config.workers, rows_per_band=config.rows_per_band
        ).run(r, cancel=cancel),
    }
    out = raster
    for name in STAGE_ORDER:
        if cancel is not None:
            cancel.raise_if_cancelled()
        t0 = perf_counter()
        out = stages[name](out)
        logger.debug("Stage %-7s %.1f ms", name, (perf_counter() - t0) * 1000.0)
    return out


def enhance(
    raster: Raster,
    params: EnhancementParams,
    config: Optional[PipelineConfig] = None,
    cancel: Optional[CancelToken] = None,
) -> Raster:
    """Full-resolution enhancement. Raises on any stage failure; never returns a partial result."""
    config = config or PipelineConfig()
    params = validate(params, strict=config.strict_params)
    return _run_stages(raster, params, config, cancel)


def preview(
    raster: Raster,
    params: EnhancementParams,
    max_side: Optional[int] = None,
    config: Optional[PipelineConfig] = None,
    cancel: Optional[CancelToken] = None,
) -> Raster:
    """Same stages as `enhance`, run on a copy downsampled to `max_side`."""
    config = config or PipelineConfig()
    params = validate(params, strict=config.strict_params)
    small, scale = downsample(raster, max_side or config.preview_max_side)
    return _run_stages(small, params, config, cancel, blur_scale=scale)


class EnhancementPipeline:
    """End-to-end orchestration for rasters, single files or folders."""

    def __init__(self, config: Optional[PipelineConfig] = None) -> None:
        self.config = config or PipelineConfig()

    def run(self, raster: Raster, params: EnhancementParams, cancel: Optional[CancelToken] = None) -> Raster:
        t0 = perf_counter()
        logger.info("Enhancing %dx%d raster", raster.width, raster.height)
        out = enhance(raster, params, self.config, cancel)
        logger.info("Enhanced %dx%d raster in %.2fs", raster.width, raster.height, perf_counter() - t0)
        return out

    def preview(self, raster: Raster, params: EnhancementParams, cancel: Optional[CancelToken] = None) -> Raster:
        return preview(raster, params, self.config.preview_max_side, self.config, cancel)

    def export(self, raster: Raster, params: EnhancementParams, cancel: Optional[CancelToken] = None) -> ExportResult:
        params = validate(params, strict=self.config.strict_params)
        enhanced = self.run(raster, params, cancel)
        quality = int(round(params.quality))
        return ExportResult(raster=enhanced, data=encode(enhanced, quality), quality=quality)

    def process_image(self, path: str, params: EnhancementParams, out_path: Optional[str] = None) -> ExportResult:
        raster = load_image_rgba(path)
        result = self.export(raster, params)

        if out_path is None and self.config.save_dir:
            ensure_dir(self.config.save_dir)
            base = os.path.splitext(os.path.basename(path))[0]
            out_path = os.path.join(self.config.save_dir, f"{base}_enhanced.jpg")
        if out_path is not None:
            save_bytes(result.data, out_path)
            result.filename = os.path.basename(out_path)
            logger.info("Saved %s (%d bytes, quality %d)", out_path, len(result.data), result.quality)

        if self.config.show:
            from .viz import Visualizer  # matplotlib only when figures are requested
            Visualizer.show_before_after(raster, result.raster, title=os.path.basename(path))

        return result

    def process_dir(self, dir_path: str, params: EnhancementParams) -> List[str]:
        paths = list_images(dir_path)
        for p in paths:
            self.process_image(p, params)
        return paths
