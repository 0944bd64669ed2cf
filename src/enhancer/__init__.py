from .errors import EnhanceError, RangeError, DimensionError, EncodeError, CancelledError
from .helpers import PipelineConfig, ensure_dir, load_image_rgba, list_images, setup_logging
from .raster import Raster
from .params import EnhancementParams, PARAM_RANGES, validate
from .kernel import build_sharpen_kernel, apply_kernel
from .tone import ToneAdjuster, apply_tone
from .denoise import CancelToken, MedianDenoiser, apply_denoise
from .encode import encode, decode, psnr
from .pipeline import EnhancementPipeline, ExportResult, STAGE_ORDER, enhance, preview
from .session import EnhancementSession

__all__ = [
    "EnhanceError", "RangeError", "DimensionError", "EncodeError", "CancelledError",
    "PipelineConfig", "ensure_dir", "load_image_rgba", "list_images", "setup_logging",
    "Raster",
    "EnhancementParams", "PARAM_RANGES", "validate",
    "build_sharpen_kernel", "apply_kernel",
    "ToneAdjuster", "apply_tone",
    "CancelToken", "MedianDenoiser", "apply_denoise",
    "encode", "decode", "psnr",
    "EnhancementPipeline", "ExportResult", "STAGE_ORDER", "enhance", "preview",
    "EnhancementSession",
]
