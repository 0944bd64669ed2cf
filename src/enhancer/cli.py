from __future__ import annotations
import argparse
import logging
import os
from typing import List, Optional

from .encode import encode
from .errors import EnhanceError
from .helpers import PipelineConfig, ensure_dir, list_images, load_image_rgba, save_bytes, setup_logging
from .params import EnhancementParams, validate
from .pipeline import EnhancementPipeline

logger = logging.getLogger(__name__)


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Image enhancement: tone, sharpen, denoise, JPEG export")
    g_io = p.add_argument_group("I/O")
    g_io.add_argument("--image", type=str, help="Path to a single image")
    g_io.add_argument("--dir", type=str, help="Path to a directory of images")
    g_io.add_argument("--out", type=str, default=None, help="Output JPEG path (single image)")
    g_io.add_argument("--save_dir", type=str, default=None, help="Output folder")
    g_io.add_argument("--show", action="store_true", help="Display before/after figures")

    g_tone = p.add_argument_group("Basic Adjustments")
    g_tone.add_argument("--brightness", type=float, default=100.0, help="%% [0, 200], 100 = unchanged")
    g_tone.add_argument("--contrast", type=float, default=100.0, help="%% [0, 200], 100 = unchanged")
    g_tone.add_argument("--saturation", type=float, default=100.0, help="%% [0, 200], 100 = unchanged")

    g_adv = p.add_argument_group("Advanced Enhancement")
    g_adv.add_argument("--sharpen", type=float, default=0.0, help="[0, 1]")
    g_adv.add_argument("--denoise", type=float, default=0.0, help="%% [0, 100]")
    g_adv.add_argument("--blur", type=float, default=0.0, help="px [0, 10]")

    g_exp = p.add_argument_group("Export")
    g_exp.add_argument("--quality", type=float, default=90.0, help="JPEG quality %% [1, 100]")
    g_exp.add_argument("--preview", action="store_true", help="Write the downsampled preview instead")
    g_exp.add_argument("--preview_max_side", type=int, default=1024)

    g_run = p.add_argument_group("Runtime")
    g_run.add_argument("--workers", type=int, default=1, help="Denoise threads")
    g_run.add_argument("--rows_per_band", type=int, default=64)
    g_run.add_argument("--strict", action="store_true", help="Reject out-of-range parameters instead of clamping")
    g_run.add_argument("--log_level", type=str, default="INFO")

    return p


def params_from_args(args: argparse.Namespace) -> EnhancementParams:
    return EnhancementParams(
        brightness=args.brightness,
        contrast=args.contrast,
        saturation=args.saturation,
        blur=args.blur,
        sharpen=args.sharpen,
        denoise=args.denoise,
        quality=args.quality,
    )


def _output_path(path: str, args: argparse.Namespace) -> str:
    if args.out and args.image:
        return args.out
    base = os.path.splitext(os.path.basename(path))[0]
    suffix = "_preview" if args.preview else "_enhanced"
    folder = args.save_dir or os.path.dirname(os.path.abspath(path))
    ensure_dir(folder)
    return os.path.join(folder, f"{base}{suffix}.jpg")


def _process_one(path: str, args: argparse.Namespace, pipeline: EnhancementPipeline,
                 params: EnhancementParams) -> None:
    params = validate(params, strict=pipeline.config.strict_params)
    out_path = _output_path(path, args)
    if not args.preview:
        pipeline.process_image(path, params, out_path=out_path)
        return

    raster = load_image_rgba(path)
    small = pipeline.preview(raster, params)
    save_bytes(encode(small, int(round(params.quality))), out_path)
    logger.info("Saved preview %s (%dx%d)", out_path, small.width, small.height)
    if pipeline.config.show:
        from .viz import Visualizer
        Visualizer.show_before_after(raster, small, title=os.path.basename(path))


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_argparser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    if not args.image and not args.dir:
        parser.error("Provide either --image or --dir")

    try:
        cfg = PipelineConfig(
            workers=args.workers,
            rows_per_band=args.rows_per_band,
            preview_max_side=args.preview_max_side,
            strict_params=args.strict,
            save_dir=args.save_dir,
            show=args.show,
        )
    except ValueError as e:
        parser.error(str(e))
    pipeline = EnhancementPipeline(cfg)
    params = params_from_args(args)

    paths = [args.image] if args.image else list_images(args.dir)
    try:
        for path in paths:
            _process_one(path, args, pipeline, params)
    except FileNotFoundError as e:
        logger.error("%s", e)
        return 2
    except EnhanceError as e:
        logger.error("%s [%s] %s", e.message, e.error_code, e.details)
        return 1
    return 0
