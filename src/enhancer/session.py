"""
Editing session: the mutable state around the pure pipeline.

Holds the loaded image and the current parameter vector. Every parameter
change cancels the render in flight; a finished preview is swapped in under a
lock, so `current_preview` only ever holds a complete result of some
parameter vector.
"""
from __future__ import annotations
from typing import Any, Optional

import logging
import threading

from .denoise import CancelToken
from .errors import CancelledError, EnhanceError
from .params import EnhancementParams, validate
from .pipeline import EnhancementPipeline, ExportResult
from .raster import Raster

logger = logging.getLogger(__name__)


class EnhancementSession:
    def __init__(self, pipeline: Optional[EnhancementPipeline] = None) -> None:
        self.pipeline = pipeline or EnhancementPipeline()
        self._lock = threading.Lock()
        self._source: Optional[Raster] = None
        self._params = EnhancementParams()
        self._token = CancelToken()
        self._preview: Optional[Raster] = None

    @property
    def source(self) -> Optional[Raster]:
        return self._source

    @property
    def params(self) -> EnhancementParams:
        return self._params

    @property
    def current_preview(self) -> Optional[Raster]:
        return self._preview

    def load(self, raster: Raster) -> None:
        with self._lock:
            self._token.cancel()
            self._token = CancelToken()
            self._source = raster
            self._preview = None
        logger.info("Loaded %dx%d image", raster.width, raster.height)

    def update(self, **changes: Any) -> EnhancementParams:
        """Apply parameter changes and cancel any render started before them."""
        with self._lock:
            params = validate(self._params.with_changes(**changes), strict=self.pipeline.config.strict_params)
            self._token.cancel()
            self._token = CancelToken()
            self._params = params
        return params

    def reset(self) -> EnhancementParams:
        with self._lock:
            self._token.cancel()
            self._token = CancelToken()
            self._params = EnhancementParams()
        return self._params

    def _require_source(self) -> Raster:
        if self._source is None:
            raise EnhanceError("No image loaded", error_code="NO_IMAGE")
        return self._source

    def render_preview(self) -> Raster:
        """Render a preview for the current parameters.

        Raises CancelledError when a newer update arrived while rendering;
        the stored preview is left as it was.
        """
        with self._lock:
            source = self._require_source()
            params = self._params
            token = self._token

        result = self.pipeline.preview(source, params, cancel=token)

        with self._lock:
            if token.cancelled:
                raise CancelledError("Preview superseded by a newer parameter change")
            self._preview = result
        return result

    def export(self) -> ExportResult:
        with self._lock:
            source = self._require_source()
            params = self._params
        return self.pipeline.export(source, params)
