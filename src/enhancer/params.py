"""
Parameter model: the seven numeric knobs of the enhancement pipeline.

Every field has a closed domain and an identity value; a vector with all
pixel-stage fields at identity leaves the raster untouched. `validate` is the
boundary in front of the pixel stages: out-of-range values are clamped (and
logged) or rejected, never wrapped.
"""
from __future__ import annotations
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Mapping, Tuple

import logging
import math
import numbers

from .errors import RangeError

logger = logging.getLogger(__name__)


PARAM_RANGES: Dict[str, Tuple[float, float]] = {
    "brightness": (0.0, 200.0),
    "contrast": (0.0, 200.0),
    "saturation": (0.0, 200.0),
    "blur": (0.0, 10.0),
    "sharpen": (0.0, 1.0),
    "denoise": (0.0, 100.0),
    "quality": (1.0, 100.0),
}

# identity value of each pixel stage (quality only drives the encoder)
IDENTITY: Dict[str, float] = {
    "brightness": 100.0,
    "contrast": 100.0,
    "saturation": 100.0,
    "blur": 0.0,
    "sharpen": 0.0,
    "denoise": 0.0,
}


@dataclass(frozen=True)
class EnhancementParams:
    brightness: float = 100.0   # %, multiplicative
    contrast: float = 100.0     # %, about mid-gray
    saturation: float = 100.0   # %, chroma about per-pixel luma
    blur: float = 0.0           # px, Gaussian sigma
    sharpen: float = 0.0        # 3x3 kernel strength
    denoise: float = 0.0        # %, blend toward 3x3 median
    quality: float = 90.0       # %, JPEG quality

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "EnhancementParams":
        unknown = sorted(set(values) - set(PARAM_RANGES))
        if unknown:
            raise RangeError(f"Unknown parameter(s): {', '.join(unknown)}", {k: values[k] for k in unknown})
        return cls(**dict(values))

    def with_changes(self, **changes: Any) -> "EnhancementParams":
        unknown = sorted(set(changes) - set(PARAM_RANGES))
        if unknown:
            raise RangeError(f"Unknown parameter(s): {', '.join(unknown)}", {k: changes[k] for k in unknown})
        return replace(self, **changes)

    def as_dict(self) -> Dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def is_identity(self) -> bool:
        return all(getattr(self, name) == value for name, value in IDENTITY.items())


def _check_number(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise RangeError(f"{name} must be a number, got {value!r}", {name: value})
    value = float(value)
    if not math.isfinite(value):
        raise RangeError(f"{name} must be finite, got {value!r}", {name: value})
    return value


def check_range(name: str, value: Any) -> float:
    """Raise RangeError unless `value` lies inside the domain of `name`."""
    value = _check_number(name, value)
    low, high = PARAM_RANGES[name]
    if not low <= value <= high:
        raise RangeError(f"{name}={value:g} outside [{low:g}, {high:g}]", {name: value})
    return value


def validate(params: EnhancementParams, strict: bool = False) -> EnhancementParams:
    """Return a vector whose every field lies inside its domain.

    Non-numeric and non-finite values always raise RangeError. Values outside
    the domain are clamped to the nearest bound (with a warning per field), or
    raise RangeError when `strict` is set.
    """
    clean: Dict[str, float] = {}
    clamped: Dict[str, Tuple[float, float]] = {}
    for name, (low, high) in PARAM_RANGES.items():
        value = _check_number(name, getattr(params, name))
        bounded = min(max(value, low), high)
        if bounded != value:
            clamped[name] = (value, bounded)
        clean[name] = bounded

    if clamped:
        if strict:
            raise RangeError(
                "Parameter(s) out of range: "
                + ", ".join(f"{n}={old:g}" for n, (old, _new) in clamped.items()),
                {n: old for n, (old, _new) in clamped.items()},
            )
        for name, (old, new) in clamped.items():
            logger.warning("Clamped %s from %g to %g", name, old, new)

    return EnhancementParams(**clean)
