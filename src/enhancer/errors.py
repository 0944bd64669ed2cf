"""
Error taxonomy for the enhancement pipeline.

Every error carries a human readable message, a stable error code and a
details dict, so callers (CLI, session, a web front end) can report it
without parsing strings.
"""
from __future__ import annotations
from typing import Any, Dict, Optional


class EnhanceError(Exception):
    """Base exception for enhancement errors."""

    error_code = "ENHANCE_FAILED"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.error_code = error_code or self.error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": False,
            "error": self.message,
            "error_code": self.error_code,
            "details": self.details,
        }


class RangeError(EnhanceError, ValueError):
    """A parameter outside its documented domain (or not a finite number)."""

    error_code = "PARAM_OUT_OF_RANGE"

    def __init__(self, message: str, fields: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, details={"fields": fields or {}})

    @property
    def fields(self) -> Dict[str, Any]:
        return self.details["fields"]


class DimensionError(EnhanceError, ValueError):
    """Zero-sized raster, wrong array shape or buffer length, malformed kernel."""

    error_code = "BAD_DIMENSIONS"

    def __init__(self, message: str, shape: Any = None) -> None:
        super().__init__(message, details={"shape": shape})


class EncodeError(EnhanceError):
    """The JPEG encoder (or decoder) rejected the input."""

    error_code = "ENCODE_FAILED"

    def __init__(self, message: str, reason: Optional[str] = None) -> None:
        super().__init__(message, details={"reason": reason})


class CancelledError(EnhanceError):
    """A render was abandoned because a newer one superseded it."""

    error_code = "CANCELLED"

    def __init__(self, message: str = "Enhancement cancelled", row: Optional[int] = None) -> None:
        super().__init__(message, details={"row": row})
