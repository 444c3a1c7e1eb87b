"""
Capture Module for screendiff

This module contains all capture functionality:
- Display enumeration and screen/region grabs (mss)
- Sampled pixel-difference change detection
- Capture state with a single baseline frame
- Continuous capture manager
"""

from screendiff.capture.daemon import CaptureManager
from screendiff.capture.diff import check_change, compute_diff_percent, has_changed
from screendiff.capture.errors import (
    CaptureError,
    CaptureFailedError,
    DisplayEnumerationError,
    EncodingError,
    ErrorKind,
    InvalidDisplayIndexError,
    LockError,
)
from screendiff.capture.screen import ScreenCapture, downscale_image
from screendiff.capture.source import CaptureSource, MSSCaptureSource
from screendiff.capture.types import CaptureConfig, Region, Screenshot, ScreenInfo

__all__ = [
    "CaptureConfig",
    "CaptureError",
    "CaptureFailedError",
    "CaptureManager",
    "CaptureSource",
    "DisplayEnumerationError",
    "EncodingError",
    "ErrorKind",
    "InvalidDisplayIndexError",
    "LockError",
    "MSSCaptureSource",
    "Region",
    "ScreenCapture",
    "ScreenInfo",
    "Screenshot",
    "check_change",
    "compute_diff_percent",
    "downscale_image",
    "has_changed",
]
