"""
Capture error taxonomy for screendiff.

Every failure raised by the capture layer is a CaptureError subclass tagged
with an ErrorKind, so the IPC layer can report the cause without parsing
messages.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Distinct failure causes for capture operations."""

    DISPLAY_ENUMERATION = "display_enumeration"
    INVALID_DISPLAY_INDEX = "invalid_display_index"
    CAPTURE_FAILED = "capture_failed"
    ENCODING = "encoding"
    LOCK = "lock"


class CaptureError(Exception):
    """Base class for capture failures."""

    kind: ErrorKind


class DisplayEnumerationError(CaptureError):
    """The platform could not list the attached displays."""

    kind = ErrorKind.DISPLAY_ENUMERATION


class InvalidDisplayIndexError(CaptureError):
    """The configured screen index is out of range."""

    kind = ErrorKind.INVALID_DISPLAY_INDEX

    def __init__(self, index: int, available: int):
        super().__init__(f"Screen index {index} not found ({available} displays available)")
        self.index = index
        self.available = available


class CaptureFailedError(CaptureError):
    """The platform capture call failed (including invalid region bounds)."""

    kind = ErrorKind.CAPTURE_FAILED


class EncodingError(CaptureError):
    """The captured image could not be encoded."""

    kind = ErrorKind.ENCODING


class LockError(CaptureError):
    """The capture state lock is unusable; the state may be inconsistent."""

    kind = ErrorKind.LOCK
