"""
Screen Capture with Change Detection for screendiff

ScreenCapture owns the process-wide capture state: the current CaptureConfig
and the baseline frame from the previous capture. Each capture grabs the
configured display (or region), downscales it to the configured maximum
width, compares it against the baseline and returns a base64 PNG Screenshot.

All operations on the state are serialized through a single lock. If an
unexpected exception escapes while the lock is held, the state is marked
poisoned and later operations raise LockError.
"""

import logging
import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from PIL import Image

from screendiff.capture.codec import encode_base64, encode_png
from screendiff.capture.diff import DEFAULT_SAMPLE_STRIDE, check_change
from screendiff.capture.errors import (
    CaptureError,
    CaptureFailedError,
    DisplayEnumerationError,
    EncodingError,
    InvalidDisplayIndexError,
    LockError,
)
from screendiff.capture.source import CaptureSource, MSSCaptureSource
from screendiff.capture.types import (
    CaptureConfig,
    DisplayDescriptor,
    Region,
    Screenshot,
    ScreenInfo,
)

logger = logging.getLogger(__name__)


def downscale_image(image: Image.Image, max_width: int | None) -> Image.Image:
    """
    Downscale an image to max_width while maintaining aspect ratio.

    Uses bilinear (triangle filter) resampling, which averages over the
    source area when shrinking. Must not be nearest-neighbour.

    Args:
        image: Original image
        max_width: Maximum output width, or None (or <= 0) for no limit

    Returns:
        Downscaled image (or the original if already within the limit)
    """
    if max_width is None or max_width <= 0:
        return image

    width, height = image.size
    if width <= max_width:
        return image

    new_height = max(1, round(height * max_width / width))
    return image.resize((max_width, new_height), Image.Resampling.BILINEAR)


class ScreenCapture:
    """
    Captures screenshots and tracks whether the screen changed.

    One instance is created at startup and passed to everything that needs
    to capture. The first capture, and the first capture after reset() or
    set_config(), always reports changed=True.
    """

    def __init__(
        self,
        config: CaptureConfig | None = None,
        source: CaptureSource | None = None,
        clock: Callable[[], float] = time.time,
        sample_stride: int = DEFAULT_SAMPLE_STRIDE,
    ):
        """
        Initialize the capture state.

        Args:
            config: Initial configuration (defaults if None)
            source: Platform capture source (mss if None)
            clock: Wall-clock function returning seconds since the epoch
            sample_stride: Sampling stride for change detection
        """
        if sample_stride < 1:
            raise ValueError(f"sample_stride must be >= 1, got {sample_stride}")

        self._config = config or CaptureConfig()
        self._source = source or MSSCaptureSource()
        self._clock = clock
        self._sample_stride = sample_stride
        self._last_image: Image.Image | None = None
        self._lock = threading.Lock()
        self._poisoned = False

    @contextmanager
    def _locked(self, operation: str) -> Iterator[None]:
        """Hold the state lock for one operation, poisoning it on unexpected errors."""
        with self._lock:
            if self._poisoned:
                logger.error(f"[{operation}] Lock error: capture state is poisoned")
                raise LockError(f"Lock error: capture state is poisoned, {operation} refused")
            try:
                yield
            except CaptureError:
                raise
            except Exception:
                self._poisoned = True
                logger.exception(f"[{operation}] Unexpected error, capture state poisoned")
                raise

    @property
    def config(self) -> CaptureConfig:
        """The current configuration."""
        with self._locked("get_config"):
            return self._config

    @property
    def last_image(self) -> Image.Image | None:
        """The baseline frame, or None if the next capture has nothing to compare against."""
        with self._locked("get_last_image"):
            return self._last_image

    @property
    def is_poisoned(self) -> bool:
        return self._poisoned

    def list_displays(self) -> list[ScreenInfo]:
        """
        List attached displays in discovery order.

        Index 0 is the first display found, which is not necessarily the
        primary one. The list is enumerated fresh on every call.
        """
        displays = self._enumerate_displays()
        return [
            ScreenInfo(
                index=i,
                name=f"Screen {i}",
                x=d.x,
                y=d.y,
                width=d.width,
                height=d.height,
                is_primary=d.is_primary,
            )
            for i, d in enumerate(displays)
        ]

    def capture(self) -> Screenshot:
        """
        Capture the configured display and compare it with the previous frame.

        Returns:
            Screenshot whose `changed` flag reflects the comparison made
            before the baseline was replaced

        Raises:
            DisplayEnumerationError: Displays could not be listed
            InvalidDisplayIndexError: screen_index is out of range
            CaptureFailedError: The platform grab failed
            EncodingError: The frame could not be encoded
            LockError: The capture state is poisoned
        """
        with self._locked("capture"):
            return self._capture_locked()

    def set_config(self, config: CaptureConfig) -> None:
        """Replace the configuration and discard the baseline."""
        with self._locked("set_config"):
            self._config = config
            self._last_image = None
        logger.info(f"Capture config updated: {config}")

    def reset(self) -> None:
        """Discard the baseline so the next capture reports a change."""
        with self._locked("reset"):
            self._last_image = None
        logger.debug("Capture baseline reset")

    def _enumerate_displays(self) -> list[DisplayDescriptor]:
        try:
            displays = self._source.enumerate_displays()
        except Exception as e:
            logger.error(f"[capture] Failed to get screens: {e}")
            raise DisplayEnumerationError(f"Failed to get screens: {e}") from e
        logger.debug(f"[capture] Found {len(displays)} screens")
        return displays

    def _grab(self, display: DisplayDescriptor, region: Region | None) -> Image.Image:
        try:
            if region is None:
                image = self._source.capture_full_display(display)
            else:
                image = self._source.capture_region(
                    display, region.x, region.y, region.width, region.height
                )
        except Exception as e:
            target = "screen" if region is None else "region"
            logger.error(f"[capture] Failed to capture {target}: {e}")
            raise CaptureFailedError(f"Failed to capture {target}: {e}") from e

        if image.mode != "RGBA":
            image = image.convert("RGBA")
        return image

    def _capture_locked(self) -> Screenshot:
        config = self._config

        displays = self._enumerate_displays()
        if config.screen_index < 0 or config.screen_index >= len(displays):
            logger.error(f"[capture] Screen index {config.screen_index} not found")
            raise InvalidDisplayIndexError(config.screen_index, len(displays))
        display = displays[config.screen_index]

        logger.debug(f"[capture] Capturing screen {config.screen_index}...")
        image = self._grab(display, config.region)
        logger.debug(f"[capture] Captured image: {image.width}x{image.height}")

        image = downscale_image(image, config.max_width)

        result = check_change(
            self._last_image,
            image,
            config.diff_threshold,
            config.change_threshold_percent,
            stride=self._sample_stride,
        )

        try:
            png_bytes = encode_png(image)
        except (OSError, ValueError) as e:
            logger.error(f"[capture] Failed to encode image: {e}")
            raise EncodingError(f"Failed to encode image: {e}") from e
        data = encode_base64(png_bytes)
        logger.debug(f"[capture] PNG: {len(png_bytes)} bytes, base64: {len(data)} chars")

        timestamp = self._timestamp_ms()

        # Baseline moves only once the frame is fully produced
        self._last_image = image

        return Screenshot(
            data=data,
            width=image.width,
            height=image.height,
            timestamp=timestamp,
            changed=result.changed,
        )

    def _timestamp_ms(self) -> int:
        """Current wall-clock time in ms, or 0 if the clock cannot be read."""
        try:
            millis = int(self._clock() * 1000)
        except Exception as e:
            logger.warning(f"Clock read failed, using timestamp 0: {e}")
            return 0
        return max(millis, 0)
