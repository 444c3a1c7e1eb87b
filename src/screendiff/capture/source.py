"""
Platform Screen Sources for screendiff

A capture source enumerates displays and grabs raw RGBA frames from them.
ScreenCapture only talks to the CaptureSource protocol; MSSCaptureSource is
the default implementation, backed by mss.
"""

import logging
from typing import Protocol

import mss
from PIL import Image

from screendiff.capture.types import DisplayDescriptor

logger = logging.getLogger(__name__)


class CaptureSource(Protocol):
    """Enumerates displays and grabs raw frames from them."""

    def enumerate_displays(self) -> list[DisplayDescriptor]:
        """Return all attached displays in discovery order."""

    def capture_full_display(self, display: DisplayDescriptor) -> Image.Image:
        """Grab the whole display as an RGBA image."""

    def capture_region(
        self, display: DisplayDescriptor, x: int, y: int, width: int, height: int
    ) -> Image.Image:
        """Grab a display-relative rectangle as an RGBA image."""


def _shot_to_image(shot) -> Image.Image:
    """Convert an mss screenshot to an RGBA Pillow image."""
    # mss hands back BGRA rows with an unused alpha byte
    image = Image.frombytes("RGB", shot.size, shot.bgra, "raw", "BGRX")
    return image.convert("RGBA")


class MSSCaptureSource:
    """
    Capture source backed by mss.

    A fresh mss session is opened for each call because mss sessions are not
    safe to share across threads on every platform.
    """

    def enumerate_displays(self) -> list[DisplayDescriptor]:
        with mss.mss() as session:
            # monitors[0] is the union of all displays
            monitors = [dict(m) for m in session.monitors[1:]]

        displays = []
        for monitor in monitors:
            displays.append(
                DisplayDescriptor(
                    handle=monitor,
                    x=int(monitor["left"]),
                    y=int(monitor["top"]),
                    width=int(monitor["width"]),
                    height=int(monitor["height"]),
                    # mss does not report the primary flag; the primary display sits at the origin
                    is_primary=(monitor["left"] == 0 and monitor["top"] == 0),
                )
            )

        logger.debug(f"Enumerated {len(displays)} displays")
        return displays

    def capture_full_display(self, display: DisplayDescriptor) -> Image.Image:
        with mss.mss() as session:
            shot = session.grab(display.handle)
        return _shot_to_image(shot)

    def capture_region(
        self, display: DisplayDescriptor, x: int, y: int, width: int, height: int
    ) -> Image.Image:
        if width <= 0 or height <= 0:
            raise ValueError(f"Region size must be positive, got {width}x{height}")
        if x < 0 or y < 0 or x + width > display.width or y + height > display.height:
            raise ValueError(
                f"Region ({x}, {y}, {width}, {height}) lies outside the "
                f"{display.width}x{display.height} display"
            )

        area = {
            "left": display.x + x,
            "top": display.y + y,
            "width": width,
            "height": height,
        }
        with mss.mss() as session:
            shot = session.grab(area)
        return _shot_to_image(shot)
