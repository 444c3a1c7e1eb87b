"""
Continuous Capture Manager for screendiff

Polls ScreenCapture at a fixed interval on a background thread. The next
capture is scheduled only after the previous one finished, so captures never
overlap even when a grab takes longer than the interval.
"""

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from screendiff.capture.errors import CaptureError
from screendiff.capture.screen import ScreenCapture
from screendiff.capture.types import Screenshot
from screendiff.core.logging import log_timing

logger = logging.getLogger(__name__)

# Default polling interval (seconds)
DEFAULT_POLL_INTERVAL = 2.0


@dataclass
class CaptureStats:
    """Statistics about capture manager activity."""

    captures_total: int = 0
    changed_total: int = 0
    errors: int = 0
    start_time: datetime | None = None


class CaptureManager:
    """
    Runs periodic captures against a shared ScreenCapture.

    Callbacks run on the capture thread. A failing callback is logged and
    does not stop the loop.
    """

    def __init__(
        self,
        screen_capture: ScreenCapture,
        interval: float = DEFAULT_POLL_INTERVAL,
        on_capture: Callable[[Screenshot], None] | None = None,
        on_error: Callable[[Exception], None] | None = None,
    ):
        """
        Initialize the capture manager.

        Args:
            screen_capture: Shared capture state to poll
            interval: Target seconds between the starts of consecutive captures
            on_capture: Called with each successful screenshot
            on_error: Called with each capture error
        """
        self.screen_capture = screen_capture
        self.interval = interval
        self.on_capture = on_capture
        self.on_error = on_error

        self._running = False
        self._thread: threading.Thread | None = None
        self._shutdown_event = threading.Event()
        self._stats = CaptureStats()
        self._last_screenshot: Screenshot | None = None

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def last_screenshot(self) -> Screenshot | None:
        return self._last_screenshot

    def get_stats(self) -> CaptureStats:
        """Get current capture statistics."""
        return self._stats

    def start(self, interval: float | None = None, blocking: bool = False) -> None:
        """
        Start capturing. The first capture happens immediately.

        Args:
            interval: Override the polling interval
            blocking: If True, run in the current thread (blocks)
        """
        if self._running:
            logger.warning("Capture manager already running")
            return

        if interval is not None:
            self.interval = interval

        self._running = True
        self._stats = CaptureStats(start_time=datetime.now())
        self._shutdown_event.clear()

        logger.info(f"Capture manager starting (interval: {self.interval}s)")

        if blocking:
            self._run_loop()
        else:
            self._thread = threading.Thread(target=self._run_loop, daemon=True)
            self._thread.start()

    def stop(self, timeout: float = 5.0) -> None:
        """
        Stop capturing.

        Args:
            timeout: Maximum time to wait for the capture thread to finish
        """
        if not self._running:
            return

        logger.info("Stopping capture manager...")
        self._running = False
        self._shutdown_event.set()

        if self._thread and self._thread.is_alive() and self._thread is not threading.current_thread():
            self._thread.join(timeout=timeout)

        logger.info("Capture manager stopped")

    def capture_once(self) -> Screenshot | None:
        """Perform a single capture, updating stats and invoking callbacks."""
        started = time.monotonic()
        try:
            screenshot = self.screen_capture.capture()
        except CaptureError as e:
            logger.error(f"Capture error: {e}")
            self._stats.errors += 1
            self._notify_error(e)
            return None

        log_timing(logger, "capture", time.monotonic() - started, changed=screenshot.changed)
        self._stats.captures_total += 1
        if screenshot.changed:
            self._stats.changed_total += 1
        self._last_screenshot = screenshot

        if self.on_capture is not None:
            try:
                self.on_capture(screenshot)
            except Exception as e:
                logger.error(f"Capture callback error: {e}")

        return screenshot

    def _notify_error(self, error: Exception) -> None:
        if self.on_error is None:
            return
        try:
            self.on_error(error)
        except Exception as e:
            logger.error(f"Error callback error: {e}")

    def _run_loop(self) -> None:
        """Main capture loop."""
        while self._running and not self._shutdown_event.is_set():
            loop_start = time.time()

            try:
                self.capture_once()
            except Exception as e:
                logger.exception(f"Unexpected capture error: {e}")
                self._stats.errors += 1
                self._notify_error(e)

            # Sleep for remaining interval
            elapsed = time.time() - loop_start
            sleep_time = max(0, self.interval - elapsed)
            if sleep_time > 0:
                self._shutdown_event.wait(timeout=sleep_time)

        self._running = False
