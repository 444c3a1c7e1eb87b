"""Command-line interface for screendiff."""

import logging
import signal
from pathlib import Path

import fire
from dotenv import load_dotenv

# Load .env before screendiff modules read SCREENDIFF_DATA_ROOT
load_dotenv()

from screendiff.capture.codec import decode_screenshot_data  # noqa: E402
from screendiff.capture.daemon import CaptureManager  # noqa: E402
from screendiff.capture.screen import ScreenCapture  # noqa: E402
from screendiff.capture.types import Screenshot  # noqa: E402
from screendiff.core.config import AppConfig  # noqa: E402
from screendiff.core.logging import setup_logging  # noqa: E402
from screendiff.core.paths import ensure_data_directories, get_capture_path  # noqa: E402

logger = logging.getLogger(__name__)


class ScreenDiffCLI:
    """screendiff CLI commands."""

    def __init__(self, log_level: str | None = None, log_files: bool = True):
        """
        Args:
            log_level: Console log level (defaults to SCREENDIFF_LOG_LEVEL or INFO)
            log_files: Also write rotating log files under the data directory
        """
        self._config = AppConfig.from_env()
        level = log_level or self._config.log_level
        if log_files:
            ensure_data_directories()
            setup_logging(console_level=level)
        else:
            setup_logging(console_level=level, log_file=None, structured_file=None)

    def _screen_capture(self) -> ScreenCapture:
        return ScreenCapture(config=self._config.capture)

    def serve(self) -> None:
        """Start the IPC server.

        Reads line-delimited JSON requests from stdin and writes responses to
        stdout. Logs go to stderr.
        """
        from screendiff.ipc.server import run_server  # noqa: E402

        run_server(self._screen_capture())

    def screens(self) -> list[dict]:
        """List attached displays."""
        return [screen.to_dict() for screen in self._screen_capture().list_displays()]

    def capture(self, output: str | None = None, save: bool = False) -> dict:
        """Capture the configured display once.

        Args:
            output: Write the PNG to this path
            save: Write the PNG under the data directory when no output is given
        """
        screenshot = self._screen_capture().capture()

        path = None
        if output:
            path = Path(output)
        elif save:
            path = get_capture_path(screenshot.timestamp)
        if path is not None:
            path.parent.mkdir(parents=True, exist_ok=True)
            decode_screenshot_data(screenshot.data).save(path, "PNG")
            logger.info(f"Saved capture to {path}")

        return {
            "width": screenshot.width,
            "height": screenshot.height,
            "timestamp": screenshot.timestamp,
            "changed": screenshot.changed,
            "path": str(path) if path else None,
        }

    def watch(self, interval: float | None = None, save_changes: bool = False) -> None:
        """Poll the screen and log every detected change.

        Args:
            interval: Seconds between captures (defaults to SCREENDIFF_POLL_INTERVAL)
            save_changes: Save a PNG under the data directory for each change
        """

        def on_capture(screenshot: Screenshot) -> None:
            if not screenshot.changed:
                return
            logger.info(f"Screen changed ({screenshot.width}x{screenshot.height})")
            if save_changes:
                path = get_capture_path(screenshot.timestamp)
                path.parent.mkdir(parents=True, exist_ok=True)
                decode_screenshot_data(screenshot.data).save(path, "PNG")

        manager = CaptureManager(
            self._screen_capture(),
            interval=interval if interval is not None else self._config.poll_interval,
            on_capture=on_capture,
        )

        # Handle graceful shutdown
        def signal_handler(sig, frame):
            logger.info("Stopping capture manager...")
            manager.stop()

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

        manager.start(blocking=True)

        stats = manager.get_stats()
        logger.info(
            f"Captures: {stats.captures_total} (changed: {stats.changed_total}, errors: {stats.errors})"
        )


def main() -> None:
    """Main entry point for the screendiff CLI."""
    fire.Fire(ScreenDiffCLI)


if __name__ == "__main__":
    main()
