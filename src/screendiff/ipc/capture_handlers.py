"""IPC handlers for screen capture.

Exposes the capture engine to the host:
- Listing attached displays
- Capturing a screenshot with change detection
- Reading and replacing the capture configuration
- Resetting the change-detection baseline
"""

import logging
from typing import Any

from screendiff.ipc.models import CaptureConfigModel
from screendiff.ipc.server import ServerContext, handler

logger = logging.getLogger(__name__)


@handler("list_screens")
def handle_list_screens(ctx: ServerContext, params: dict[str, Any]) -> list[dict[str, Any]]:
    """List attached displays in discovery order."""
    return [screen.to_dict() for screen in ctx.screen_capture.list_displays()]


@handler("capture_screen")
def handle_capture_screen(ctx: ServerContext, params: dict[str, Any]) -> dict[str, Any]:
    """Capture the configured display.

    Returns:
        Screenshot dict with base64 PNG data, size, timestamp and changed flag.
    """
    screenshot = ctx.screen_capture.capture()
    logger.debug(
        f"[capture_screen] {screenshot.width}x{screenshot.height}, {len(screenshot.data)} chars"
    )
    return screenshot.to_dict()


@handler("set_capture_config")
def handle_set_capture_config(ctx: ServerContext, params: dict[str, Any]) -> None:
    """Replace the capture configuration and discard the baseline.

    Params:
        config: CaptureConfig fields; omitted fields take their defaults
    """
    config = CaptureConfigModel.model_validate(params.get("config") or {})
    ctx.screen_capture.set_config(config.to_config())
    return None


@handler("get_capture_config")
def handle_get_capture_config(ctx: ServerContext, params: dict[str, Any]) -> dict[str, Any]:
    """Return the current capture configuration."""
    return CaptureConfigModel.from_config(ctx.screen_capture.config).model_dump()


@handler("reset_capture")
def handle_reset_capture(ctx: ServerContext, params: dict[str, Any]) -> None:
    """Force the next capture to report a change."""
    ctx.screen_capture.reset()
    return None
