"""
Environment-driven configuration for screendiff.

Variables (all optional):
    SCREENDIFF_SCREEN_INDEX               display to capture (default 0)
    SCREENDIFF_REGION                     "x,y,width,height" sub-rectangle
    SCREENDIFF_DIFF_THRESHOLD             per-channel tolerance (default 30)
    SCREENDIFF_CHANGE_THRESHOLD_PERCENT   minimum differing percentage (default 0.5)
    SCREENDIFF_MAX_WIDTH                  output width cap, "none" or 0 to disable (default 1920)
    SCREENDIFF_POLL_INTERVAL              seconds between captures for `watch` (default 2.0)
    SCREENDIFF_LOG_LEVEL                  console log level (default INFO)
"""

import os
from dataclasses import dataclass

from screendiff.capture.daemon import DEFAULT_POLL_INTERVAL
from screendiff.capture.types import (
    DEFAULT_CHANGE_THRESHOLD_PERCENT,
    DEFAULT_DIFF_THRESHOLD,
    DEFAULT_MAX_WIDTH,
    DEFAULT_SCREEN_INDEX,
    CaptureConfig,
    Region,
)

ENV_PREFIX = "SCREENDIFF_"


def _get_env(name: str, default: str | None = None) -> str | None:
    """Return a stripped environment variable or the provided default value."""
    value = os.getenv(ENV_PREFIX + name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _parse(name: str, value: str, parser):
    try:
        return parser(value)
    except ValueError as e:
        raise ValueError(f"Invalid value for {ENV_PREFIX}{name}: {value!r} ({e})") from e


def _get_env_int(name: str, default: int) -> int:
    value = _get_env(name)
    return default if value is None else _parse(name, value, int)


def _get_env_float(name: str, default: float) -> float:
    value = _get_env(name)
    return default if value is None else _parse(name, value, float)


def parse_region(text: str) -> Region:
    """
    Parse an "x,y,width,height" string into a Region.

    Raises:
        ValueError: If the text does not hold four integers
    """
    parts = [part.strip() for part in text.split(",")]
    if len(parts) != 4:
        raise ValueError(f"expected 'x,y,width,height', got {text!r}")
    x, y, width, height = (int(part) for part in parts)
    return Region(x=x, y=y, width=width, height=height)


def _get_env_max_width() -> int | None:
    value = _get_env("MAX_WIDTH")
    if value is None:
        return DEFAULT_MAX_WIDTH
    if value.lower() in {"none", "off", "0"}:
        return None
    return _parse("MAX_WIDTH", value, int)


def capture_config_from_env() -> CaptureConfig:
    """Build the startup CaptureConfig from environment variables."""
    region_text = _get_env("REGION")
    return CaptureConfig(
        screen_index=_get_env_int("SCREEN_INDEX", DEFAULT_SCREEN_INDEX),
        region=_parse("REGION", region_text, parse_region) if region_text else None,
        diff_threshold=_get_env_int("DIFF_THRESHOLD", DEFAULT_DIFF_THRESHOLD),
        change_threshold_percent=_get_env_float(
            "CHANGE_THRESHOLD_PERCENT", DEFAULT_CHANGE_THRESHOLD_PERCENT
        ),
        max_width=_get_env_max_width(),
    )


@dataclass(frozen=True)
class AppConfig:
    """Process-level settings."""

    capture: CaptureConfig
    poll_interval: float
    log_level: str

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Load settings from environment variables."""
        return cls(
            capture=capture_config_from_env(),
            poll_interval=_get_env_float("POLL_INTERVAL", DEFAULT_POLL_INTERVAL),
            log_level=_get_env("LOG_LEVEL", "INFO") or "INFO",
        )
