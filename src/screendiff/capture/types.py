"""Domain types for screen capture and change detection."""

from dataclasses import asdict, dataclass
from typing import Any

DEFAULT_SCREEN_INDEX = 0
DEFAULT_DIFF_THRESHOLD = 30
DEFAULT_CHANGE_THRESHOLD_PERCENT = 0.5
DEFAULT_MAX_WIDTH = 1920


@dataclass(frozen=True)
class Region:
    """A rectangle in display-relative source pixels."""

    x: int
    y: int
    width: int
    height: int


@dataclass(frozen=True)
class CaptureConfig:
    """
    Parameters for one capture session.

    Values are accepted as given. A negative change_threshold_percent simply
    makes every comparison report a change.
    """

    screen_index: int = DEFAULT_SCREEN_INDEX
    region: Region | None = None
    diff_threshold: int = DEFAULT_DIFF_THRESHOLD
    change_threshold_percent: float = DEFAULT_CHANGE_THRESHOLD_PERCENT
    max_width: int | None = DEFAULT_MAX_WIDTH

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the region as an [x, y, width, height] list."""
        data = asdict(self)
        if self.region is not None:
            data["region"] = [self.region.x, self.region.y, self.region.width, self.region.height]
        return data


@dataclass(frozen=True)
class Screenshot:
    """Result of a capture. `data` is base64-encoded PNG."""

    data: str
    width: int
    height: int
    timestamp: int
    changed: bool

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class DisplayDescriptor:
    """A display as reported by a capture source."""

    handle: Any
    x: int
    y: int
    width: int
    height: int
    is_primary: bool = False


@dataclass(frozen=True)
class ScreenInfo:
    """Information about an attached display."""

    index: int
    name: str
    x: int
    y: int
    width: int
    height: int
    is_primary: bool

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
