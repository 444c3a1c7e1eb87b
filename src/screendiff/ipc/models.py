"""IPC request/response models for the screendiff command protocol."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from screendiff.capture.types import (
    DEFAULT_CHANGE_THRESHOLD_PERCENT,
    DEFAULT_DIFF_THRESHOLD,
    DEFAULT_MAX_WIDTH,
    DEFAULT_SCREEN_INDEX,
    CaptureConfig,
    Region,
)


class IPCMethod(str, Enum):
    """Available IPC methods."""

    PING = "ping"
    GET_STATUS = "get_status"
    SHUTDOWN = "shutdown"
    # Capture methods
    LIST_SCREENS = "list_screens"
    CAPTURE_SCREEN = "capture_screen"
    SET_CAPTURE_CONFIG = "set_capture_config"
    GET_CAPTURE_CONFIG = "get_capture_config"
    RESET_CAPTURE = "reset_capture"


class IPCRequest(BaseModel):
    """Request model for IPC communication."""

    id: str = Field(..., description="Unique request identifier")
    method: str = Field(..., description="Method to invoke")
    params: dict[str, Any] = Field(default_factory=dict, description="Method parameters")


class IPCResponse(BaseModel):
    """Response model for IPC communication."""

    id: str = Field(..., description="Request identifier this response corresponds to")
    success: bool = Field(..., description="Whether the request succeeded")
    result: Any = Field(default=None, description="Result data if successful")
    error: str | None = Field(default=None, description="Error message if failed")
    error_kind: str | None = Field(default=None, description="Machine-readable failure cause")


class CaptureConfigModel(BaseModel):
    """Wire form of CaptureConfig. Region is [x, y, width, height]."""

    screen_index: int = Field(default=DEFAULT_SCREEN_INDEX, ge=0, description="Display index")
    region: tuple[int, int, int, int] | None = Field(
        default=None, description="Optional [x, y, width, height] sub-rectangle"
    )
    diff_threshold: int = Field(
        default=DEFAULT_DIFF_THRESHOLD, ge=0, le=255, description="Per-channel tolerance"
    )
    change_threshold_percent: float = Field(
        default=DEFAULT_CHANGE_THRESHOLD_PERCENT,
        description="Minimum percentage of differing pixels to report a change",
    )
    max_width: int | None = Field(default=DEFAULT_MAX_WIDTH, description="Output width cap")

    def to_config(self) -> CaptureConfig:
        region = Region(*self.region) if self.region is not None else None
        return CaptureConfig(
            screen_index=self.screen_index,
            region=region,
            diff_threshold=self.diff_threshold,
            change_threshold_percent=self.change_threshold_percent,
            max_width=self.max_width,
        )

    @classmethod
    def from_config(cls, config: CaptureConfig) -> "CaptureConfigModel":
        return cls.model_validate(config.to_dict())


class BackendStatus(BaseModel):
    """Status information about the backend."""

    version: str = Field(..., description="Backend version")
    running: bool = Field(default=True, description="Whether the backend is running")
    uptime_seconds: float = Field(..., description="Seconds since backend started")
    python_version: str = Field(..., description="Python version")
    capture_config: dict[str, Any] | None = Field(
        default=None, description="Current capture configuration"
    )
    has_baseline: bool = Field(default=False, description="Whether a baseline frame is held")
