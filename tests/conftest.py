"""Shared fixtures."""

import pytest

from screendiff.capture.screen import ScreenCapture
from screendiff.capture.types import CaptureConfig
from tests.fakes import FakeCaptureSource

# Fixed wall clock: 2023-11-14T22:13:20.5Z
FIXED_CLOCK = 1_700_000_000.5


@pytest.fixture
def source() -> FakeCaptureSource:
    return FakeCaptureSource()


@pytest.fixture
def screen_capture(source: FakeCaptureSource) -> ScreenCapture:
    return ScreenCapture(config=CaptureConfig(), source=source, clock=lambda: FIXED_CLOCK)
