"""screendiff: screen capture with sampled pixel-difference change detection."""

__version__ = "0.1.0"
