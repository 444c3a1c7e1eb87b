"""
screendiff Core Module

Path management, configuration and logging helpers.
"""

from .paths import (
    CAPTURES_DIR,
    DATA_ROOT,
    LOGS_DIR,
    ensure_data_directories,
    get_capture_path,
)

__all__ = [
    # Directory paths
    "DATA_ROOT",
    "LOGS_DIR",
    "CAPTURES_DIR",
    # Functions
    "ensure_data_directories",
    "get_capture_path",
]
