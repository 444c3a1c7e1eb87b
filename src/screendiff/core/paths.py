"""
Data Directory Structure Management for screendiff

All paths are relative to the DATA_ROOT (~/.screendiff by default).

Directory structure:
    .screendiff/
    ├── logs/                                  # Rotating text and JSON logs
    └── captures/YYYYMMDD/                     # PNGs saved by `screendiff capture`
        └── capture-HHMMSSmmm.png
"""

import logging
import os
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)

# Allow override via environment variable for testing
_data_root_override = os.environ.get("SCREENDIFF_DATA_ROOT")
DATA_ROOT: Path = Path(_data_root_override) if _data_root_override else Path.home() / ".screendiff"

# Primary directories
LOGS_DIR: Path = DATA_ROOT / "logs"
CAPTURES_DIR: Path = DATA_ROOT / "captures"

# All directories that should exist
_REQUIRED_DIRS: tuple[Path, ...] = (
    LOGS_DIR,
    CAPTURES_DIR,
)


def ensure_data_directories() -> dict[str, bool]:
    """
    Ensure all required data directories exist.

    Idempotent and safe to call multiple times.

    Returns:
        Dictionary mapping directory names to whether they were created (True)
        or already existed (False).
    """
    results: dict[str, bool] = {}

    for dir_path in _REQUIRED_DIRS:
        try:
            created = not dir_path.exists()
            dir_path.mkdir(parents=True, exist_ok=True)
            results[str(dir_path.relative_to(DATA_ROOT))] = created
            if created:
                logger.info(f"Created directory: {dir_path}")
        except OSError as e:
            logger.error(f"Failed to create directory {dir_path}: {e}")
            raise

    return results


def get_capture_path(timestamp_ms: int) -> Path:
    """
    Get the path for a saved capture.

    Args:
        timestamp_ms: Capture timestamp in milliseconds since the epoch

    Returns:
        Path of the form captures/YYYYMMDD/capture-HHMMSSmmm.png
    """
    dt = datetime.fromtimestamp(timestamp_ms / 1000)
    day_dir = CAPTURES_DIR / dt.strftime("%Y%m%d")
    ts_str = dt.strftime("%H%M%S%f")[:-3]  # HHMMSS + milliseconds
    return day_dir / f"capture-{ts_str}.png"
