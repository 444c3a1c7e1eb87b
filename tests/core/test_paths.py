"""
Tests for the paths module.
"""

import os
from pathlib import Path
from unittest import mock


class TestDataDirectories:
    """Test data directory creation and management."""

    def test_ensure_data_directories_creates_all_required_dirs(self, tmp_path: Path):
        """ensure_data_directories creates logs/ and captures/."""
        with mock.patch.dict(os.environ, {"SCREENDIFF_DATA_ROOT": str(tmp_path)}):
            import importlib

            from screendiff.core import paths

            importlib.reload(paths)

            assert not (tmp_path / "logs").exists()
            assert not (tmp_path / "captures").exists()

            results = paths.ensure_data_directories()

            assert (tmp_path / "logs").exists()
            assert (tmp_path / "captures").exists()
            assert results == {"logs": True, "captures": True}

    def test_ensure_data_directories_is_idempotent(self, tmp_path: Path):
        with mock.patch.dict(os.environ, {"SCREENDIFF_DATA_ROOT": str(tmp_path)}):
            import importlib

            from screendiff.core import paths

            importlib.reload(paths)

            paths.ensure_data_directories()
            results = paths.ensure_data_directories()

            assert not any(results.values())


class TestCapturePaths:
    """Test saved-capture path generation."""

    def test_get_capture_path(self, tmp_path: Path):
        with mock.patch.dict(os.environ, {"SCREENDIFF_DATA_ROOT": str(tmp_path)}):
            import importlib
            from datetime import datetime

            from screendiff.core import paths

            importlib.reload(paths)

            timestamp_ms = int(datetime(2024, 3, 15, 14, 30, 5, 123000).timestamp() * 1000)
            path = paths.get_capture_path(timestamp_ms)

            assert path == tmp_path / "captures" / "20240315" / "capture-143005123.png"
