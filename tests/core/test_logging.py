"""
Tests for logging setup.
"""

import json
import logging
from pathlib import Path

import pytest

from screendiff.core.logging import log_timing, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    saved_handlers = root.handlers[:]
    saved_level = root.level
    yield root
    for handler in root.handlers[:]:
        if handler not in saved_handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in saved_handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(saved_level)


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_writes_text_and_json_logs(self, tmp_path: Path, restore_root_logger):
        setup_logging(console_level="WARNING", log_dir=tmp_path, use_colors=False)

        logging.getLogger("screendiff.test").info("hello capture", extra={"width": 100})
        for handler in restore_root_logger.handlers:
            handler.flush()

        assert "hello capture" in (tmp_path / "screendiff.log").read_text()
        records = [json.loads(line) for line in (tmp_path / "screendiff.jsonl").read_text().splitlines()]
        record = next(r for r in records if r["message"] == "hello capture")
        assert record["logger"] == "screendiff.test"
        assert record["extra"] == {"width": 100}

    def test_console_only(self, tmp_path: Path, restore_root_logger):
        setup_logging(log_dir=tmp_path, log_file=None, structured_file=None)

        assert len(restore_root_logger.handlers) == 1
        assert list(tmp_path.iterdir()) == []

    def test_unknown_level(self, restore_root_logger):
        with pytest.raises(ValueError, match="Unknown log level"):
            setup_logging(console_level="LOUD", log_file=None, structured_file=None)


class TestLogTiming:
    def test_log_timing_formats_duration(self, caplog):
        logger = logging.getLogger("screendiff.timing")
        with caplog.at_level(logging.DEBUG, logger="screendiff.timing"):
            log_timing(logger, "capture", 0.0125)
            log_timing(logger, "capture", 2.5)

        assert "capture completed in 12.5ms" in caplog.text
        assert "capture completed in 2.50s" in caplog.text
