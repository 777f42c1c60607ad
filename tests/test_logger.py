"""Tests for logging setup."""

import logging

import config
from src.logger import get_logger, setup_logger


class TestSetupLogger:
    def test_writes_named_log_file(self, tmp_path, monkeypatch):
        monkeypatch.setattr(config, "LOGS_DIR", tmp_path / "logs")

        logger = setup_logger("gradedreader.test", log_file="run.log")
        logger.info("lesson saved")
        for handler in logger.handlers:
            handler.flush()

        assert "lesson saved" in (tmp_path / "logs" / "run.log").read_text(encoding="utf-8")
        assert get_logger("gradedreader.test") is logger

    def test_repeated_setup_does_not_duplicate_handlers(self, tmp_path, monkeypatch):
        monkeypatch.setattr(config, "LOGS_DIR", tmp_path)

        setup_logger("gradedreader.twice", log_file="a.log")
        logger = setup_logger("gradedreader.twice", log_file="b.log")

        assert len(logger.handlers) == 2
        assert logging.getLogger("httpx").level == logging.WARNING
        for handler in logger.handlers:
            handler.close()
