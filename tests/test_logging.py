# tests/test_logging.py
"""
Logging Tests - Unit Tests for Logging Configuration

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- chainprobe.shared.logging_conf (setup_logging)
- unittest.mock (patches basicConfig so the test run's root logger is untouched)
"""
import logging
from logging.handlers import RotatingFileHandler
from unittest.mock import patch

import pytest  # Testing framework for writing and running tests

from chainprobe.shared.logging_conf import LOG_FILENAME, LOG_FORMAT, setup_logging


@pytest.fixture
def basic_config():
    with patch("chainprobe.shared.logging_conf.logging.basicConfig") as mock_config:
        yield mock_config
    for call in mock_config.call_args_list:
        for handler in call.kwargs["handlers"]:
            handler.close()


class TestSetupLogging:
    def test_rotating_file_handler(self, tmp_path, basic_config):
        setup_logging(level="debug", log_dir=tmp_path / "logs", max_bytes=1024, backup_count=2, log_stdout=False)

        kwargs = basic_config.call_args.kwargs
        handlers = kwargs["handlers"]
        assert len(handlers) == 1
        assert isinstance(handlers[0], RotatingFileHandler)
        assert handlers[0].maxBytes == 1024
        assert handlers[0].backupCount == 2
        assert kwargs["level"] == logging.DEBUG
        assert kwargs["format"] == LOG_FORMAT
        assert kwargs["force"] is True
        assert (tmp_path / "logs" / "chainprobe.log").exists()

    def test_stdout_and_file(self, tmp_path, basic_config):
        setup_logging(level=logging.WARNING, log_file=tmp_path / "x" / "app.log", log_stdout=True)

        kinds = {type(h) for h in basic_config.call_args.kwargs["handlers"]}
        assert kinds == {logging.StreamHandler, RotatingFileHandler}
        assert logging.getLogger("urllib3").level == logging.WARNING

    def test_stdout_disabled_by_env(self, monkeypatch, tmp_path, basic_config):
        monkeypatch.setenv("CHAINPROBE_LOG_STDOUT", "false")
        setup_logging(log_file=tmp_path / "only.log")

        handlers = basic_config.call_args.kwargs["handlers"]
        assert [type(h) for h in handlers] == [RotatingFileHandler]

    def test_log_dir_wins_over_log_file(self, tmp_path, basic_config):
        setup_logging(log_file=tmp_path / "ignored.log", log_dir=tmp_path / "d", log_stdout=False)

        handler = basic_config.call_args.kwargs["handlers"][0]
        assert handler.baseFilename == str(tmp_path / "d" / LOG_FILENAME)
        assert not (tmp_path / "ignored.log").exists()

    def test_falls_back_to_stdout_without_destinations(self, basic_config):
        setup_logging(log_stdout=False)

        handlers = basic_config.call_args.kwargs["handlers"]
        assert [type(h) for h in handlers] == [logging.StreamHandler]
        assert handlers[0].formatter._fmt == LOG_FORMAT
