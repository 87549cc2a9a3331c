"""Tests for logger.py -- setup_logging() and JsonFormatter.

Strategy: Mock logging.basicConfig to verify setup_logging passes correct args,
since pytest's log capture plugin interferes with actual basicConfig calls.
"""

import json
import logging
import sys
from unittest.mock import patch

from codemerge.logger import JsonFormatter, setup_logging


class TestSetupLogging:
    @patch("codemerge.logger.logging.basicConfig")
    def test_logs_to_stderr(self, mock_basic, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        setup_logging()

        kwargs = mock_basic.call_args[1]
        handlers = kwargs["handlers"]
        assert len(handlers) == 1
        assert handlers[0].stream is sys.stderr
        assert kwargs["level"] == logging.WARNING

    @patch("codemerge.logger.logging.basicConfig")
    def test_debug_overrides_level(self, mock_basic, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        setup_logging(debug=True)
        assert mock_basic.call_args[1]["level"] == logging.DEBUG

    @patch("codemerge.logger.logging.basicConfig")
    def test_env_level_beats_config_level(self, mock_basic, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "error")
        setup_logging(level="INFO")
        assert mock_basic.call_args[1]["level"] == logging.ERROR

    @patch("codemerge.logger.logging.basicConfig")
    def test_config_level_used_without_env(self, mock_basic, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        setup_logging(level="info")
        assert mock_basic.call_args[1]["level"] == logging.INFO

    @patch("codemerge.logger.logging.basicConfig")
    def test_unknown_level_falls_back(self, mock_basic, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "CHATTY")
        setup_logging()
        assert mock_basic.call_args[1]["level"] == logging.WARNING

    @patch("codemerge.logger.logging.basicConfig")
    def test_log_file_adds_handler(self, mock_basic, tmp_path):
        log_file = tmp_path / "merge.log"
        setup_logging(log_file=str(log_file))

        handlers = mock_basic.call_args[1]["handlers"]
        assert len(handlers) == 2
        assert isinstance(handlers[1], logging.FileHandler)
        assert handlers[1].baseFilename == str(log_file)
        handlers[1].close()

    @patch("codemerge.logger.logging.basicConfig")
    def test_json_format(self, mock_basic):
        setup_logging(debug_format="json")
        handler = mock_basic.call_args[1]["handlers"][0]
        assert isinstance(handler.formatter, JsonFormatter)


class TestJsonFormatter:
    def _record(self, msg, exc_info=None):
        return logging.LogRecord(
            name="codemerge.merge.engine",
            level=logging.WARNING,
            pathname=__file__,
            lineno=1,
            msg=msg,
            args=("a.txt",),
            exc_info=exc_info,
        )

    def test_fields(self):
        out = json.loads(JsonFormatter().format(self._record("skip %s")))
        assert out["level"] == "WARNING"
        assert out["logger"] == "codemerge.merge.engine"
        assert out["msg"] == "skip a.txt"
        assert "ts" in out
        assert "exc" not in out

    def test_exception_included(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            exc_info = sys.exc_info()
        out = json.loads(
            JsonFormatter().format(self._record("fail %s", exc_info))
        )
        assert "RuntimeError: boom" in out["exc"]
