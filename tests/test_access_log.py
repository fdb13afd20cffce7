"""Tests for src/logging/access.py — JSON logging."""

import json
import logging
import sys

import pytest

from src.logging.access import (
    JSONFormatter,
    RequestTimer,
    generate_request_id,
    get_access_logger,
    get_logger,
    request_id_var,
    setup_logging,
)


def _record(msg="hello", **kwargs):
    return logging.LogRecord(
        name="test", level=logging.INFO, pathname="",
        lineno=0, msg=msg, args=(), exc_info=kwargs.get("exc_info"),
    )


class TestJSONFormatter:

    def test_output_is_valid_json(self):
        parsed = json.loads(JSONFormatter().format(_record()))
        assert parsed["message"] == "hello"
        assert parsed["level"] == "INFO"
        assert "timestamp" in parsed

    def test_includes_request_id(self):
        token = request_id_var.set("req-abc123")
        try:
            parsed = json.loads(JSONFormatter().format(_record()))
            assert parsed["request_id"] == "req-abc123"
        finally:
            request_id_var.reset(token)

    def test_includes_audit_data(self):
        record = _record()
        record.audit_data = {"method": "GET", "status": 200}
        parsed = json.loads(JSONFormatter().format(record))
        assert parsed["method"] == "GET"
        assert parsed["status"] == 200

    def test_includes_exception(self):
        try:
            raise ValueError("bad")
        except ValueError:
            record = _record(exc_info=sys.exc_info())
        parsed = json.loads(JSONFormatter().format(record))
        assert "ValueError: bad" in parsed["exception"]


class TestGenerateRequestId:

    def test_length(self):
        assert len(generate_request_id()) == 12

    def test_uniqueness(self):
        ids = {generate_request_id() for _ in range(100)}
        assert len(ids) == 100


class TestRequestTimer:

    def test_measures_elapsed(self):
        with RequestTimer() as timer:
            _ = sum(range(1000))
        assert timer.elapsed_ms >= 0
        assert isinstance(timer.elapsed_ms, float)


class TestLoggers:

    def test_logger_names(self):
        assert get_logger().name == "adapter"
        assert get_logger("lifecycle").name == "adapter.lifecycle"
        assert get_access_logger().name == "adapter.access"


@pytest.fixture
def restore_loggers():
    yield
    for name in ("adapter", "uvicorn"):
        logger = logging.getLogger(name)
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()
        logger.propagate = True
        logger.setLevel(logging.NOTSET)


@pytest.mark.usefixtures("restore_loggers")
class TestSetupLogging:

    def test_configures_adapter_and_uvicorn(self, override_settings):
        override_settings(ACCESS_LOG_FILE="", LOG_LEVEL="debug")
        setup_logging()
        for name in ("adapter", "uvicorn"):
            logger = logging.getLogger(name)
            assert logger.level == logging.DEBUG
            assert logger.propagate is False
            assert any(isinstance(h.formatter, JSONFormatter) for h in logger.handlers)

    def test_optional_file_handler(self, override_settings, tmp_path):
        log_file = tmp_path / "access.log"
        override_settings(ACCESS_LOG_FILE=str(log_file))
        setup_logging()
        logger = logging.getLogger("adapter")
        assert any(isinstance(h, logging.FileHandler) for h in logger.handlers)
