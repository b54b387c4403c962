"""Tests for structured logging configuration."""

import io
import json

from hello_server.observability import configure_logging, get_logger


def test_json_format(restore_logging):
    stream = io.StringIO()
    configure_logging(level="INFO", format="json", stream=stream)

    get_logger("hello_server.test").info("server_started", port=3001)

    record = json.loads(stream.getvalue().strip().splitlines()[-1])
    assert record["event"] == "server_started"
    assert record["level"] == "info"
    assert record["port"] == 3001
    assert record["logger"] == "hello_server.test"
    assert "timestamp" in record


def test_level_filters_records(restore_logging):
    stream = io.StringIO()
    configure_logging(level="WARNING", format="json", stream=stream)

    logger = get_logger("hello_server.test")
    logger.info("hidden")
    logger.warning("shown")

    lines = stream.getvalue().strip().splitlines()
    assert [json.loads(line)["event"] for line in lines] == ["shown"]


def test_console_format(restore_logging):
    stream = io.StringIO()
    configure_logging(level="DEBUG", format="console", stream=stream)

    get_logger("hello_server.test").debug("body_rejected", status=400)

    output = stream.getvalue()
    assert "body_rejected" in output
    assert "status=400" in output
