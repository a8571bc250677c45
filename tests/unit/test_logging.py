"""Tests for structured logging."""

import json
import logging

import pytest

from leaderlock.observability.logging import (
    ConsoleFormatter,
    JsonFormatter,
    LogContext,
    bucket_var,
    instance_id_var,
)


def make_record(msg: str = "Obtained leader lock", **extra: str) -> logging.LogRecord:
    record = logging.LogRecord(
        name="leaderlock.locker",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=None,
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:
    """Tests for JsonFormatter."""

    def test_basic_fields(self) -> None:
        """Output carries level, logger and message."""
        data = json.loads(JsonFormatter().format(make_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "leaderlock.locker"
        assert data["message"] == "Obtained leader lock"
        assert "timestamp" in data

    def test_extra_fields(self) -> None:
        """Fields passed via extra appear at the top level."""
        record = make_record(key="leader", id="abc")

        data = json.loads(JsonFormatter().format(record))

        assert data["key"] == "leader"
        assert data["id"] == "abc"

    def test_log_context(self) -> None:
        """Context variables are included while the context is active."""
        with LogContext(instance_id="abc", bucket="orders"):
            data = json.loads(JsonFormatter().format(make_record()))

        assert data["instance_id"] == "abc"
        assert data["bucket"] == "orders"
        assert instance_id_var.get() == ""
        assert bucket_var.get() == ""


class TestConsoleFormatter:
    """Tests for ConsoleFormatter."""

    def test_format(self) -> None:
        """Console lines include logger, message and extra fields."""
        line = ConsoleFormatter(use_colors=False).format(make_record(key="leader"))

        assert "leaderlock.locker" in line
        assert "Obtained leader lock" in line
        assert "key=leader" in line


class TestLogContext:
    """Tests for LogContext."""

    def test_unknown_field(self) -> None:
        """Only known context fields are accepted."""
        with pytest.raises(TypeError, match="tenant_id"):
            LogContext(tenant_id="t1")
