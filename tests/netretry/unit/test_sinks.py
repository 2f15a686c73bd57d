from __future__ import annotations

import io
import logging

import pytest

from netretry.sinks import LoggerWarningSink, StreamWarningSink
from tests.netretry.support.fakes import FakeLogger


class _CaptureHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__()
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


def test_logger_sink_forwards_to_structured_logger(fake_logger: FakeLogger) -> None:
    LoggerWarningSink(fake_logger).warn("spurious network error (2 tries remaining)")

    assert fake_logger.calls == [
        ("warning", "spurious network error (2 tries remaining)", {})
    ]


def test_logger_sink_supports_stdlib_logger() -> None:
    logger = logging.getLogger("tests.netretry.sinks")
    logger.handlers.clear()
    logger.propagate = False
    logger.setLevel(logging.WARNING)
    handler = _CaptureHandler()
    logger.addHandler(handler)

    LoggerWarningSink(logger).warn("retrying")

    assert [record.getMessage() for record in handler.records] == ["retrying"]
    assert handler.records[0].levelno == logging.WARNING


def test_stream_sink_writes_prefixed_line() -> None:
    stream = io.StringIO()

    StreamWarningSink(stream).warn("retrying")

    assert stream.getvalue() == "warning: retrying\n"


def test_stream_sink_propagates_write_errors() -> None:
    stream = io.StringIO()
    stream.close()

    with pytest.raises(ValueError):
        StreamWarningSink(stream).warn("retrying")
