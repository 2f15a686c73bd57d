from __future__ import annotations

import pytest

from netretry.errors import FetchError, HttpNotSuccessful
from netretry.retry import Retry, with_retry_async
from netretry.settings import NetSettings
from tests.netretry.support.fakes import (
    FailingSink,
    RecordingSink,
    ScriptedOperation,
)

pytestmark = pytest.mark.asyncio


async def test_run_async_retries_spurious_fetch_errors(sink: RecordingSink) -> None:
    first = FetchError("packet line truncated", spurious=True)
    operation = ScriptedOperation([first, "fetched"])

    result = await Retry(2, sink=sink).run_async(operation.run_async)

    assert result == "fetched"
    assert operation.calls == 2
    assert sink.messages == [
        "spurious network error (2 tries remaining): packet line truncated"
    ]


async def test_run_async_raises_fatal_fetch_error_immediately(
    sink: RecordingSink,
) -> None:
    error = FetchError("object not found", spurious=False)
    operation = ScriptedOperation([error, "unreachable"])

    with pytest.raises(FetchError) as excinfo:
        await Retry(2, sink=sink).run_async(operation.run_async)

    assert excinfo.value is error
    assert sink.messages == []


async def test_run_async_stops_at_budget(sink: RecordingSink) -> None:
    errors = [
        HttpNotSuccessful(code=500, url="https://example.com"),
        HttpNotSuccessful(code=502, url="https://example.com"),
        HttpNotSuccessful(code=503, url="https://example.com"),
    ]
    operation = ScriptedOperation(errors)

    with pytest.raises(HttpNotSuccessful) as excinfo:
        await Retry(1, sink=sink).run_async(operation.run_async)

    assert excinfo.value is errors[1]
    assert operation.calls == 2


async def test_run_async_aborts_when_warning_sink_fails() -> None:
    operation = ScriptedOperation(
        [HttpNotSuccessful(code=500, url="https://example.com"), "unreachable"]
    )

    with pytest.raises(OSError):
        await Retry(2, sink=FailingSink()).run_async(operation.run_async)

    assert operation.calls == 1


async def test_with_retry_async_uses_settings_budget(sink: RecordingSink) -> None:
    error = HttpNotSuccessful(code=500, url="https://example.com")
    operation = ScriptedOperation([error, "ok"])

    with pytest.raises(HttpNotSuccessful) as excinfo:
        await with_retry_async(
            NetSettings(retry=0),
            operation.run_async,
            sink=sink,
        )

    assert excinfo.value is error
    assert sink.messages == []


async def test_with_retry_async_default_budget_recovers(sink: RecordingSink) -> None:
    operation = ScriptedOperation(
        [HttpNotSuccessful(code=500, url="https://example.com"), "ok"]
    )

    result = await with_retry_async(NetSettings(), operation.run_async, sink=sink)

    assert result == "ok"
    assert len(sink.messages) == 1
