from __future__ import annotations

import pytest

from tests.netretry.support.fakes import FakeLogger, RecordingSink


@pytest.fixture
def fake_logger() -> FakeLogger:
    """Provide a fresh structured logger test double per test."""
    return FakeLogger()


@pytest.fixture
def sink() -> RecordingSink:
    """Provide a fresh recording warning sink per test."""
    return RecordingSink()


@pytest.fixture(autouse=True)
def _clear_net_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host ``NET_*`` variables out of settings-driven tests."""
    for name in (
        "NET_RETRY",
        "NET_HTTP2",
        "NET_CAPABILITY_POLICY",
        "NET_TIMEOUT_SECONDS",
        "NET_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
