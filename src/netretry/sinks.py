"""Destinations for the warnings printed before each retry."""

from __future__ import annotations

from typing import Protocol, TextIO

from netretry.logging import AnyLogger, log_warning


class WarningSink(Protocol):
    """Receives one human-readable warning per retry.

    Implementations may raise; the retry loop treats that as fatal.
    """

    def warn(self, message: str) -> None:
        """Emit one warning line."""


class LoggerWarningSink:
    """Send retry warnings to a structlog or stdlib logger."""

    def __init__(self, logger: AnyLogger) -> None:
        self._logger = logger

    def warn(self, message: str) -> None:
        log_warning(self._logger, message)


class StreamWarningSink:
    """Write retry warnings to a text stream, one line each."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream

    def warn(self, message: str) -> None:
        self._stream.write(f"warning: {message}\n")
        self._stream.flush()
