from __future__ import annotations

from typing import TextIO

import structlog
from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from netretry.capabilities import CapabilityPolicy, detect_capability_policy
from netretry.logging import configure_structlog, get_log_level_value

DEFAULT_RETRY_COUNT = 2
ENV_PREFIX = "NET_"


def prefixed_settings_config(prefix: str) -> SettingsConfigDict:
    """Build standard Pydantic settings config for prefixed environments."""
    return SettingsConfigDict(env_prefix=prefix, case_sensitive=False, frozen=True)


class NetSettings(BaseSettings):
    """Network options read from ``NET_*`` environment variables."""

    model_config = prefixed_settings_config(ENV_PREFIX)

    retry: int | None = None
    http2: bool = False
    capability_policy: CapabilityPolicy | None = None
    timeout_seconds: float = 30.0
    log_level: str = "INFO"

    @field_validator("capability_policy", mode="before")
    @classmethod
    def _normalize_capability_policy(cls, value: object) -> object:
        if isinstance(value, str):
            normalized = value.strip().lower()
            return normalized or None
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @model_validator(mode="after")
    def _validate_net_settings(self) -> NetSettings:
        if self.retry is not None and self.retry < 0:
            raise ValueError("retry must be >= 0")
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")
        get_log_level_value(self.log_level)
        return self

    def retry_count(self) -> int:
        """Return retries allowed after the first attempt."""
        if self.retry is None:
            return DEFAULT_RETRY_COUNT
        return self.retry

    def configure_logging(
        self, *, stream: TextIO | None = None
    ) -> structlog.stdlib.BoundLogger:
        """Configure structlog at the configured ``log_level``."""
        return configure_structlog(log_level=self.log_level, stream=stream)

    def resolved_capability_policy(self) -> CapabilityPolicy:
        """Return the configured capability policy, detecting it when unset."""
        if self.capability_policy is None:
            return detect_capability_policy()
        return self.capability_policy


def load_net_settings() -> NetSettings:
    """Read network settings from the environment.

    Raises:
        pydantic.ValidationError: When a configured value is invalid.
    """
    return NetSettings()
