"""Optional client features whose availability depends on the platform build.

Some platforms ship HTTP client builds that lack optional features. Rather
than branching at every call site, a :class:`CapabilityPolicy` is chosen once
at startup and handed to whatever enables such features.
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from enum import StrEnum

from netretry.logging import AnyLogger, log_warning


class CapabilityPolicy(StrEnum):
    """How to react when an optional client feature cannot be enabled."""

    STRICT = "strict"
    LENIENT = "lenient"


class CapabilityError(RuntimeError):
    """Raised when a required client feature cannot be enabled."""


def detect_capability_policy(platform: str | None = None) -> CapabilityPolicy:
    """Pick the policy for ``platform`` (defaults to the running platform)."""
    resolved = sys.platform if platform is None else platform
    if resolved == "darwin":
        return CapabilityPolicy.LENIENT
    return CapabilityPolicy.STRICT


def enable_capability(
    policy: CapabilityPolicy,
    description: str,
    enable: Callable[[], None],
    *,
    logger: AnyLogger,
) -> bool:
    """Enable one optional feature according to ``policy``.

    Args:
        policy: Strategy selected at startup.
        description: Short feature name used in messages.
        enable: Callable that turns the feature on, raising on failure.
        logger: Logger receiving the warning when a failure is ignored.

    Returns:
        True when the feature was enabled, False when a failure was ignored.

    Raises:
        CapabilityError: When enabling fails under ``CapabilityPolicy.STRICT``.
    """
    try:
        enable()
    except Exception as exc:
        if policy is CapabilityPolicy.LENIENT:
            log_warning(
                logger,
                f"ignoring {description} error",
                feature=description,
                error=str(exc),
            )
            return False
        raise CapabilityError(
            f"failed to enable {description}, is the client built right?"
        ) from exc
    return True
