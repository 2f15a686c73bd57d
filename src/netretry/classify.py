"""Decide whether a failed network operation is worth retrying."""

from __future__ import annotations

from netretry.errors import (
    CurlCode,
    CurlError,
    FetchError,
    GitError,
    GitErrorClass,
    GitErrorCode,
    HttpNotSuccessful,
    iter_causes,
)

SPURIOUS_GIT_CLASSES = frozenset(
    {
        GitErrorClass.NET,
        GitErrorClass.OS,
        GitErrorClass.ZLIB,
        GitErrorClass.HTTP,
    }
)
SPURIOUS_CURL_CODES = frozenset(
    {
        CurlCode.COULDNT_CONNECT,
        CurlCode.COULDNT_RESOLVE_PROXY,
        CurlCode.COULDNT_RESOLVE_HOST,
        CurlCode.OPERATION_TIMEDOUT,
        CurlCode.RECV_ERROR,
        CurlCode.SEND_ERROR,
        CurlCode.HTTP2,
        CurlCode.HTTP2_STREAM,
        CurlCode.SSL_CONNECT_ERROR,
        CurlCode.PARTIAL_FILE,
    }
)
CERTIFICATE_CURL_CODES = frozenset(
    {
        CurlCode.PEER_FAILED_VERIFICATION,
        CurlCode.SSL_CERTPROBLEM,
    }
)


def is_spurious_git_error(error: GitError) -> bool:
    """Return true for transport-level git failures other than trust errors."""
    if error.error_class not in SPURIOUS_GIT_CLASSES:
        return False
    # A retry cannot change a certificate trust decision.
    return error.code != GitErrorCode.CERTIFICATE


def is_spurious_curl_error(error: CurlError) -> bool:
    """Return true for connection, timeout and truncated-transfer failures."""
    return error.code in SPURIOUS_CURL_CODES


def is_spurious_http_status(code: int) -> bool:
    """Return true for server-error statuses."""
    return 500 <= code <= 599


def _verdict(error: BaseException) -> bool | None:
    """Classify one node of a cause chain, ``None`` when nothing matches."""
    if isinstance(error, GitError):
        if error.error_class in SPURIOUS_GIT_CLASSES:
            return is_spurious_git_error(error)
        return None
    if isinstance(error, CurlError):
        if error.code in CERTIFICATE_CURL_CODES:
            return False
        if is_spurious_curl_error(error):
            return True
        return None
    if isinstance(error, HttpNotSuccessful):
        return True if is_spurious_http_status(error.code) else None
    if isinstance(error, FetchError):
        return True if error.is_spurious() else None
    return None


def is_spurious(error: BaseException) -> bool:
    """Return true when the cause chain looks transient.

    The first node carrying a verdict decides. Certificate failures decide
    fatal, so a transient error further down the chain cannot override them.
    Unknown error kinds carry no verdict, and a chain holding nothing
    recognizable is treated as fatal.
    """
    for cause in iter_causes(error):
        verdict = _verdict(cause)
        if verdict is not None:
            return verdict
    return False
