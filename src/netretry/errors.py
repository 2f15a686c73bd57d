"""Error kinds raised by the transports that netretry knows how to classify.

Each transport raises its own error kind at the point of failure and carries
the structured fields the classifier needs. Context is added with ordinary
exception chaining, so the classifiable error usually sits at the bottom of a
cause chain rather than at the top.
"""

from __future__ import annotations

from collections.abc import Iterator
from enum import IntEnum


class GitErrorClass(IntEnum):
    """Error classes reported by the git transport (libgit2 numbering)."""

    NONE = 0
    NO_MEMORY = 1
    OS = 2
    INVALID = 3
    REFERENCE = 4
    ZLIB = 5
    REPOSITORY = 6
    CONFIG = 7
    REGEX = 8
    ODB = 9
    INDEX = 10
    OBJECT = 11
    NET = 12
    TAG = 13
    TREE = 14
    INDEXER = 15
    SSL = 16
    SUBMODULE = 17
    THREAD = 18
    STASH = 19
    CHECKOUT = 20
    FETCH_HEAD = 21
    MERGE = 22
    SSH = 23
    FILTER = 24
    REVERT = 25
    CALLBACK = 26
    CHERRYPICK = 27
    DESCRIBE = 28
    REBASE = 29
    FILESYSTEM = 30
    PATCH = 31
    WORKTREE = 32
    SHA1 = 33
    HTTP = 34


class GitErrorCode(IntEnum):
    """Error codes reported by the git transport (libgit2 numbering)."""

    GENERIC = -1
    NOT_FOUND = -3
    EXISTS = -4
    AMBIGUOUS = -5
    BUFFER_TOO_SHORT = -6
    USER = -7
    BARE_REPO = -8
    UNBORN_BRANCH = -9
    UNMERGED = -10
    NOT_FAST_FORWARD = -11
    INVALID_SPEC = -12
    CONFLICT = -13
    LOCKED = -14
    MODIFIED = -15
    AUTH = -16
    CERTIFICATE = -17
    APPLIED = -18
    PEEL = -19
    EOF = -20
    INVALID = -21
    UNCOMMITTED = -22
    DIRECTORY = -23


class CurlCode(IntEnum):
    """Result codes of the HTTP/TLS client (libcurl ``CURLcode`` numbering)."""

    UNSUPPORTED_PROTOCOL = 1
    FAILED_INIT = 2
    URL_MALFORMAT = 3
    COULDNT_RESOLVE_PROXY = 5
    COULDNT_RESOLVE_HOST = 6
    COULDNT_CONNECT = 7
    HTTP2 = 16
    PARTIAL_FILE = 18
    HTTP_RETURNED_ERROR = 22
    WRITE_ERROR = 23
    READ_ERROR = 26
    OPERATION_TIMEDOUT = 28
    SSL_CONNECT_ERROR = 35
    BAD_FUNCTION_ARGUMENT = 43
    TOO_MANY_REDIRECTS = 47
    GOT_NOTHING = 52
    SEND_ERROR = 55
    RECV_ERROR = 56
    SSL_CERTPROBLEM = 58
    PEER_FAILED_VERIFICATION = 60
    BAD_CONTENT_ENCODING = 61
    HTTP2_STREAM = 92


class NetworkError(RuntimeError):
    """Base exception for failures raised by a network transport."""


class GitError(NetworkError):
    """Raised by the git transport.

    Attributes:
        error_class: Subsystem that reported the failure.
        code: Specific failure code within that subsystem.
    """

    def __init__(
        self,
        message: str,
        *,
        error_class: GitErrorClass,
        code: GitErrorCode = GitErrorCode.GENERIC,
    ) -> None:
        """Initialize git error metadata.

        Args:
            message: Human-readable error message.
            error_class: Git error class reported by the transport.
            code: Git error code reported by the transport.
        """
        super().__init__(message)
        self.error_class = error_class
        self.code = code


class CurlError(NetworkError):
    """Raised by the HTTP/TLS client for transfer-level failures."""

    def __init__(self, message: str, *, code: CurlCode) -> None:
        super().__init__(message)
        self.code = code


class HttpNotSuccessful(NetworkError):
    """Raised when a request completed with a non-2xx status."""

    def __init__(self, *, code: int, url: str, body: bytes = b"") -> None:
        """Initialize response metadata.

        Args:
            code: HTTP status code of the response.
            url: Requested URL.
            body: Raw response body, possibly empty.
        """
        message = f"failed to get successful HTTP response from `{url}`, got {code}"
        if body:
            message = f"{message}\nbody:\n{body.decode('utf-8', errors='replace')}"
        super().__init__(message)
        self.code = code
        self.url = url
        self.body = body


class FetchError(NetworkError):
    """Raised by the fetch subsystem, which knows whether it is worth retrying."""

    def __init__(self, message: str, *, spurious: bool) -> None:
        super().__init__(message)
        self.spurious = spurious

    def is_spurious(self) -> bool:
        """Return true when the fetch subsystem judged the failure transient."""
        return self.spurious


class ContextError(RuntimeError):
    """Describes what was being attempted when an underlying error occurred."""


def with_context(error: BaseException, message: str) -> ContextError:
    """Wrap ``error`` in a context layer whose cause is ``error``."""
    wrapped = ContextError(message)
    wrapped.__cause__ = error
    return wrapped


def iter_causes(error: BaseException) -> Iterator[BaseException]:
    """Yield ``error`` and its underlying causes, outermost first."""
    seen: set[int] = set()
    current: BaseException | None = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        if current.__cause__ is not None:
            current = current.__cause__
        elif current.__suppress_context__:
            current = None
        else:
            current = current.__context__


def root_cause(error: BaseException) -> BaseException:
    """Return the innermost cause of ``error``."""
    innermost = error
    for innermost in iter_causes(error):
        pass
    return innermost
