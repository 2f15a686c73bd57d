"""HTTP downloads over httpx with spurious-failure retries.

httpx failures are translated into :class:`~netretry.errors.CurlError` and
non-2xx responses into :class:`~netretry.errors.HttpNotSuccessful` right where
they happen, so the classifier only ever deals with netretry's own error kinds.
"""

from __future__ import annotations

import ssl
from typing import NoReturn

import httpx

from netretry.capabilities import CapabilityPolicy, enable_capability
from netretry.errors import (
    CurlCode,
    CurlError,
    HttpNotSuccessful,
    iter_causes,
    with_context,
)
from netretry.logging import AnyLogger, get_logger
from netretry.retry import Retry
from netretry.settings import NetSettings

_RESOLVE_FAILURE_MARKERS = (
    "name or service not known",
    "nodename nor servname",
    "temporary failure in name resolution",
    "getaddrinfo failed",
    "no address associated",
)
_PARTIAL_TRANSFER_MARKERS = ("incomplete", "peer closed")
_CERTIFICATE_MARKERS = ("certificate_verify_failed", "certificate verify failed")
_TLS_MARKERS = ("[ssl",)
_HTTP2_MARKERS = ("connectionterminated", "goaway")


def _message_contains(exc: BaseException, markers: tuple[str, ...]) -> bool:
    message = str(exc).lower()
    return any(marker in message for marker in markers)


def _tls_failure_code(exc: httpx.RequestError) -> CurlCode | None:
    causes = list(iter_causes(exc))
    if any(
        isinstance(cause, ssl.SSLCertVerificationError)
        or _message_contains(cause, _CERTIFICATE_MARKERS)
        for cause in causes
    ):
        return CurlCode.PEER_FAILED_VERIFICATION
    if any(
        isinstance(cause, ssl.SSLError) or _message_contains(cause, _TLS_MARKERS)
        for cause in causes
    ):
        return CurlCode.SSL_CONNECT_ERROR
    return None


def _is_http2_failure(exc: httpx.RequestError) -> bool:
    return any(
        type(cause).__module__.split(".")[0] == "h2"
        or _message_contains(cause, _HTTP2_MARKERS)
        for cause in iter_causes(exc)
    )


def _curl_code_for(exc: httpx.RequestError) -> CurlCode:
    if isinstance(exc, httpx.ProxyError):
        return CurlCode.COULDNT_RESOLVE_PROXY
    if isinstance(exc, httpx.TimeoutException):
        return CurlCode.OPERATION_TIMEDOUT
    if isinstance(exc, httpx.NetworkError):
        tls_code = _tls_failure_code(exc)
        if tls_code is not None:
            return tls_code
    if isinstance(exc, httpx.ConnectError):
        if _message_contains(exc, _RESOLVE_FAILURE_MARKERS):
            return CurlCode.COULDNT_RESOLVE_HOST
        return CurlCode.COULDNT_CONNECT
    if isinstance(exc, httpx.WriteError):
        return CurlCode.SEND_ERROR
    if isinstance(exc, httpx.NetworkError):
        return CurlCode.RECV_ERROR
    if isinstance(exc, httpx.RemoteProtocolError):
        if _message_contains(exc, _PARTIAL_TRANSFER_MARKERS):
            return CurlCode.PARTIAL_FILE
        if _message_contains(exc, ("stream",)):
            return CurlCode.HTTP2_STREAM
        if _is_http2_failure(exc):
            return CurlCode.HTTP2
        return CurlCode.RECV_ERROR
    if isinstance(exc, httpx.UnsupportedProtocol):
        return CurlCode.UNSUPPORTED_PROTOCOL
    if isinstance(exc, httpx.LocalProtocolError):
        return CurlCode.BAD_FUNCTION_ARGUMENT
    if isinstance(exc, httpx.TooManyRedirects):
        return CurlCode.TOO_MANY_REDIRECTS
    if isinstance(exc, httpx.DecodingError):
        return CurlCode.BAD_CONTENT_ENCODING
    return CurlCode.GOT_NOTHING


def translate_request_error(exc: httpx.RequestError) -> CurlError:
    """Map an httpx request failure onto the equivalent curl result code."""
    message = str(exc) or exc.__class__.__name__
    translated = CurlError(message, code=_curl_code_for(exc))
    translated.__cause__ = exc
    return translated


def check_response(response: httpx.Response) -> httpx.Response:
    """Return ``response`` when successful, raise ``HttpNotSuccessful`` otherwise."""
    if response.is_success:
        return response
    raise HttpNotSuccessful(
        code=response.status_code,
        url=str(response.request.url),
        body=response.content,
    )


def build_http_client(
    settings: NetSettings,
    *,
    policy: CapabilityPolicy | None = None,
    logger: AnyLogger | None = None,
) -> httpx.Client:
    """Build an ``httpx.Client`` configured from ``settings``.

    HTTP/2 needs the optional ``h2`` package. Whether its absence is fatal is
    decided by the capability policy.
    """
    resolved_policy = (
        settings.resolved_capability_policy() if policy is None else policy
    )
    resolved_logger = get_logger(__name__) if logger is None else logger
    timeout = httpx.Timeout(settings.timeout_seconds)
    clients: list[httpx.Client] = []

    def _enable_http2() -> None:
        clients.append(httpx.Client(http2=True, timeout=timeout))

    if settings.http2 and enable_capability(
        resolved_policy,
        "http2",
        _enable_http2,
        logger=resolved_logger,
    ):
        return clients[0]
    return httpx.Client(timeout=timeout)


def _raise_download_failure(url: str, exc: Exception) -> NoReturn:
    if isinstance(exc, httpx.RequestError):
        exc = translate_request_error(exc)
    raise with_context(exc, f"failed to download from `{url}`") from exc


def download(client: httpx.Client, url: str, *, retry: Retry) -> bytes:
    """Download ``url``, retrying spurious failures within ``retry``'s budget."""

    def _download_once() -> bytes:
        try:
            response = check_response(client.get(url))
        except (httpx.RequestError, HttpNotSuccessful) as exc:
            _raise_download_failure(url, exc)
        return response.content

    return retry.run(_download_once)


async def download_async(
    client: httpx.AsyncClient,
    url: str,
    *,
    retry: Retry,
) -> bytes:
    """Async counterpart of :func:`download`."""

    async def _download_once() -> bytes:
        try:
            response = check_response(await client.get(url))
        except (httpx.RequestError, HttpNotSuccessful) as exc:
            _raise_download_failure(url, exc)
        return response.content

    return await retry.run_async(_download_once)
