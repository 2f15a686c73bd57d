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
    root_cause,
    with_context,
)


def test_http_not_successful_message_without_body() -> None:
    error = HttpNotSuccessful(code=404, url="https://example.com/a")

    assert str(error) == (
        "failed to get successful HTTP response from `https://example.com/a`, "
        "got 404"
    )
    assert error.body == b""


def test_http_not_successful_message_includes_decoded_body() -> None:
    error = HttpNotSuccessful(
        code=503,
        url="https://example.com/a",
        body=b"try again \xff",
    )

    assert str(error).endswith("got 503\nbody:\ntry again �")
    assert error.code == 503
    assert error.url == "https://example.com/a"


def test_git_error_defaults_to_generic_code() -> None:
    error = GitError("failed", error_class=GitErrorClass.NET)

    assert error.code is GitErrorCode.GENERIC
    assert error.error_class is GitErrorClass.NET


def test_curl_codes_match_libcurl_numbering() -> None:
    assert CurlCode.COULDNT_CONNECT == 7
    assert CurlCode.OPERATION_TIMEDOUT == 28
    assert CurlCode.HTTP2_STREAM == 92


def test_fetch_error_predicate() -> None:
    assert FetchError("io", spurious=True).is_spurious()
    assert not FetchError("bad pack", spurious=False).is_spurious()


def test_with_context_chains_original_error() -> None:
    root = CurlError("couldn't connect", code=CurlCode.COULDNT_CONNECT)

    wrapped = with_context(root, "failed to download")

    assert str(wrapped) == "failed to download"
    assert wrapped.__cause__ is root


def test_iter_causes_walks_outermost_to_innermost() -> None:
    root = CurlError("couldn't connect", code=CurlCode.COULDNT_CONNECT)
    middle = with_context(root, "middle")
    outer = with_context(middle, "outer")

    assert list(iter_causes(outer)) == [outer, middle, root]
    assert root_cause(outer) is root


def test_root_cause_of_unchained_error_is_itself() -> None:
    error = ValueError("plain")

    assert root_cause(error) is error
