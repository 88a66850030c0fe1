"""Tests for exception hierarchy."""

from support_chat.exceptions import (
    SupportChatError,
    SupportChatConfigError,
    SupportChatTransportError,
    SupportChatHTTPError,
    SupportChatAuthError,
    SupportChatResponseError,
)


def test_all_inherit_from_base():
    for exc_class in [
        SupportChatConfigError,
        SupportChatTransportError,
        SupportChatHTTPError,
        SupportChatAuthError,
        SupportChatResponseError,
    ]:
        assert issubclass(exc_class, SupportChatError)


def test_auth_error_is_http_error():
    assert issubclass(SupportChatAuthError, SupportChatHTTPError)


def test_http_error_keeps_status():
    e = SupportChatHTTPError("GET /x failed with 502", 502)
    assert e.status_code == 502
    assert str(e) == "GET /x failed with 502"
