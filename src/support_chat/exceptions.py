"""Unified exception hierarchy for support-chat."""


class SupportChatError(Exception):
    """Base exception for all support-chat errors."""


class SupportChatConfigError(SupportChatError):
    """Missing or invalid client configuration."""


# Wire layer
class SupportChatTransportError(SupportChatError):
    """The request never produced an HTTP response (DNS, connect, timeout)."""


class SupportChatHTTPError(SupportChatError):
    """The backend answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class SupportChatAuthError(SupportChatHTTPError):
    """The bearer token was rejected (401/403)."""


class SupportChatResponseError(SupportChatError):
    """The response body did not have the expected shape."""
