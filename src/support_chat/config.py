"""Client settings, passed directly or read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass

from support_chat.exceptions import SupportChatConfigError

ENV_API_URL = "SUPPORT_CHAT_API_URL"
ENV_TOKEN = "SUPPORT_CHAT_TOKEN"
ENV_MESSAGE_POLL = "SUPPORT_CHAT_MESSAGE_POLL_SECONDS"
ENV_LIST_POLL = "SUPPORT_CHAT_LIST_POLL_SECONDS"
ENV_TIMEOUT = "SUPPORT_CHAT_TIMEOUT"

DEFAULT_MESSAGE_POLL_INTERVAL = 3.0
DEFAULT_LIST_POLL_INTERVAL = 10.0
DEFAULT_TIMEOUT = 10.0
DEFAULT_ADMIN_SEARCH_LIMIT = 10


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise SupportChatConfigError(f"{name} must be a number, got {raw!r}") from e
    if value <= 0:
        raise SupportChatConfigError(f"{name} must be positive, got {value}")
    return value


@dataclass
class ChatSettings:
    """Connection and polling settings for the support chat.

    Args:
        base_url: REST backend root, e.g. ``https://api.example.com/api``.
        token: Bearer token of the signed-in student or tutor.
        message_poll_interval: Seconds between message refreshes of the
            active conversation.
        list_poll_interval: Seconds between conversation-list refreshes.
        timeout: Per-request timeout in seconds.
        admin_search_limit: Max results requested by admin search.
        restore_draft_on_failure: Put the text of a failed send back
            into the compose box.
    """

    base_url: str
    token: str
    message_poll_interval: float = DEFAULT_MESSAGE_POLL_INTERVAL
    list_poll_interval: float = DEFAULT_LIST_POLL_INTERVAL
    timeout: float = DEFAULT_TIMEOUT
    admin_search_limit: int = DEFAULT_ADMIN_SEARCH_LIMIT
    restore_draft_on_failure: bool = True

    def __post_init__(self):
        if not self.base_url:
            raise SupportChatConfigError(
                "API base URL is required. "
                f"Pass it directly or set {ENV_API_URL} in your environment."
            )
        if not self.token:
            raise SupportChatConfigError(
                "API token is required. "
                f"Pass it directly or set {ENV_TOKEN} in your environment."
            )
        for name in ("message_poll_interval", "list_poll_interval", "timeout"):
            value = getattr(self, name)
            if value <= 0:
                raise SupportChatConfigError(f"{name} must be positive, got {value}")
        if self.admin_search_limit < 1:
            raise SupportChatConfigError(
                f"admin_search_limit must be at least 1, got {self.admin_search_limit}"
            )
        self.base_url = self.base_url.rstrip("/")

    @classmethod
    def from_env(
        cls,
        base_url: str | None = None,
        token: str | None = None,
        **overrides,
    ) -> ChatSettings:
        """Build settings, falling back to environment variables."""
        kwargs = {
            "message_poll_interval": _float_env(
                ENV_MESSAGE_POLL, DEFAULT_MESSAGE_POLL_INTERVAL
            ),
            "list_poll_interval": _float_env(ENV_LIST_POLL, DEFAULT_LIST_POLL_INTERVAL),
            "timeout": _float_env(ENV_TIMEOUT, DEFAULT_TIMEOUT),
        }
        kwargs.update(overrides)
        return cls(
            base_url=base_url or os.environ.get(ENV_API_URL, ""),
            token=token or os.environ.get(ENV_TOKEN, ""),
            **kwargs,
        )
