"""REST clients for the support-messaging backend."""

from support_chat.api.base import AsyncSupportAPI
from support_chat.api.client import AsyncSupportMessagingClient, SupportMessagingClient

__all__ = ["AsyncSupportAPI", "AsyncSupportMessagingClient", "SupportMessagingClient"]
