"""Support-messaging REST client with sync and async interfaces."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from support_chat.api.base import AsyncSupportAPI
from support_chat.chat import parser
from support_chat.chat.models import AdminUser, ChatContact, ChatMessage
from support_chat.config import ChatSettings
from support_chat.exceptions import (
    SupportChatAuthError,
    SupportChatError,
    SupportChatHTTPError,
    SupportChatResponseError,
    SupportChatTransportError,
)

logger = logging.getLogger(__name__)

ADMINS_PATH = "/support-messaging/admins"
CHATS_PATH = "/support-messaging/chats"
START_WITH_ADMIN_PATH = "/support-messaging/chats/start-with-admin"


def _messages_path(chat_id: str) -> str:
    return f"{CHATS_PATH}/{chat_id}/messages"


def _headers(token: str) -> dict[str, str]:
    return {
        "Authorization": f"Bearer {token}",
        "Content-Type": "application/json",
        "Accept": "application/json",
    }


def _admin_params(search: str | None, limit: int | None) -> dict[str, Any]:
    params: dict[str, Any] = {}
    if search:
        params["search"] = search
    if limit:
        params["limit"] = str(limit)
    return params


def _decode(response: httpx.Response, method: str, path: str) -> Any:
    """Check status and return the JSON body, mapping failures to our errors."""
    if response.status_code in (401, 403):
        raise SupportChatAuthError(
            f"{method} {path} rejected with {response.status_code}",
            response.status_code,
        )
    if not response.is_success:
        raise SupportChatHTTPError(
            f"{method} {path} failed with {response.status_code}",
            response.status_code,
        )
    try:
        return response.json()
    except ValueError as e:
        raise SupportChatResponseError(f"{method} {path} returned invalid JSON") from e


class SupportMessagingClient:
    """Synchronous support-messaging client.

    Args:
        settings: Base URL, token and timeout.
        transport: Optional httpx transport (used by tests).
    """

    def __init__(
        self,
        settings: ChatSettings,
        transport: httpx.BaseTransport | None = None,
    ):
        self.settings = settings
        self._transport = transport

    def _request(
        self,
        method: str,
        path: str,
        params: dict | None = None,
        json: dict | None = None,
    ) -> Any:
        try:
            with httpx.Client(
                base_url=self.settings.base_url,
                timeout=self.settings.timeout,
                transport=self._transport,
            ) as client:
                response = client.request(
                    method,
                    path,
                    params=params,
                    json=json,
                    headers=_headers(self.settings.token),
                )
            return _decode(response, method, path)
        except SupportChatError:
            raise
        except httpx.HTTPError as e:
            raise SupportChatTransportError(f"{method} {path} failed: {e}") from e

    def list_admins(
        self, search: str | None = None, limit: int | None = None
    ) -> list[AdminUser]:
        """List administrators, optionally filtered by name or email."""
        payload = self._request("GET", ADMINS_PATH, params=_admin_params(search, limit))
        return parser.parse_admins(parser.unwrap(payload))

    def list_chats(self) -> list[ChatContact]:
        """List the current user's conversations with administrators."""
        payload = self._request("GET", CHATS_PATH)
        return parser.parse_contacts(parser.unwrap(payload))

    def get_messages(self, chat_id: str) -> list[ChatMessage]:
        """Fetch the full message history of a conversation."""
        payload = self._request("GET", _messages_path(chat_id))
        return parser.parse_messages(parser.unwrap(payload, "messages"))

    def start_chat_with_admin(self, admin_id: str) -> str:
        """Create (or fetch) the conversation with an admin and return its id."""
        payload = self._request("POST", START_WITH_ADMIN_PATH, json={"adminId": admin_id})
        return parser.parse_chat_id(payload)

    def send_message(self, chat_id: str, text: str) -> ChatMessage:
        """Send a text message and return the stored message."""
        payload = self._request("POST", _messages_path(chat_id), json={"message": text})
        return parser.parse_message(parser.unwrap(payload))


class AsyncSupportMessagingClient(AsyncSupportAPI):
    """Async support-messaging client used by the chat session.

    Args:
        settings: Base URL, token and timeout.
        transport: Optional httpx async transport (used by tests).
    """

    def __init__(
        self,
        settings: ChatSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings
        self._transport = transport

    async def _request(
        self,
        method: str,
        path: str,
        params: dict | None = None,
        json: dict | None = None,
    ) -> Any:
        try:
            async with httpx.AsyncClient(
                base_url=self.settings.base_url,
                timeout=self.settings.timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(
                    method,
                    path,
                    params=params,
                    json=json,
                    headers=_headers(self.settings.token),
                )
            return _decode(response, method, path)
        except SupportChatError:
            raise
        except httpx.HTTPError as e:
            raise SupportChatTransportError(f"{method} {path} failed: {e}") from e

    async def list_admins(
        self, search: str | None = None, limit: int | None = None
    ) -> list[AdminUser]:
        payload = await self._request(
            "GET", ADMINS_PATH, params=_admin_params(search, limit)
        )
        return parser.parse_admins(parser.unwrap(payload))

    async def list_chats(self) -> list[ChatContact]:
        payload = await self._request("GET", CHATS_PATH)
        return parser.parse_contacts(parser.unwrap(payload))

    async def get_messages(self, chat_id: str) -> list[ChatMessage]:
        payload = await self._request("GET", _messages_path(chat_id))
        return parser.parse_messages(parser.unwrap(payload, "messages"))

    async def start_chat_with_admin(self, admin_id: str) -> str:
        payload = await self._request(
            "POST", START_WITH_ADMIN_PATH, json={"adminId": admin_id}
        )
        return parser.parse_chat_id(payload)

    async def send_message(self, chat_id: str, text: str) -> ChatMessage:
        payload = await self._request(
            "POST", _messages_path(chat_id), json={"message": text}
        )
        return parser.parse_message(parser.unwrap(payload))
