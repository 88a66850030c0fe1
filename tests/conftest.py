"""Shared fixtures: an in-memory support backend."""

import asyncio

import pytest

from support_chat.api.base import AsyncSupportAPI
from support_chat.chat.models import AdminUser, ChatContact, ChatMessage
from support_chat.exceptions import SupportChatHTTPError, SupportChatTransportError


class FakeSupportAPI(AsyncSupportAPI):
    """Backend double that records every call."""

    def __init__(self):
        self.admins = [
            AdminUser(id="a1", full_name="Alice Admin", email="alice@example.com", role="admin"),
            AdminUser(id="a2", full_name="Mo Manager", email="mo@example.com", role="manager"),
        ]
        self.chats: list[ChatContact] = []
        self.messages: dict[str, list[ChatMessage]] = {}
        self.calls: list[tuple] = []
        self.fail_send = False
        self.fail_start = False
        self.fail_chats = False
        self.send_delay = 0.0
        self.chats_delay = 0.0
        self._next_id = 1

    def count(self, name: str, *args) -> int:
        return sum(1 for call in self.calls if call[0] == name and call[1:1 + len(args)] == args)

    async def list_admins(self, search=None, limit=None):
        self.calls.append(("list_admins", search, limit))
        if not search:
            return list(self.admins)
        needle = search.lower()
        return [a for a in self.admins if needle in a.full_name.lower()][:limit]

    async def list_chats(self):
        self.calls.append(("list_chats",))
        if self.chats_delay:
            await asyncio.sleep(self.chats_delay)
        if self.fail_chats:
            raise SupportChatTransportError("connection refused")
        return [ChatContact(**vars(c)) for c in self.chats]

    async def get_messages(self, chat_id):
        self.calls.append(("get_messages", chat_id))
        return list(self.messages.get(chat_id, []))

    async def start_chat_with_admin(self, admin_id):
        self.calls.append(("start_chat_with_admin", admin_id))
        if self.fail_start:
            raise SupportChatHTTPError("POST start-with-admin failed with 500", 500)
        chat_id = f"chat-{admin_id}"
        if not any(c.id == chat_id for c in self.chats):
            self.chats.append(ChatContact(id=chat_id, name=f"Chat with {admin_id}"))
        return chat_id

    async def send_message(self, chat_id, text):
        self.calls.append(("send_message", chat_id, text))
        if self.send_delay:
            await asyncio.sleep(self.send_delay)
        if self.fail_send:
            raise SupportChatHTTPError("POST messages failed with 500", 500)
        message = ChatMessage(
            id=f"m{self._next_id}",
            sender_id="u1",
            sender_name="Sam Student",
            sender_role="student",
            body=text,
            created_at="2024-01-15T10:00:00Z",
        )
        self._next_id += 1
        self.messages.setdefault(chat_id, []).append(message)
        return message


@pytest.fixture
def fake_api():
    return FakeSupportAPI()
