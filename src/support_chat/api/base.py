"""Abstract interface for the support-messaging backend."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from support_chat.chat.models import AdminUser, ChatContact, ChatMessage


class AsyncSupportAPI(ABC):
    """Async operations the chat session needs from the backend."""

    @abstractmethod
    async def list_admins(
        self, search: str | None = None, limit: int | None = None
    ) -> list[AdminUser]:
        """List administrators, optionally filtered by a search term."""
        ...

    @abstractmethod
    async def list_chats(self) -> list[ChatContact]:
        """List the current user's conversations."""
        ...

    @abstractmethod
    async def get_messages(self, chat_id: str) -> list[ChatMessage]:
        """Full message history of a conversation."""
        ...

    @abstractmethod
    async def start_chat_with_admin(self, admin_id: str) -> str:
        """Create or fetch the conversation with an admin; returns its id."""
        ...

    @abstractmethod
    async def send_message(self, chat_id: str, text: str) -> ChatMessage:
        """Send a text message; returns the canonical server message."""
        ...
